import csv
from io import BytesIO, StringIO

from openpyxl import Workbook
from openpyxl.styles import Font, Alignment
from openpyxl.utils import get_column_letter

USER_EXPORT_COLUMNS = ('Name', 'Phone', 'Location', 'Points', 'Joined')


def user_rows(users):
    for user in users:
        yield (
            user.name,
            user.phone or '',
            user.location or '',
            user.points_balance,
            user.date_joined.strftime('%Y-%m-%d'),
        )


def style_header_row(sheet, row_number=1):
    """Bold, centred header cells."""
    header_font = Font(bold=True, name='Calibri', size=12)
    center_alignment = Alignment(horizontal='center', vertical='center')
    for cell in sheet[row_number]:
        cell.font = header_font
        cell.alignment = center_alignment


def adjust_column_widths(sheet):
    """Size each column to its longest value."""
    for col_idx in range(1, sheet.max_column + 1):
        column_letter = get_column_letter(col_idx)
        lengths = [len(str(cell.value)) for cell in sheet[column_letter] if cell.value is not None]
        sheet.column_dimensions[column_letter].width = (max(lengths) if lengths else 0) + 2


def users_csv(users):
    buffer = StringIO()
    writer = csv.writer(buffer)
    writer.writerow(USER_EXPORT_COLUMNS)
    writer.writerows(user_rows(users))
    return buffer.getvalue()


def users_xlsx(users, title='Users'):
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = title[:31]
    sheet.append(USER_EXPORT_COLUMNS)
    for row in user_rows(users):
        sheet.append(row)
    style_header_row(sheet)
    adjust_column_widths(sheet)

    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()
