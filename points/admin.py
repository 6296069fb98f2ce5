from django.contrib import admin
from .models import PointsLedgerEntry


@admin.register(PointsLedgerEntry)
class PointsLedgerEntryAdmin(admin.ModelAdmin):
    list_display = ('household', 'points', 'reason', 'reference', 'created_at')
    search_fields = ('household__name', 'household__phone', 'reference')
    raw_id_fields = ('household',)
    date_hierarchy = 'created_at'

    def has_change_permission(self, request, obj=None):
        return False
