import pytest
from django.core.exceptions import ValidationError
from django.core.management import call_command, CommandError

from core.models import User
from points.models import PointsLedgerEntry
from points.services import InsufficientPointsError, credit, debit, ledger_total


pytestmark = pytest.mark.django_db


class TestLedger:
    def test_credit_updates_balance_and_log(self, household):
        assert credit(household, 15, 'Bag approved', reference='BAG-1') == 15
        assert credit(household, 5, 'Bag approved', reference='BAG-2') == 20
        household.refresh_from_db()
        assert household.points_balance == 20
        assert ledger_total(household) == 20

    def test_debit_within_balance(self, household):
        credit(household, 30, 'seed')
        assert debit(household, 12, 'Redeemed') == 18
        assert ledger_total(household) == 18

    def test_debit_exact_balance_reaches_zero(self, household):
        credit(household, 10, 'seed')
        assert debit(household, 10, 'Redeemed') == 0

    def test_debit_beyond_balance_changes_nothing(self, household):
        credit(household, 10, 'seed')
        with pytest.raises(InsufficientPointsError):
            debit(household, 11, 'Redeemed')
        household.refresh_from_db()
        assert household.points_balance == 10
        assert PointsLedgerEntry.objects.filter(household=household).count() == 1

    def test_debit_guard_uses_database_balance(self, household):
        credit(household, 100, 'seed')
        # Another request spent most of the balance after this object was loaded
        User.objects.filter(pk=household.pk).update(points_balance=10)
        assert household.points_balance == 100
        with pytest.raises(InsufficientPointsError):
            debit(household, 50, 'Redeemed')
        household.refresh_from_db()
        assert household.points_balance == 10

    @pytest.mark.parametrize('amount', [0, -5, 2.5])
    def test_amount_must_be_positive_integer(self, household, amount):
        with pytest.raises(ValidationError):
            credit(household, amount, 'bad')
        with pytest.raises(ValidationError):
            debit(household, amount, 'bad')


class TestPointsApi:
    def test_summary_and_history(self, client_for, household):
        for i in range(7):
            credit(household, 1, f'Bag {i}')
        client = client_for(household)

        summary = client.get('/api/points/me/')
        assert summary.status_code == 200
        assert summary.data['points_balance'] == 7
        assert len(summary.data['recent_entries']) == 5

        history = client.get('/api/points/history/')
        assert history.data['count'] == 7

    def test_staff_have_no_points_page(self, client_for, collector):
        assert client_for(collector).get('/api/points/me/').status_code == 403


class TestCheckPointsLedgerCommand:
    def test_clean_ledger(self, household, capsys):
        credit(household, 5, 'seed')
        call_command('check_points_ledger')
        assert 'All household balances match' in capsys.readouterr().out

    def test_reports_mismatch_without_fixing(self, household, capsys):
        credit(household, 5, 'seed')
        User.objects.filter(pk=household.pk).update(points_balance=8)
        call_command('check_points_ledger')
        out = capsys.readouterr().out
        assert 'balance 8, ledger 5' in out
        household.refresh_from_db()
        assert household.points_balance == 8

    def test_fail_on_mismatch(self, household):
        User.objects.filter(pk=household.pk).update(points_balance=3)
        with pytest.raises(CommandError):
            call_command('check_points_ledger', '--fail-on-mismatch')
