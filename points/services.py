import logging

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import F, Sum

from .models import PointsLedgerEntry

logger = logging.getLogger(__name__)
User = get_user_model()


class InsufficientPointsError(ValidationError):
    """Raised when a debit would take a balance below zero."""

    def __init__(self, balance=None, required=None):
        self.balance = balance
        self.required = required
        super().__init__({"points": "Insufficient points for this redemption."})


def _check_amount(amount):
    if not isinstance(amount, int) or isinstance(amount, bool) or amount <= 0:
        raise ValidationError({"amount": "Amount must be a positive whole number of points."})


def current_balance(household):
    return User.objects.values_list('points_balance', flat=True).get(pk=household.pk)


@transaction.atomic
def credit(household, amount, reason, reference=''):
    """Add points to a household and record the movement. Returns the new balance."""
    _check_amount(amount)
    User.objects.filter(pk=household.pk).update(points_balance=F('points_balance') + amount)
    PointsLedgerEntry.objects.create(
        household=household, points=amount, reason=reason, reference=reference
    )
    balance = current_balance(household)
    household.points_balance = balance
    logger.info(f"Credited {amount} points to user {household.pk} ({reason}); balance {balance}")
    return balance


@transaction.atomic
def debit(household, amount, reason, reference=''):
    """
    Remove points from a household.

    The decrement is a single conditional UPDATE guarded on the current
    balance, so two concurrent debits can never overdraw the account.
    """
    _check_amount(amount)
    affected = User.objects.filter(
        pk=household.pk, points_balance__gte=amount
    ).update(points_balance=F('points_balance') - amount)
    if not affected:
        balance = current_balance(household)
        logger.warning(
            f"Debit of {amount} points rejected for user {household.pk}: balance {balance}"
        )
        raise InsufficientPointsError(balance=balance, required=amount)

    PointsLedgerEntry.objects.create(
        household=household, points=-amount, reason=reason, reference=reference
    )
    balance = current_balance(household)
    household.points_balance = balance
    logger.info(f"Debited {amount} points from user {household.pk} ({reason}); balance {balance}")
    return balance


def ledger_total(household):
    total = PointsLedgerEntry.objects.filter(household=household).aggregate(total=Sum('points'))['total']
    return total or 0


def ledger_mismatches():
    """Yield (household, balance, ledger total) for every household whose balance disagrees with its log."""
    totals = dict(
        PointsLedgerEntry.objects.values('household')
        .annotate(total=Sum('points'))
        .values_list('household', 'total')
    )
    for household in User.objects.filter(role='household').order_by('pk'):
        total = totals.get(household.pk, 0)
        if total != household.points_balance:
            yield household, household.points_balance, total
