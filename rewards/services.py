import logging
import secrets

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction

from core.tasks import notify
from core.validators import meter_number_validator, normalize_phone
from points.services import InsufficientPointsError, current_balance, debit
from .models import Redemption

logger = logging.getLogger(__name__)

# Extra inputs each reward category needs before it can be fulfilled
REQUIRED_FIELDS = {
    'airtime': ('phone_number',),
    'loyalty_points': ('phone_number',),
    'utility_token': ('meter_number',),
}

CONFIRMATION_ALPHABET = 'ABCDEFGHJKLMNPQRSTUVWXYZ23456789'


def required_fields(reward):
    return REQUIRED_FIELDS.get(reward.category, ())


def validate_form_inputs(reward, form_inputs):
    """Check and normalise the fields a reward needs. Returns the cleaned details dict."""
    form_inputs = form_inputs or {}
    details = {}
    errors = {}
    for field in required_fields(reward):
        value = str(form_inputs.get(field) or '').strip()
        if not value:
            errors[field] = f"{field.replace('_', ' ').capitalize()} is required for this reward."
            continue
        try:
            if field == 'phone_number':
                value = normalize_phone(value)
            elif field == 'meter_number':
                meter_number_validator(value)
        except ValidationError as e:
            errors[field] = e.messages[0]
            continue
        details[field] = value
    if errors:
        raise ValidationError(errors)
    return details


def generate_confirmation_code():
    suffix = ''.join(secrets.choice(CONFIRMATION_ALPHABET) for _ in range(8))
    return f"WW-{suffix}"


def redeem(household, reward, form_inputs=None):
    """
    Spend a household's points on a reward.

    Inputs and affordability are checked before anything is written; the
    guarded debit and the redemption record then commit together, so a
    rejected debit leaves neither.
    """
    if getattr(household, 'role', None) != 'household':
        raise ValidationError({"household": "Only household accounts can redeem rewards."})
    if not reward.is_available:
        raise ValidationError({"reward": "This reward is not currently available."})

    details = validate_form_inputs(reward, form_inputs)

    balance = current_balance(household)
    if reward.points_cost > balance:
        logger.warning(
            f"User {household.pk} cannot afford reward {reward.pk}: needs {reward.points_cost}, has {balance}"
        )
        raise InsufficientPointsError(balance=balance, required=reward.points_cost)

    for _ in range(5):
        code = generate_confirmation_code()
        if not Redemption.objects.filter(confirmation_code=code).exists():
            break

    try:
        with transaction.atomic():
            debit(household, reward.points_cost, f"Redeemed {reward.title}", reference=code)
            redemption = Redemption.objects.create(
                household=household,
                reward=reward,
                points_spent=reward.points_cost,
                status='completed',
                confirmation_code=code,
                details=details,
            )
            notify(
                recipient_id=household.pk,
                notification_type='redemption_completed',
                title="Reward redeemed",
                message=f"You redeemed {reward.title}. Confirmation code: {code}.",
                data={'redemption_id': redemption.pk, 'confirmation_code': code},
            )
    except IntegrityError:
        logger.error(f"Confirmation code collision while redeeming reward {reward.pk} for user {household.pk}")
        raise ValidationError({"detail": "Could not complete the redemption. Please try again."})

    logger.info(
        f"User {household.pk} redeemed reward {reward.pk} for {reward.points_cost} points ({code})"
    )
    return redemption
