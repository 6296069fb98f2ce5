import hashlib
import hmac
import logging

from django.conf import settings
from django.contrib.auth import authenticate, get_user_model
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction

from .validators import normalize_phone

logger = logging.getLogger(__name__)
User = get_user_model()

STAFF_ROLE_DOMAINS = {
    'collector': 'COLLECTOR_EMAIL_DOMAIN',
    'receiver': 'RECEIVER_EMAIL_DOMAIN',
}


def resolve_identity(user):
    """
    Map an authenticated principal to its profile and role.

    Returns None when the principal is anonymous, deactivated or has no
    recognised role. Callers treat None as "not provisioned yet" and must
    not substitute a default role.
    """
    if not user or not user.is_authenticated or not user.is_active:
        return None
    if user.role not in dict(User.ROLE_CHOICES):
        return None
    return {'profile': user, 'role': user.role}


def phone_credentials(phone):
    """Synthesize the internal email/password pair used for phone sign-in."""
    normalized = normalize_phone(phone)
    email = f"{normalized}@{settings.PHONE_LOGIN_DOMAIN}"
    password = hmac.new(
        settings.SECRET_KEY.encode(),
        f"wastewise:{normalized}".encode(),
        hashlib.sha256,
    ).hexdigest()
    return normalized, email, password


def sign_in_with_phone(phone, name='', location=''):
    """
    Sign a household in by phone number, creating the account on first use.

    Returns (user, created).
    """
    normalized, email, password = phone_credentials(phone)

    user = authenticate(username=email, password=password)
    if user is not None:
        return user, False

    if User.objects.filter(email=email).exists():
        # The phone belongs to an account we cannot authenticate (e.g. deactivated)
        raise ValidationError({"phone": "This phone number cannot be used to sign in."})

    if not name or not name.strip():
        raise ValidationError({"name": "Name is required to create a new account."})

    try:
        with transaction.atomic():
            user = User.objects.create_user(
                email=email,
                name=name.strip(),
                password=password,
                phone=normalized,
                location=(location or '').strip(),
                role='household',
            )
    except IntegrityError:
        # Concurrent first sign-in with the same phone
        user = authenticate(username=email, password=password)
        if user is None:
            raise ValidationError({"phone": "This phone number cannot be used to sign in."})
        return user, False

    logger.info(f"Household account created for phone ending {normalized[-4:]}")
    return user, True


def validate_staff_email(email, role):
    """Collector and receiver accounts must use their organisation's email domain."""
    setting_name = STAFF_ROLE_DOMAINS.get(role)
    if setting_name is None:
        raise ValidationError({"role": "Staff accounts must be collectors or receivers."})
    domain = getattr(settings, setting_name)
    if not email.lower().endswith(f"@{domain.lower()}"):
        raise ValidationError({"email": f"{role.title()} accounts must use an @{domain} email address."})
    return email.lower()
