from django.core.validators import RegexValidator
from rest_framework import serializers
from django.core.exceptions import ValidationError
from django.contrib.auth.password_validation import validate_password
import re

PHONE_REGEX = r'^(0[789][01]\d{8}|\+234[789][01]\d{8}|234[789][01]\d{8})$'
METER_REGEX = r'^\d{11,13}$'

phone_validator = RegexValidator(
    regex=PHONE_REGEX,
    message="Phone number must be: 080XXXXXXXX, +23480XXXXXXXX, or 23480XXXXXXXX"
)

meter_number_validator = RegexValidator(
    regex=METER_REGEX,
    message="Meter number must be 11 to 13 digits"
)


def normalize_phone(value):
    """Return the phone number in international form (234XXXXXXXXXX) without spaces or dashes."""
    cleaned = re.sub(r'[\s\-()]', '', value or '')
    phone_validator(cleaned)
    if cleaned.startswith('+'):
        cleaned = cleaned[1:]
    elif cleaned.startswith('0'):
        cleaned = '234' + cleaned[1:]
    return cleaned


def validate_password_strength(value):
    """
    Validate password meets strong requirements (consistent across all serializers)
    """
    try:
        validate_password(value)
    except ValidationError as e:
        raise serializers.ValidationError(list(e.messages))

    if len(value) < 8:
        raise serializers.ValidationError("Password must be at least 8 characters long")

    if not re.search(r'[A-Z]', value):
        raise serializers.ValidationError("Password must contain at least one uppercase letter")

    if not re.search(r'[a-z]', value):
        raise serializers.ValidationError("Password must contain at least one lowercase letter")

    if not re.search(r'[0-9]', value):
        raise serializers.ValidationError("Password must contain at least one digit")

    if not re.search(r'[^A-Za-z0-9]', value):
        raise serializers.ValidationError("Password must contain at least one special character")

    return value
