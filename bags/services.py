import logging
import secrets
import uuid
import zipfile
from io import BytesIO
from urllib.parse import parse_qs, urlencode, urlparse

import qrcode
from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction

from core.tasks import notify
from points.services import credit
from .models import (
    Bag, BagCode, CollectorReview, ReceiverReview,
    CATEGORY_CHOICES, CATEGORY_PREFIXES, DEFAULT_CATEGORY, DISAPPROVAL_REASONS, POINT_TARIFF
)

logger = logging.getLogger(__name__)

CODE_QUERY_PARAMS = ('code', 'bag', 'qr')
MAX_CODES_PER_BATCH = 500


class BagStateError(ValidationError):
    """Raised when a bag or review is not in a state that allows the requested transition."""


def extract_bag_code(payload):
    """
    Pull the bag code out of whatever a scanner produced: either the bare
    code or an activation URL carrying it in the query string.
    """
    value = (payload or '').strip()
    if not value:
        raise ValidationError({"code": "A bag code is required."})

    parsed = urlparse(value)
    if parsed.scheme in ('http', 'https') and parsed.netloc:
        params = parse_qs(parsed.query)
        for name in CODE_QUERY_PARAMS:
            if params.get(name) and params[name][0].strip():
                return params[name][0].strip().upper()
        raise ValidationError({"code": "No bag code found in the scanned link."})

    return value.upper()


def category_from_prefix(code):
    upper = code.upper()
    for prefix, category in CATEGORY_PREFIXES.items():
        if upper.startswith(prefix):
            return category
    return DEFAULT_CATEGORY


def has_known_prefix(code):
    return any(code.upper().startswith(prefix) for prefix in CATEGORY_PREFIXES)


def tariff(category):
    try:
        return POINT_TARIFF[category]
    except KeyError:
        raise ValidationError({"category": f"Unknown bag category '{category}'."})


def activation_url(code):
    return f"{settings.BAG_ACTIVATION_URL}?{urlencode({'code': code})}"


def _resolve_category(code, category=None):
    registered = BagCode.objects.filter(code=code).values_list('category', flat=True).first()
    if registered:
        return registered
    if category:
        if category not in dict(CATEGORY_CHOICES):
            raise ValidationError({"category": f"Unknown bag category '{category}'."})
        return category
    return category_from_prefix(code)


def activate_bag(code_or_url, household, category=None):
    """
    Register a bag against a household. Activation is idempotent: scanning
    an already-registered code returns the existing bag with created=False.

    Returns (bag, created).
    """
    if getattr(household, 'role', None) != 'household':
        raise ValidationError({"household": "Only household accounts can activate bags."})

    code = extract_bag_code(code_or_url)
    existing = Bag.objects.filter(qr_code=code).first()
    if existing is not None:
        logger.info(f"Bag {code} already activated (bag {existing.pk}); scan by user {household.pk} ignored")
        return existing, False

    resolved = _resolve_category(code, category)
    try:
        with transaction.atomic():
            bag, created = Bag.objects.get_or_create(
                qr_code=code,
                defaults={'household': household, 'category': resolved},
            )
    except IntegrityError:
        # Lost a race with another activation of the same code
        return Bag.objects.get(qr_code=code), False

    if created:
        logger.info(f"Bag {code} activated as {resolved} by user {household.pk}")
    return bag, created


def find_bag(code_or_url):
    code = extract_bag_code(code_or_url)
    return Bag.objects.select_related('household').filter(qr_code=code).first()


def review_bag(bag, collector, approve, reason=None, notes=''):
    """
    Record a collector's verdict on an activated bag.

    On approval the household is credited the tariff for the bag's category
    in the same transaction as the review, so a failure leaves neither.
    """
    reason = (reason or '').strip()
    if not approve:
        if not reason:
            raise ValidationError({"disapproval_reason": "A reason is required when disapproving a bag."})
        if reason not in DISAPPROVAL_REASONS:
            raise ValidationError({"disapproval_reason": f"'{reason}' is not a valid disapproval reason."})

    with transaction.atomic():
        locked = Bag.objects.select_for_update().get(pk=bag.pk)
        if locked.status != 'activated' or CollectorReview.objects.filter(bag=locked).exists():
            logger.warning(f"Collector {collector.pk} tried to review bag {locked.qr_code} in status {locked.status}")
            raise BagStateError({"bag": "This bag has already been reviewed."})

        points = tariff(locked.category) if approve else 0
        review = CollectorReview.objects.create(
            bag=locked,
            collector=collector,
            status='approved' if approve else 'disapproved',
            points_awarded=points,
            notes=notes or '',
            disapproval_reason='' if approve else reason,
        )
        locked.status = review.status
        locked.save(update_fields=['status'])

        if approve:
            credit(locked.household, points, f"Bag {locked.qr_code} approved", reference=f"BAG-{locked.pk}")
            notify(
                recipient_id=locked.household_id,
                notification_type='points_earned',
                title="Points earned",
                message=f"Your {locked.get_category_display().lower()} bag was approved: +{points} points.",
                data={'bag_id': locked.pk, 'points': points},
            )
        else:
            notify(
                recipient_id=locked.household_id,
                notification_type='bag_reviewed',
                title="Bag not approved",
                message=f"Your bag {locked.qr_code} was not approved: {reason}.",
                data={'bag_id': locked.pk, 'reason': reason},
            )

    bag.status = locked.status
    logger.info(f"Bag {locked.qr_code} {review.status} by collector {collector.pk} (+{points} points)")
    return review


def verify_review(collector_review, receiver, approve, notes=''):
    """Record a receiver's audit verdict on a collector review. Points never move here."""
    with transaction.atomic():
        locked = CollectorReview.objects.select_for_update().get(pk=collector_review.pk)
        if ReceiverReview.objects.filter(collector_review=locked).exists():
            raise BagStateError({"collector_review": "This review has already been verified."})
        verification = ReceiverReview.objects.create(
            collector_review=locked,
            receiver=receiver,
            status='approved' if approve else 'disapproved',
            notes=notes or '',
        )
        notify(
            recipient_id=locked.collector_id,
            notification_type='review_verified',
            title="Review verified",
            message=f"Your review of bag {locked.bag.qr_code} was {'confirmed' if approve else 'disputed'} by a receiver.",
            data={'collector_review_id': locked.pk, 'status': verification.status},
        )

    logger.info(f"Review {locked.pk} verified as {verification.status} by receiver {receiver.pk}")
    return verification


def _new_code(prefix):
    return f"{prefix}-{secrets.token_hex(4).upper()}"


def generate_codes(category, count, created_by=None):
    """Create a batch of printable bag codes for one category."""
    if category not in dict(CATEGORY_CHOICES):
        raise ValidationError({"category": f"Unknown bag category '{category}'."})
    if not 1 <= count <= MAX_CODES_PER_BATCH:
        raise ValidationError({"count": f"Count must be between 1 and {MAX_CODES_PER_BATCH}."})

    prefix = next(p for p, c in CATEGORY_PREFIXES.items() if c == category)
    codes = set()
    while len(codes) < count:
        candidates = {_new_code(prefix) for _ in range(count - len(codes))}
        taken = set(BagCode.objects.filter(code__in=candidates).values_list('code', flat=True))
        taken |= set(Bag.objects.filter(qr_code__in=candidates).values_list('qr_code', flat=True))
        codes |= candidates - taken

    batch = uuid.uuid4()
    bag_codes = BagCode.objects.bulk_create([
        BagCode(code=code, category=category, batch=batch, created_by=created_by)
        for code in sorted(codes)
    ])
    logger.info(f"Generated {len(bag_codes)} {category} bag codes in batch {batch}")
    return batch, bag_codes


def qr_png(data):
    image = qrcode.make(data)
    buf = BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


def codes_zip(bag_codes):
    """Bundle one PNG label per code into a ZIP archive for bulk printing."""
    buffer = BytesIO()
    with zipfile.ZipFile(buffer, 'w', zipfile.ZIP_DEFLATED) as archive:
        for bag_code in bag_codes:
            archive.writestr(f"{bag_code.code}.png", qr_png(activation_url(bag_code.code)))
    buffer.seek(0)
    return buffer
