import uuid
from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

CATEGORY_CHOICES = (
    ('recyclable', 'Recyclable'),
    ('organic', 'Biodegradable / Organic'),
    ('residual', 'Residual'),
)

# Printed label prefix for each category
CATEGORY_PREFIXES = {
    'WWR': 'recyclable',
    'WWO': 'organic',
    'WWS': 'residual',
}

# Points awarded on collector approval
POINT_TARIFF = {
    'recyclable': 15,
    'organic': 5,
    'residual': 1,
}

# Codes with an unrecognised prefix fall into the lowest-value category
DEFAULT_CATEGORY = min(POINT_TARIFF, key=POINT_TARIFF.get)

DISAPPROVAL_REASONS = (
    'Contaminated with non-recyclables',
    'Wrong bag type for contents',
    'Bag damaged or leaking',
    'Hazardous material present',
    'Bag not found at pickup',
    'Other',
)

REVIEW_STATUS_CHOICES = (
    ('approved', 'Approved'),
    ('disapproved', 'Disapproved'),
)


class BagCode(models.Model):
    """A printed bag label, generated before any household activates it."""
    code = models.CharField(max_length=40, unique=True)
    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES)
    batch = models.UUIDField(default=uuid.uuid4, db_index=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='generated_bag_codes'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', 'code']

    def __str__(self):
        return f"{self.code} ({self.get_category_display()})"


class Bag(models.Model):
    STATUS_CHOICES = (
        ('activated', 'Activated'),
        ('approved', 'Approved'),
        ('disapproved', 'Disapproved'),
    )

    qr_code = models.CharField(max_length=40, unique=True)
    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES)
    household = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='bags',
        limit_choices_to={'role': 'household'}
    )
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='activated')
    activated_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-activated_at']

    def __str__(self):
        return f"Bag {self.qr_code} ({self.get_status_display()})"

    @property
    def points_value(self):
        return POINT_TARIFF[self.category]


class CollectorReview(models.Model):
    bag = models.OneToOneField(Bag, on_delete=models.PROTECT, related_name='review')
    collector = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='bag_reviews',
        limit_choices_to={'role': 'collector'}
    )
    status = models.CharField(max_length=20, choices=REVIEW_STATUS_CHOICES)
    points_awarded = models.PositiveIntegerField(default=0)
    notes = models.TextField(blank=True)
    disapproval_reason = models.CharField(
        max_length=100,
        blank=True,
        choices=[(reason, reason) for reason in DISAPPROVAL_REASONS]
    )
    reviewed_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-reviewed_at']

    def __str__(self):
        return f"Review of {self.bag.qr_code}: {self.status} (+{self.points_awarded})"

    def clean(self):
        super().clean()
        if self.status == 'disapproved':
            if not self.disapproval_reason:
                raise ValidationError({"disapproval_reason": "A reason is required when disapproving a bag."})
            if self.points_awarded:
                raise ValidationError({"points_awarded": "Disapproved bags earn no points."})


class ReceiverReview(models.Model):
    collector_review = models.OneToOneField(
        CollectorReview,
        on_delete=models.PROTECT,
        related_name='receiver_review'
    )
    receiver = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='receiver_reviews',
        limit_choices_to={'role': 'receiver'}
    )
    # Whether the receiver agrees with the collector's judgement
    status = models.CharField(max_length=20, choices=REVIEW_STATUS_CHOICES)
    notes = models.TextField(blank=True)
    reviewed_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-reviewed_at']

    def __str__(self):
        return f"Verification of {self.collector_review.bag.qr_code}: {self.status}"
