from django.conf import settings
from django.db import models


class Reward(models.Model):
    CATEGORY_CHOICES = (
        ('airtime', 'Airtime'),
        ('loyalty_points', 'Loyalty Points'),
        ('utility_token', 'Utility Token'),
        ('voucher', 'Voucher'),
        ('eco_token', 'Eco Token'),
    )

    title = models.CharField(max_length=100)
    description = models.CharField(max_length=255, blank=True)
    points_cost = models.PositiveIntegerField()
    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES)
    icon = models.CharField(max_length=16, blank=True)
    is_available = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['points_cost', 'title']
        constraints = [
            models.CheckConstraint(condition=models.Q(points_cost__gt=0), name='reward_points_cost_positive'),
        ]

    def __str__(self):
        return f"{self.title} ({self.points_cost} points)"


class Redemption(models.Model):
    STATUS_CHOICES = (
        ('completed', 'Completed'),
    )

    household = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='redemptions',
        limit_choices_to={'role': 'household'}
    )
    reward = models.ForeignKey(Reward, on_delete=models.PROTECT, related_name='redemptions')
    # Copied from the reward at redemption time; catalog prices may change later
    points_spent = models.PositiveIntegerField()
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='completed')
    confirmation_code = models.CharField(max_length=20, unique=True)
    details = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.household} redeemed {self.reward.title} ({self.confirmation_code})"
