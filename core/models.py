from django.db import models
from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.core.exceptions import ValidationError
from .validators import phone_validator


class CustomUserManager(BaseUserManager):
    def create_user(self, email, name, password=None, **extra_fields):
        if not email:
            raise ValueError('Email is required')
        if not name:
            raise ValueError('Name is required')
        if not extra_fields.get('role'):
            raise ValueError('Role is required')

        user = self.model(
            email=self.normalize_email(email).lower(),
            name=name,
            **extra_fields
        )
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, name, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('is_active', True)
        extra_fields.setdefault('role', 'admin')

        return self.create_user(email, name, password, **extra_fields)


class User(AbstractBaseUser, PermissionsMixin):
    ROLE_CHOICES = (
        ('household', 'Household'),
        ('collector', 'Collector'),
        ('receiver', 'Receiver'),
        ('admin', 'Admin')
    )

    # Households sign in with a phone number; their email is synthesized from it
    email = models.EmailField(unique=True)
    name = models.CharField(max_length=150)
    phone = models.CharField(
        max_length=20,
        unique=True,
        null=True,
        blank=True,
        validators=[phone_validator]
    )
    location = models.CharField(max_length=255, blank=True)

    role = models.CharField(max_length=10, choices=ROLE_CHOICES)
    points_balance = models.PositiveIntegerField(default=0)

    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)

    last_login = models.DateTimeField(null=True, blank=True)
    date_joined = models.DateTimeField(auto_now_add=True)

    objects = CustomUserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['name']

    class Meta:
        constraints = [
            models.CheckConstraint(
                condition=models.Q(points_balance__gte=0),
                name='user_points_balance_non_negative',
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.get_role_display()})"

    def get_full_name(self):
        return self.name

    def get_short_name(self):
        return self.name.split(' ')[0] if self.name else ''

    @property
    def is_household(self):
        return self.role == 'household'

    def save(self, *args, **kwargs):
        if self.pk:
            previous_role = User.objects.filter(pk=self.pk).values_list('role', flat=True).first()
            if previous_role and previous_role != self.role:
                raise ValidationError({"role": "A user's role cannot be changed after signup."})
        super().save(*args, **kwargs)


class Notification(models.Model):
    NOTIFICATION_TYPES = (
        ('points_earned', 'Points Earned'),
        ('bag_reviewed', 'Bag Reviewed'),
        ('review_verified', 'Review Verified'),
        ('redemption_completed', 'Redemption Completed'),
        ('feedback_response', 'Feedback Response'),
    )

    recipient = models.ForeignKey(User, on_delete=models.CASCADE, related_name='notifications')
    notification_type = models.CharField(max_length=30, choices=NOTIFICATION_TYPES)
    title = models.CharField(max_length=255)
    message = models.TextField()
    data = models.JSONField(default=dict, blank=True)
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.get_notification_type_display()} for {self.recipient}"
