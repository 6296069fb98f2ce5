import uuid
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

CATEGORY_CHOICES = [('recyclable', 'Recyclable'), ('organic', 'Biodegradable / Organic'), ('residual', 'Residual')]
REVIEW_STATUS_CHOICES = [('approved', 'Approved'), ('disapproved', 'Disapproved')]
DISAPPROVAL_REASON_CHOICES = [
    ('Contaminated with non-recyclables', 'Contaminated with non-recyclables'),
    ('Wrong bag type for contents', 'Wrong bag type for contents'),
    ('Bag damaged or leaking', 'Bag damaged or leaking'),
    ('Hazardous material present', 'Hazardous material present'),
    ('Bag not found at pickup', 'Bag not found at pickup'),
    ('Other', 'Other'),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Bag',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('qr_code', models.CharField(max_length=40, unique=True)),
                ('category', models.CharField(choices=CATEGORY_CHOICES, max_length=20)),
                ('status', models.CharField(choices=[('activated', 'Activated'), ('approved', 'Approved'), ('disapproved', 'Disapproved')], default='activated', max_length=20)),
                ('activated_at', models.DateTimeField(auto_now_add=True)),
                ('household', models.ForeignKey(limit_choices_to={'role': 'household'}, on_delete=django.db.models.deletion.PROTECT, related_name='bags', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-activated_at'],
            },
        ),
        migrations.CreateModel(
            name='BagCode',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('code', models.CharField(max_length=40, unique=True)),
                ('category', models.CharField(choices=CATEGORY_CHOICES, max_length=20)),
                ('batch', models.UUIDField(db_index=True, default=uuid.uuid4)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='generated_bag_codes', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at', 'code'],
            },
        ),
        migrations.CreateModel(
            name='CollectorReview',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('status', models.CharField(choices=REVIEW_STATUS_CHOICES, max_length=20)),
                ('points_awarded', models.PositiveIntegerField(default=0)),
                ('notes', models.TextField(blank=True)),
                ('disapproval_reason', models.CharField(blank=True, choices=DISAPPROVAL_REASON_CHOICES, max_length=100)),
                ('reviewed_at', models.DateTimeField(auto_now_add=True)),
                ('bag', models.OneToOneField(on_delete=django.db.models.deletion.PROTECT, related_name='review', to='bags.bag')),
                ('collector', models.ForeignKey(limit_choices_to={'role': 'collector'}, on_delete=django.db.models.deletion.PROTECT, related_name='bag_reviews', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-reviewed_at'],
            },
        ),
        migrations.CreateModel(
            name='ReceiverReview',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('status', models.CharField(choices=REVIEW_STATUS_CHOICES, max_length=20)),
                ('notes', models.TextField(blank=True)),
                ('reviewed_at', models.DateTimeField(auto_now_add=True)),
                ('collector_review', models.OneToOneField(on_delete=django.db.models.deletion.PROTECT, related_name='receiver_review', to='bags.collectorreview')),
                ('receiver', models.ForeignKey(limit_choices_to={'role': 'receiver'}, on_delete=django.db.models.deletion.PROTECT, related_name='receiver_reviews', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-reviewed_at'],
            },
        ),
    ]
