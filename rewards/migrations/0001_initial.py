import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Reward',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=100)),
                ('description', models.CharField(blank=True, max_length=255)),
                ('points_cost', models.PositiveIntegerField()),
                ('category', models.CharField(choices=[('airtime', 'Airtime'), ('loyalty_points', 'Loyalty Points'), ('utility_token', 'Utility Token'), ('voucher', 'Voucher'), ('eco_token', 'Eco Token')], max_length=20)),
                ('icon', models.CharField(blank=True, max_length=16)),
                ('is_available', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'ordering': ['points_cost', 'title'],
                'constraints': [models.CheckConstraint(condition=models.Q(('points_cost__gt', 0)), name='reward_points_cost_positive')],
            },
        ),
        migrations.CreateModel(
            name='Redemption',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('points_spent', models.PositiveIntegerField()),
                ('status', models.CharField(choices=[('completed', 'Completed')], default='completed', max_length=20)),
                ('confirmation_code', models.CharField(max_length=20, unique=True)),
                ('details', models.JSONField(blank=True, default=dict)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('household', models.ForeignKey(limit_choices_to={'role': 'household'}, on_delete=django.db.models.deletion.PROTECT, related_name='redemptions', to=settings.AUTH_USER_MODEL)),
                ('reward', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='redemptions', to='rewards.reward')),
            ],
            options={
                'ordering': ['-created_at'],
            },
        ),
    ]
