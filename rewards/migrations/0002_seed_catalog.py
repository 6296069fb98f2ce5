from django.db import migrations

CATALOG = [
    ('₦100 Airtime', 'Any network', 100, 'airtime', '📱'),
    ('Coffee Voucher', 'Free coffee at partner cafes', 150, 'voucher', '☕'),
    ('Eco Token', 'Trade or gift', 200, 'eco_token', '🌱'),
    ('Loyalty Points Transfer', '500 partner loyalty points', 250, 'loyalty_points', '🎁'),
    ('₦500 Airtime', 'Any network', 450, 'airtime', '📱'),
    ('₦1000 Electricity Token', 'Prepaid meter top-up', 700, 'utility_token', '⚡'),
    ('Shopping Voucher', '₦1000 store credit', 800, 'voucher', '🛒'),
    ('₦2000 Airtime', 'Any network', 1600, 'airtime', '📱'),
]


def seed_catalog(apps, schema_editor):
    Reward = apps.get_model('rewards', 'Reward')
    for title, description, points_cost, category, icon in CATALOG:
        Reward.objects.get_or_create(
            title=title,
            defaults={
                'description': description,
                'points_cost': points_cost,
                'category': category,
                'icon': icon,
            },
        )


def remove_catalog(apps, schema_editor):
    Reward = apps.get_model('rewards', 'Reward')
    Reward.objects.filter(title__in=[row[0] for row in CATALOG], redemptions__isnull=True).delete()


class Migration(migrations.Migration):

    dependencies = [
        ('rewards', '0001_initial'),
    ]

    operations = [
        migrations.RunPython(seed_catalog, remove_catalog),
    ]
