"""
Aggregations behind the admin dashboard.

Every function takes full collections and recomputes from scratch, so the
result depends only on the rows passed in and not on their order. Only
`build_snapshot` touches the database.
"""
from collections import Counter, defaultdict

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db.models import Sum
from django.utils import timezone

from bags.models import Bag, CollectorReview, ReceiverReview, CATEGORY_CHOICES, CATEGORY_PREFIXES
from rewards.models import Redemption

User = get_user_model()

BAG_STATUSES = ('activated', 'approved', 'disapproved')
REVIEW_STATUSES = ('approved', 'disapproved')


def reporting_category(bag):
    """Category implied by the printed prefix, or the stored one for codes without a known prefix."""
    code = (bag.qr_code or '').upper()
    for prefix, category in CATEGORY_PREFIXES.items():
        if code.startswith(prefix):
            return category
    return bag.category


def bag_status_counts(bags):
    counts = Counter(bag.status for bag in bags)
    result = {status: counts.get(status, 0) for status in BAG_STATUSES}
    result['total'] = sum(counts.values())
    return result


def bag_category_counts(bags):
    counts = Counter(reporting_category(bag) for bag in bags)
    return {category: counts.get(category, 0) for category, _ in CATEGORY_CHOICES}


def review_totals(reviews):
    approved = disapproved = points = 0
    for review in reviews:
        if review.status == 'approved':
            approved += 1
        elif review.status == 'disapproved':
            disapproved += 1
        points += review.points_awarded
    return {
        'approved': approved,
        'disapproved': disapproved,
        'total': approved + disapproved,
        'points_awarded': points,
    }


def collector_accuracy(reviews, receiver_reviews):
    """
    Per-collector agreement rate as judged by receivers.

    accuracy = approved verdicts / all verdicts, or None while a collector
    has no verified reviews.
    """
    review_owner = {}
    stats = defaultdict(lambda: {'reviews': 0, 'verified_approved': 0, 'verified_disapproved': 0})
    names = {}
    for review in reviews:
        review_owner[review.pk] = review.collector_id
        stats[review.collector_id]['reviews'] += 1
        names[review.collector_id] = review.collector.name

    for verdict in receiver_reviews:
        collector_id = review_owner.get(verdict.collector_review_id)
        if collector_id is None:
            continue
        if verdict.status == 'approved':
            stats[collector_id]['verified_approved'] += 1
        elif verdict.status == 'disapproved':
            stats[collector_id]['verified_disapproved'] += 1

    rows = []
    for collector_id, row in stats.items():
        verdicts = row['verified_approved'] + row['verified_disapproved']
        rows.append({
            'collector_id': collector_id,
            'collector_name': names.get(collector_id, ''),
            **row,
            'accuracy': round(row['verified_approved'] / verdicts, 4) if verdicts else None,
        })
    rows.sort(key=lambda r: (r['collector_name'].lower(), r['collector_id']))
    return rows


def recent_activity(bags, reviews, receiver_reviews, users, limit):
    """Merge activations, reviews, verifications and sign-ups into one newest-first feed."""
    events = []
    for bag in bags:
        events.append({
            'type': 'bag_activated',
            'id': bag.pk,
            'timestamp': bag.activated_at,
            'description': f"Bag {bag.qr_code} activated",
        })
    for review in reviews:
        events.append({
            'type': 'bag_reviewed',
            'id': review.pk,
            'timestamp': review.reviewed_at,
            'description': f"{review.collector.name} {review.status} bag {review.bag.qr_code}",
        })
    for verdict in receiver_reviews:
        events.append({
            'type': 'review_verified',
            'id': verdict.pk,
            'timestamp': verdict.reviewed_at,
            'description': f"{verdict.receiver.name} marked review #{verdict.collector_review_id} {verdict.status}",
        })
    for user in users:
        events.append({
            'type': 'user_registered',
            'id': user.pk,
            'timestamp': user.date_joined,
            'description': f"{user.name} joined as {user.role}",
        })

    events.sort(key=lambda e: (e['timestamp'], e['type'], e['id']), reverse=True)
    return events[:limit]


def build_snapshot(limit=None):
    """Load every collection and assemble the overview the dashboard renders."""
    limit = limit or settings.DASHBOARD_ACTIVITY_LIMIT
    bags = list(Bag.objects.all())
    reviews = list(CollectorReview.objects.select_related('collector', 'bag'))
    receiver_reviews = list(ReceiverReview.objects.select_related('receiver'))
    users = list(User.objects.exclude(role='admin'))

    role_counts = Counter(user.role for user in users)
    households = [user for user in users if user.role == 'household']
    redemptions = Redemption.objects.aggregate(points=Sum('points_spent'))

    return {
        'generated_at': timezone.now().isoformat(),
        'users': {
            'households': role_counts.get('household', 0),
            'collectors': role_counts.get('collector', 0),
            'receivers': role_counts.get('receiver', 0),
        },
        'bags': bag_status_counts(bags),
        'categories': bag_category_counts(bags),
        'reviews': review_totals(reviews),
        'verifications': {
            'total': len(receiver_reviews),
            'pending': len(reviews) - len(receiver_reviews),
        },
        'points': {
            'outstanding': sum(user.points_balance for user in households),
            'redeemed': redemptions['points'] or 0,
            'redemptions': Redemption.objects.count(),
        },
        'collectors': collector_accuracy(reviews, receiver_reviews),
        'recent_activity': [
            {**event, 'timestamp': event['timestamp'].isoformat()}
            for event in recent_activity(bags, reviews, receiver_reviews, users, limit)
        ],
    }
