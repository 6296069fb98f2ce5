from django.db import transaction
from django.db.models.signals import post_save
from django.dispatch import receiver
from channels.layers import get_channel_layer
from asgiref.sync import async_to_sync
from django.utils import timezone
import logging

from .consumers import DASHBOARD_GROUP

logger = logging.getLogger(__name__)


def _send_dashboard_update(event_type, model_name, instance_id):
    try:
        channel_layer = get_channel_layer()
        async_to_sync(channel_layer.group_send)(
            DASHBOARD_GROUP,
            {
                "type": "dashboard_update_broadcast",
                "data": {
                    "event_type": event_type,
                    "model": model_name,
                    "instance_id": instance_id,
                    "timestamp": timezone.now().isoformat(),
                },
            }
        )
        logger.info(f"Dashboard update broadcasted: {event_type} {model_name}")
    except Exception as e:
        logger.error(f"Failed to broadcast dashboard update: {e}")


def broadcast_dashboard_update(event_type, model_name, instance_id=None):
    """Tell connected admin dashboards that their data changed, once the write commits."""
    transaction.on_commit(lambda: _send_dashboard_update(event_type, model_name, instance_id))


@receiver(post_save, sender='core.User')
def user_saved(sender, instance, created, **kwargs):
    broadcast_dashboard_update("user_created" if created else "user_updated", "User", instance.id)


@receiver(post_save, sender='bags.Bag')
def bag_saved(sender, instance, created, **kwargs):
    broadcast_dashboard_update("bag_activated" if created else "bag_updated", "Bag", instance.id)


@receiver(post_save, sender='bags.CollectorReview')
def collector_review_saved(sender, instance, created, **kwargs):
    broadcast_dashboard_update("bag_reviewed", "CollectorReview", instance.id)


@receiver(post_save, sender='bags.ReceiverReview')
def receiver_review_saved(sender, instance, created, **kwargs):
    broadcast_dashboard_update("review_verified", "ReceiverReview", instance.id)


@receiver(post_save, sender='rewards.Redemption')
def redemption_saved(sender, instance, created, **kwargs):
    broadcast_dashboard_update("reward_redeemed", "Redemption", instance.id)
