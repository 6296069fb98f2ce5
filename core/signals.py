from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
from channels.layers import get_channel_layer
from asgiref.sync import async_to_sync
from .models import Notification
import logging

logger = logging.getLogger(__name__)


def push_counter_sync(user_id):
    """
    Push the unread notification count to the user's websocket group.
    Usable from RQ workers, management commands and request handlers.
    """
    count = Notification.objects.filter(recipient_id=user_id, is_read=False).count()
    try:
        async_to_sync(get_channel_layer().group_send)(
            f"user_{user_id}",
            {"type": "notification.counter", "unread_count": count}
        )
    except Exception as e:
        logger.error(f"Failed to push notification counter to user {user_id}: {e}")


@receiver([post_save, post_delete], sender=Notification)
def notification_changed(sender, instance, **kwargs):
    push_counter_sync(instance.recipient_id)
