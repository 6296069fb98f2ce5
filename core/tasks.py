from django_rq import job
from rq import Retry
from channels.layers import get_channel_layer
from asgiref.sync import async_to_sync
from django.db import transaction
from .models import Notification
import logging

logger = logging.getLogger(__name__)

# ------------------------- Core Notification Task -----------------------------


@job('default',
    timeout=360,
    retry=Retry(max=3, interval=[60, 120, 240]))
def send_notification_task(recipient_id, notification_type, title, message, data=None):
    """
    Base task: Creates notification and pushes via WebSocket.
    Usage: Always enqueue through `notify()` unless in tests/CLI.
    """
    notification = Notification.objects.create(
        recipient_id=recipient_id,
        notification_type=notification_type,
        title=title,
        message=message,
        data=data or {}
    )

    channel_layer = get_channel_layer()
    async_to_sync(channel_layer.group_send)(
        f"user_{recipient_id}",
        {
            "type": "notification.message",
            "notification": {
                "id": notification.id,
                "type": notification.notification_type,
                "title": notification.title,
                "message": notification.message,
                "data": notification.data,
                "created_at": notification.created_at.isoformat(),
            }
        }
    )
    return f"Notification sent to user {recipient_id}"


def notify(recipient_id, notification_type, title, message, data=None):
    """Queue a notification once the surrounding transaction commits."""
    def _enqueue():
        try:
            send_notification_task.delay(
                recipient_id=recipient_id,
                notification_type=notification_type,
                title=title,
                message=message,
                data=data,
            )
        except Exception as e:
            # Notifications are best effort; the committed action stands
            logger.error(f"Failed to enqueue {notification_type} notification for user {recipient_id}: {e}")

    transaction.on_commit(_enqueue)
