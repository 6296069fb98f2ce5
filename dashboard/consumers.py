from channels.generic.websocket import AsyncWebsocketConsumer
from channels.db import database_sync_to_async
from django.utils import timezone
import json
import logging

from .reporting import build_snapshot

logger = logging.getLogger(__name__)

DASHBOARD_GROUP = "admin_dashboard"


class AdminDashboardConsumer(AsyncWebsocketConsumer):
    """
    Live admin dashboard. Broadcasts only say that something changed; the
    consumer answers each one by recomputing and sending the full snapshot.
    """

    async def connect(self):
        self.user = self.scope.get('user')

        if not self.user or not self.user.is_authenticated or not (
            self.user.is_superuser or getattr(self.user, 'role', None) == 'admin'
        ):
            await self.close()
            return

        self.group_name = DASHBOARD_GROUP
        await self.channel_layer.group_add(self.group_name, self.channel_name)
        await self.accept()

        await self.send_snapshot()

    async def disconnect(self, close_code):
        if hasattr(self, 'group_name'):
            await self.channel_layer.group_discard(self.group_name, self.channel_name)

    async def receive(self, text_data):
        try:
            data = json.loads(text_data)
        except json.JSONDecodeError:
            await self.send_error("Invalid JSON format")
            return

        if data.get('type') == 'refresh_dashboard':
            await self.send_snapshot()

    async def send_snapshot(self, trigger=None):
        try:
            snapshot = await self.get_snapshot()
        except Exception as e:
            logger.error(f"Failed to build dashboard snapshot: {e}", exc_info=True)
            await self.send_error("Failed to fetch dashboard data")
            return
        await self.send(json.dumps({
            "type": "dashboard_update",
            "trigger": trigger,
            "data": snapshot,
            "timestamp": timezone.now().isoformat(),
        }))

    async def send_error(self, message):
        await self.send(json.dumps({
            "type": "error",
            "message": message,
            "timestamp": timezone.now().isoformat(),
        }))

    async def dashboard_update_broadcast(self, event):
        """Something changed; push a fresh snapshot."""
        await self.send_snapshot(trigger=event.get('data'))

    @database_sync_to_async
    def get_snapshot(self):
        return build_snapshot()
