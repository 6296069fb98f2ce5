from channels.generic.websocket import AsyncWebsocketConsumer
from channels.db import database_sync_to_async
import json


class NotificationConsumer(AsyncWebsocketConsumer):
    async def connect(self):
        self.user = self.scope.get('user')

        if not self.user or not self.user.is_authenticated:
            await self.close()
            return

        self.group_name = f"user_{self.user.id}"
        await self.channel_layer.group_add(self.group_name, self.channel_name)
        await self.accept()

        await self.send(json.dumps({
            "type": "connection_established",
            "message": "Connected to notifications",
            "unread_count": await self._get_unread_count(self.user),
        }))

    async def disconnect(self, close_code):
        if hasattr(self, 'group_name'):
            await self.channel_layer.group_discard(self.group_name, self.channel_name)

    async def receive(self, text_data):
        try:
            data = json.loads(text_data)
        except json.JSONDecodeError:
            await self.send(json.dumps({"type": "error", "message": "Invalid JSON format"}))
            return

        if data.get('type') == 'mark_read' and data.get('id'):
            await self._mark_read(self.user, data['id'])

    async def notification_message(self, event):
        """Send notification to WebSocket"""
        await self.send(json.dumps({
            "type": "notification",
            "notification": event['notification']
        }))

    async def notification_counter(self, event):
        await self.send(json.dumps({
            "type": "counter",
            "unread_count": event["unread_count"]
        }))

    @database_sync_to_async
    def _get_unread_count(self, user):
        return user.notifications.filter(is_read=False).count()

    @database_sync_to_async
    def _mark_read(self, user, notification_id):
        notification = user.notifications.filter(id=notification_id, is_read=False).first()
        if notification:
            notification.is_read = True
            notification.save(update_fields=['is_read'])
