"""
WebSocket Consumers for Real-Time Notifications.

Each authenticated user joins the `notifications_<user id>` group and
receives every notification pushed by the Celery delivery task.
"""

import logging

from channels.db import database_sync_to_async
from django.core.exceptions import ValidationError
from django.utils import timezone

from core.consumers import CamelCaseJsonWebsocketConsumer

from .services import NotificationService
from .tasks import user_group_name

logger = logging.getLogger(__name__)


class NotificationConsumer(CamelCaseJsonWebsocketConsumer):
    """
    WebSocket consumer for real-time notifications.

    Client messages: `mark_read` (with notification_id), `mark_all_read`, `ping`.
    """

    async def connect(self):
        self.user = self.scope.get('user')

        if not self.user or not self.user.is_authenticated:
            await self.close(code=4001)
            return

        self.user_group = user_group_name(self.user.id)
        await self.channel_layer.group_add(self.user_group, self.channel_name)
        await self.accept()

        await self.send_json({
            'type': 'connection_established',
            'user_id': str(self.user.id),
            'unread_count': await self.get_unread_count(),
            'timestamp': timezone.now().isoformat(),
        })
        logger.info(f"User {self.user.id} connected to notifications")

    async def disconnect(self, close_code):
        if hasattr(self, 'user_group'):
            await self.channel_layer.group_discard(self.user_group, self.channel_name)
            logger.info(f"User {self.user.id} disconnected from notifications")

    async def receive_json(self, content, **kwargs):
        message_type = content.get('type')

        if message_type == 'mark_read':
            notification_id = content.get('notification_id')
            success = await self.mark_read(notification_id) if notification_id else False
            await self.send_json({
                'type': 'mark_read_response',
                'notification_id': notification_id,
                'success': success,
                'unread_count': await self.get_unread_count(),
            })
        elif message_type == 'mark_all_read':
            count = await self.mark_all_read()
            await self.send_json({
                'type': 'mark_all_read_response',
                'count': count,
                'unread_count': 0,
            })
        elif message_type == 'ping':
            await self.send_json({'type': 'pong'})
        else:
            await self.send_json({
                'type': 'error',
                'message': f'Unknown message type: {message_type}'
            })

    # ===== Channel layer handlers =====

    async def send_notification(self, event):
        await self.send_json({
            'type': 'new_notification',
            'notification': event.get('notification', {}),
        })

    # ===== Database operations =====

    @database_sync_to_async
    def get_unread_count(self) -> int:
        return NotificationService.unread_count(self.user)

    @database_sync_to_async
    def mark_read(self, notification_id) -> bool:
        try:
            return NotificationService.mark_read(self.user, notification_id) is not None
        except ValidationError:
            # malformed uuid
            return False

    @database_sync_to_async
    def mark_all_read(self) -> int:
        return NotificationService.mark_all_read(self.user)
