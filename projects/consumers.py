"""
WebSocket Consumer for project rooms.

Both parties of a project join `project_<id>` and receive chat messages,
new timeline entries and status changes as they are committed. Chat
messages can also be sent over the socket.

Client messages:
    {"type": "chat_message", "message": "...", "photos": [...]}
    {"type": "mark_read"}
    {"type": "ping"}

Server events:
    chat.message, timeline.entry, project.status, error, pong
"""

import logging

from channels.db import database_sync_to_async
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework.exceptions import APIException

from core.consumers import CamelCaseJsonWebsocketConsumer

from . import realtime
from .models import Project
from .services import ChatService

logger = logging.getLogger(__name__)


class ProjectConsumer(CamelCaseJsonWebsocketConsumer):

    async def connect(self):
        self.user = self.scope.get('user')
        self.project_id = self.scope['url_route']['kwargs']['project_id']

        if not self.user or not self.user.is_authenticated:
            await self.close(code=4001)
            return

        self.project = await self.get_project()
        if self.project is None:
            logger.warning(f"WS_NOT_PARTICIPANT: user={self.user.id} project={self.project_id}")
            await self.close(code=4003)
            return

        self.group_name = realtime.project_group_name(self.project.id)
        await self.channel_layer.group_add(self.group_name, self.channel_name)
        await self.accept()
        logger.info(f"User {self.user.id} joined project {self.project.id}")

    async def disconnect(self, close_code):
        if hasattr(self, 'group_name'):
            await self.channel_layer.group_discard(self.group_name, self.channel_name)

    async def receive_json(self, content, **kwargs):
        message_type = content.get('type')

        if message_type == 'chat_message':
            try:
                await self.send_chat_message(content.get('message', ''), content.get('photos') or [])
            except APIException as exc:
                await self.send_json({'type': 'error', 'message': str(exc.detail)})
            # the stored message comes back through the group broadcast
        elif message_type == 'mark_read':
            count = await self.mark_read()
            await self.send_json({'type': 'mark_read_response', 'count': count})
        elif message_type == 'ping':
            await self.send_json({'type': 'pong'})
        else:
            await self.send_json({
                'type': 'error',
                'message': f'Unknown message type: {message_type}'
            })

    # ===== Channel layer handlers =====

    async def chat_message(self, event):
        await self.send_json({'type': realtime.CHAT_MESSAGE, 'message': event['payload']})

    async def timeline_entry(self, event):
        await self.send_json({'type': realtime.TIMELINE_ENTRY, 'entry': event['payload']})

    async def project_status(self, event):
        await self.send_json({'type': realtime.PROJECT_STATUS, 'project': event['payload']})

    # ===== Database operations =====

    @database_sync_to_async
    def get_project(self):
        try:
            project = Project.objects.get(pk=self.project_id)
        except (Project.DoesNotExist, DjangoValidationError):
            return None
        if project.is_participant(self.user) or self.user.is_platform_admin:
            return project
        return None

    @database_sync_to_async
    def send_chat_message(self, message: str, photos: list):
        return ChatService.send_message(self.project, self.user, message, photos)

    @database_sync_to_async
    def mark_read(self) -> int:
        return ChatService.mark_read(self.project, self.user)
