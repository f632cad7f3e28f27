"""
Realtime fan-out for project events.

Events are sent to the `project_<id>` channel group after the surrounding
transaction commits. Event types map onto ProjectConsumer handlers:
'chat.message' -> chat_message, 'timeline.entry' -> timeline_entry,
'project.status' -> project_status.
"""

import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.db import transaction

logger = logging.getLogger(__name__)

CHAT_MESSAGE = 'chat.message'
TIMELINE_ENTRY = 'timeline.entry'
PROJECT_STATUS = 'project.status'


def project_group_name(project_id) -> str:
    return f"project_{project_id}"


def broadcast(project_id, event_type: str, payload: dict) -> None:
    """Queue `payload` for every socket watching the project."""
    group = project_group_name(project_id)

    def send():
        channel_layer = get_channel_layer()
        if channel_layer is None:
            logger.warning(f"No channel layer configured; dropping {event_type} for {group}")
            return
        async_to_sync(channel_layer.group_send)(group, {
            'type': event_type,
            'payload': payload,
        })

    transaction.on_commit(send)
