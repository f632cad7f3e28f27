"""
Celery Tasks for the notification system.
"""

import logging

from asgiref.sync import async_to_sync
from celery import shared_task
from channels.layers import get_channel_layer

logger = logging.getLogger(__name__)


def user_group_name(user_id) -> str:
    return f"notifications_{user_id}"


@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=30,
    queue='notifications'
)
def push_notification(self, notification_id: str) -> bool:
    """
    Push a stored notification to its recipient's websocket group.

    Returns False when the notification no longer exists.
    """
    from .models import Notification

    try:
        notification = Notification.objects.get(pk=notification_id)
    except Notification.DoesNotExist:
        logger.warning(f"Notification {notification_id} vanished before push")
        return False

    channel_layer = get_channel_layer()
    if channel_layer is None:
        logger.error("Channel layer is not configured; notification not pushed")
        return False

    try:
        async_to_sync(channel_layer.group_send)(
            user_group_name(notification.recipient_id),
            {
                'type': 'send_notification',
                'notification': notification.to_payload(),
            }
        )
    except Exception as exc:
        logger.warning(f"Push of notification {notification_id} failed: {exc}")
        raise self.retry(exc=exc)

    return True
