"""
Notification services.

`notify()` records the notification inside the caller's transaction and
schedules the realtime push for after commit, so a rolled-back operation
leaves neither a row nor a websocket message behind.
"""

import logging
from typing import Iterable, List, Optional

from django.db import transaction
from django.utils import timezone

from .models import Notification

logger = logging.getLogger(__name__)


def _schedule_push(notification_ids: List[str]) -> None:
    from .tasks import push_notification

    def dispatch():
        for notification_id in notification_ids:
            push_notification.delay(notification_id)

    transaction.on_commit(dispatch)


def notify(
    recipient,
    notification_type: str,
    title: str,
    message: str,
    related_id=None,
) -> Notification:
    """Create one notification and push it once the transaction commits."""
    notification = Notification.objects.create(
        recipient=recipient,
        notification_type=notification_type,
        title=title,
        message=message,
        related_id=related_id,
    )
    _schedule_push([str(notification.id)])

    logger.info(
        f"NOTIFICATION_CREATED: recipient={recipient.id} type={notification_type} "
        f"related={related_id}"
    )
    return notification


def notify_many(
    recipients: Iterable,
    notification_type: str,
    title: str,
    message: str,
    related_id=None,
) -> List[Notification]:
    """Fan the same notification out to several users."""
    notifications = Notification.objects.bulk_create([
        Notification(
            recipient=recipient,
            notification_type=notification_type,
            title=title,
            message=message,
            related_id=related_id,
        )
        for recipient in recipients
    ])
    if notifications:
        _schedule_push([str(n.id) for n in notifications])
        logger.info(
            f"NOTIFICATIONS_CREATED: count={len(notifications)} type={notification_type} "
            f"related={related_id}"
        )
    return notifications


class NotificationService:
    """Read-state operations used by the API and the websocket consumer."""

    @staticmethod
    def unread_count(user) -> int:
        return Notification.objects.filter(recipient=user, is_read=False).count()

    @staticmethod
    def mark_read(user, notification_id) -> Optional[Notification]:
        notification = Notification.objects.filter(recipient=user, pk=notification_id).first()
        if notification:
            notification.mark_as_read()
        return notification

    @staticmethod
    def mark_all_read(user) -> int:
        return Notification.objects.filter(recipient=user, is_read=False).update(
            is_read=True,
            read_at=timezone.now(),
            updated_at=timezone.now(),
        )
