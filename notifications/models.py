"""
Notification models.

A Notification is created by lifecycle operations; afterwards only the
read flag changes.
"""

from django.conf import settings
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from core.db.models import BaseModel


class Notification(BaseModel):
    """In-app notification addressed to one user."""

    class Type(models.TextChoices):
        NEW_EMERGENCY = 'new_emergency', _('New emergency')
        PROPOSAL_RECEIVED = 'proposal_received', _('Proposal received')
        PROPOSAL_ACCEPTED = 'proposal_accepted', _('Proposal accepted')
        PROJECT_UPDATE = 'project_update', _('Project update')
        PAYMENT_RECEIVED = 'payment_received', _('Payment received')

    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='notifications'
    )
    notification_type = models.CharField(
        max_length=30,
        choices=Type.choices,
        db_index=True
    )
    title = models.CharField(max_length=200)
    message = models.TextField()
    is_read = models.BooleanField(default=False, db_index=True)
    read_at = models.DateTimeField(null=True, blank=True)
    # Emergency, proposal, project or payment the notification points at
    related_id = models.UUIDField(null=True, blank=True)

    class Meta(BaseModel.Meta):
        verbose_name = _('Notification')
        verbose_name_plural = _('Notifications')
        indexes = [
            models.Index(fields=['recipient', 'is_read'], name='notif_recipient_read_idx'),
        ]

    def __str__(self):
        return f"{self.notification_type} -> {self.recipient_id}"

    def mark_as_read(self):
        if self.is_read:
            return
        self.is_read = True
        self.read_at = timezone.now()
        self.save(update_fields=['is_read', 'read_at', 'updated_at'])

    def to_payload(self) -> dict:
        """JSON-safe representation pushed over websockets."""
        return {
            'id': str(self.id),
            'type': self.notification_type,
            'title': self.title,
            'message': self.message,
            'is_read': self.is_read,
            'related_id': str(self.related_id) if self.related_id else None,
            'created_at': self.created_at.isoformat(),
        }
