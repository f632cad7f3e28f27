"""
Projects Models - Work agreed between a gestionnaire and an artisan.

This module defines:
- Project: created exactly once, when a proposal is accepted
- TimelineEntry: append-only history of the project
- ChatMessage: append-only conversation between both parties
"""

from django.conf import settings
from django.core.validators import MaxLengthValidator, MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from core.constants import PHOTO_PHASES
from core.db.models import BaseModel
from core.lifecycle import StatusLifecycle


# ============================================================================
# PROJECT
# ============================================================================

class Project(BaseModel):
    """
    Work on one emergency by the artisan whose proposal was accepted.

    Fields copied from the emergency and the proposal (title, description,
    address, price) are frozen at acceptance.
    """

    class Status(models.TextChoices):
        PENDING = 'pending', _('Pending')
        ACCEPTED = 'accepted', _('Accepted')
        IN_PROGRESS = 'in_progress', _('In Progress')
        COMPLETED = 'completed', _('Completed')
        PAID = 'paid', _('Paid')

    LIFECYCLE = StatusLifecycle('Project', {
        Status.ACCEPTED: {Status.IN_PROGRESS, Status.COMPLETED},
        Status.IN_PROGRESS: {Status.COMPLETED},
        Status.COMPLETED: {Status.PAID},
    })

    emergency = models.OneToOneField(
        'emergencies.Emergency',
        on_delete=models.PROTECT,
        related_name='project'
    )
    proposal = models.OneToOneField(
        'emergencies.Proposal',
        on_delete=models.PROTECT,
        related_name='project'
    )
    gestionnaire = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='managed_projects'
    )
    artisan = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='artisan_projects'
    )

    title = models.CharField(max_length=200)
    description = models.TextField()
    address = models.CharField(max_length=255)
    # Whole euros, from the accepted proposal
    price = models.PositiveIntegerField()

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.ACCEPTED,
        db_index=True
    )
    start_date = models.DateTimeField(null=True, blank=True)
    completed_date = models.DateTimeField(null=True, blank=True)

    photos_before = models.JSONField(default=list, blank=True)
    photos_during = models.JSONField(default=list, blank=True)
    photos_after = models.JSONField(default=list, blank=True)

    rating = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1), MaxValueValidator(5)]
    )
    review = models.TextField(blank=True)
    rated_at = models.DateTimeField(null=True, blank=True)

    class Meta(BaseModel.Meta):
        verbose_name = _('Project')
        verbose_name_plural = _('Projects')
        indexes = [
            models.Index(fields=['gestionnaire', 'status'], name='project_gest_status_idx'),
            models.Index(fields=['artisan', 'status'], name='project_artisan_status_idx'),
        ]

    def __str__(self):
        return self.title

    def is_participant(self, user) -> bool:
        return user.pk in (self.gestionnaire_id, self.artisan_id)

    def photos_for_phase(self, phase: str) -> list:
        if phase not in PHOTO_PHASES:
            raise ValueError(f"Unknown photo phase: {phase}")
        return getattr(self, f'photos_{phase}')

    def transition_to(self, status: str) -> list:
        """
        Move to `status` and stamp the matching date.

        Returns the list of changed fields; the caller saves.
        """
        self.LIFECYCLE.check(self.status, status)
        self.status = status
        changed = ['status', 'updated_at']

        if status == self.Status.IN_PROGRESS:
            self.start_date = timezone.now()
            changed.append('start_date')
        elif status == self.Status.COMPLETED:
            self.completed_date = timezone.now()
            changed.append('completed_date')
            if self.start_date is None:
                self.start_date = self.completed_date
                changed.append('start_date')

        return changed


# ============================================================================
# TIMELINE
# ============================================================================

class TimelineEntry(BaseModel):
    """Append-only project history entry."""

    class EntryType(models.TextChoices):
        STATUS_CHANGE = 'status_change', _('Status change')
        MESSAGE = 'message', _('Message')
        PHOTO_UPLOAD = 'photo_upload', _('Photo upload')
        PAYMENT = 'payment', _('Payment')

    SYSTEM_AUTHOR = 'System'

    project = models.ForeignKey(
        Project,
        on_delete=models.CASCADE,
        related_name='timeline'
    )
    entry_type = models.CharField(
        max_length=20,
        choices=EntryType.choices,
        db_index=True
    )
    message = models.TextField(validators=[MaxLengthValidator(5000)])
    # Display name, 'System' for automatic entries
    author = models.CharField(max_length=200)
    author_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+'
    )
    timestamp = models.DateTimeField(default=timezone.now, db_index=True)
    photos = models.JSONField(default=list, blank=True)

    class Meta:
        verbose_name = _('Timeline entry')
        verbose_name_plural = _('Timeline entries')
        ordering = ['timestamp', 'created_at']

    def __str__(self):
        return f"[{self.entry_type}] {self.message[:50]}"


# ============================================================================
# CHAT
# ============================================================================

class ChatMessage(BaseModel):
    """Message between the two parties of a project. Only `is_read` changes."""

    project = models.ForeignKey(
        Project,
        on_delete=models.CASCADE,
        related_name='messages'
    )
    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='project_messages_sent'
    )
    sender_name = models.CharField(max_length=200)
    message = models.TextField(validators=[MaxLengthValidator(5000)])
    timestamp = models.DateTimeField(default=timezone.now, db_index=True)
    photos = models.JSONField(default=list, blank=True)
    is_read = models.BooleanField(default=False, db_index=True)

    class Meta:
        verbose_name = _('Chat message')
        verbose_name_plural = _('Chat messages')
        ordering = ['timestamp', 'created_at']

    def __str__(self):
        return f"Message in {self.project.title} by {self.sender_name}"
