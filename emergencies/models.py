"""
Emergencies Models - Maintenance requests and the bids answering them.

Models:
- Emergency: an urgent building problem posted by a gestionnaire
- Proposal: an artisan's priced bid on an emergency

An emergency holds at most one accepted proposal; acceptance creates the
project (see emergencies.services.ProposalService.accept).
"""

from django.conf import settings
from django.core.validators import MaxLengthValidator, MinValueValidator
from django.db import models
from django.db.models import Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from core.constants import TRADE_CHOICES
from core.db.models import BaseModel
from core.lifecycle import StatusLifecycle
from core.validators import validate_arrondissement


class Emergency(BaseModel):
    """
    An urgent maintenance request for a building in Paris.

    Status moves forward only: open -> in_progress -> completed -> closed,
    or open -> closed when the gestionnaire withdraws it.
    """

    class Status(models.TextChoices):
        OPEN = 'open', _('Open')
        IN_PROGRESS = 'in_progress', _('In Progress')
        COMPLETED = 'completed', _('Completed')
        CLOSED = 'closed', _('Closed')

    class UrgencyLevel(models.TextChoices):
        LOW = 'low', _('Low')
        MEDIUM = 'medium', _('Medium')
        HIGH = 'high', _('High')
        CRITICAL = 'critical', _('Critical')

    LIFECYCLE = StatusLifecycle('Emergency', {
        Status.OPEN: {Status.IN_PROGRESS, Status.CLOSED},
        Status.IN_PROGRESS: {Status.COMPLETED},
        Status.COMPLETED: {Status.CLOSED},
    })

    title = models.CharField(max_length=200)
    description = models.TextField(validators=[MaxLengthValidator(5000)])
    address = models.CharField(max_length=255)
    arrondissement = models.PositiveSmallIntegerField(
        validators=[validate_arrondissement],
        db_index=True
    )
    trade = models.CharField(
        max_length=50,
        choices=TRADE_CHOICES,
        db_index=True
    )
    # Whole euros
    max_budget = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    urgency_level = models.CharField(
        max_length=10,
        choices=UrgencyLevel.choices,
        default=UrgencyLevel.MEDIUM,
        db_index=True
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.OPEN,
        db_index=True
    )
    photos = models.JSONField(default=list, blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='emergencies'
    )
    accepted_proposal = models.OneToOneField(
        'emergencies.Proposal',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+'
    )

    class Meta(BaseModel.Meta):
        verbose_name = _('Emergency')
        verbose_name_plural = _('Emergencies')
        indexes = [
            models.Index(fields=['status', 'trade', 'arrondissement'], name='emergency_status_trade_arr_idx'),
        ]

    def __str__(self):
        return f"{self.title} ({self.arrondissement}e)"

    @property
    def is_open(self) -> bool:
        return self.status == self.Status.OPEN

    def transition_to(self, status: str, save: bool = True) -> None:
        """Move to `status`, raising InvalidStatusTransition if not allowed."""
        self.LIFECYCLE.check(self.status, status)
        self.status = status
        if save:
            self.save(update_fields=['status', 'updated_at'])


class Proposal(BaseModel):
    """
    An artisan's bid on an emergency.

    The artisan's name, company and rating are copied at submission so the
    gestionnaire compares bids as they were made.
    """

    class Status(models.TextChoices):
        PENDING = 'pending', _('Pending')
        ACCEPTED = 'accepted', _('Accepted')
        REJECTED = 'rejected', _('Rejected')

    LIFECYCLE = StatusLifecycle('Proposal', {
        Status.PENDING: {Status.ACCEPTED, Status.REJECTED},
    })

    emergency = models.ForeignKey(
        Emergency,
        on_delete=models.CASCADE,
        related_name='proposals'
    )
    artisan = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='proposals'
    )

    # Snapshot of the artisan profile at submission
    artisan_name = models.CharField(max_length=200)
    artisan_company = models.CharField(max_length=200, blank=True)
    artisan_rating = models.DecimalField(max_digits=3, decimal_places=2)

    # Whole euros
    price = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    description = models.TextField(validators=[MaxLengthValidator(5000)])
    estimated_duration = models.CharField(max_length=100)

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True
    )
    responded_at = models.DateTimeField(null=True, blank=True)

    class Meta(BaseModel.Meta):
        verbose_name = _('Proposal')
        verbose_name_plural = _('Proposals')
        constraints = [
            models.UniqueConstraint(
                fields=['emergency', 'artisan'],
                name='emergencies_proposal_unique_emergency_artisan'
            ),
            models.UniqueConstraint(
                fields=['emergency'],
                condition=Q(status='accepted'),
                name='emergencies_proposal_single_accepted'
            ),
        ]

    def __str__(self):
        return f"Proposal by {self.artisan_name} for {self.emergency.title}"

    def transition_to(self, status: str, save: bool = True) -> None:
        self.LIFECYCLE.check(self.status, status)
        self.status = status
        self.responded_at = timezone.now()
        if save:
            self.save(update_fields=['status', 'responded_at', 'updated_at'])
