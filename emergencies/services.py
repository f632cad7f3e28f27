"""
Emergencies Services - Business Logic Layer

- EmergencyService: posting, closing and photographing emergencies,
  artisan opportunity matching
- ProposalService: bidding, and the acceptance that turns a proposal into
  a project

Acceptance is a single transaction holding row locks on the emergency and
all of its proposals, so two concurrent acceptances serialize and the
second one fails with InvalidStatusTransition.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, List

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import Q, QuerySet

from api.exceptions import BusinessRuleViolation, InvalidStatusTransition, NotParticipant, RoleRequired
from core.storage import store_photos
from core.validators import sanitize_text
from notifications.models import Notification
from notifications.services import notify, notify_many
from projects.models import Project
from projects.services import ProjectService

from .models import Emergency, Proposal

logger = logging.getLogger(__name__)
User = get_user_model()


@dataclass
class AcceptanceResult:
    """Outcome of a proposal acceptance."""
    proposal: Proposal
    emergency: Emergency
    project: Project
    rejected_proposals: List[Proposal] = field(default_factory=list)


def _ensure_owner(emergency: Emergency, user) -> None:
    if emergency.created_by_id == user.pk or user.is_platform_admin:
        return
    logger.warning(f"NOT_OWNER: user={user.id} emergency={emergency.id}")
    raise NotParticipant("Only the gestionnaire who posted this emergency can do this.")


# =============================================================================
# EMERGENCY SERVICE
# =============================================================================

class EmergencyService:
    """Emergency registry operations."""

    @staticmethod
    @transaction.atomic
    def create(user, **fields) -> Emergency:
        """Post a new emergency (status open) and alert matching artisans."""
        if not (user.is_gestionnaire or user.is_platform_admin):
            raise RoleRequired(required_role='gestionnaire')

        fields['title'] = sanitize_text(fields['title'])
        fields['description'] = sanitize_text(fields['description'])
        fields['address'] = sanitize_text(fields['address'])
        fields.pop('status', None)

        emergency = Emergency.objects.create(created_by=user, status=Emergency.Status.OPEN, **fields)
        logger.info(
            f"EMERGENCY_CREATED: emergency={emergency.id} user={user.id} "
            f"trade={emergency.trade} arrondissement={emergency.arrondissement}"
        )

        EmergencyService.notify_matching_artisans(emergency)
        return emergency

    @staticmethod
    def matching_artisans(emergency: Emergency) -> List:
        """Active artisans whose declared trades and arrondissements cover the emergency."""
        artisans = User.objects.filter(role=User.Role.ARTISAN, is_active=True)
        return [
            artisan for artisan in artisans
            if artisan.serves(emergency.trade, emergency.arrondissement)
        ]

    @staticmethod
    def notify_matching_artisans(emergency: Emergency) -> int:
        artisans = EmergencyService.matching_artisans(emergency)
        notify_many(
            artisans,
            Notification.Type.NEW_EMERGENCY,
            "Nouvelle urgence",
            f"{emergency.trade} - {emergency.title} ({emergency.arrondissement}e)",
            related_id=emergency.id,
        )
        return len(artisans)

    @staticmethod
    @transaction.atomic
    def close(emergency: Emergency, user) -> Emergency:
        """
        open -> closed (withdrawn) or completed -> closed.

        Pending proposals on a withdrawn emergency are rejected.
        """
        _ensure_owner(emergency, user)

        locked = Emergency.objects.select_for_update().get(pk=emergency.pk)
        locked.transition_to(Emergency.Status.CLOSED)

        pending = Proposal.objects.select_for_update().filter(
            emergency=locked, status=Proposal.Status.PENDING
        )
        for proposal in pending:
            proposal.transition_to(Proposal.Status.REJECTED)

        logger.info(f"EMERGENCY_CLOSED: emergency={locked.id} user={user.id}")
        return locked

    @staticmethod
    @transaction.atomic
    def add_photos(emergency: Emergency, user, files: Iterable) -> Emergency:
        _ensure_owner(emergency, user)

        locked = Emergency.objects.select_for_update().get(pk=emergency.pk)
        if locked.status == Emergency.Status.CLOSED:
            raise BusinessRuleViolation(
                "Photos cannot be added to a closed emergency.",
                rule='emergency_closed',
            )
        urls = store_photos(files, f"emergencies/{locked.id}")
        locked.photos = list(locked.photos) + urls
        locked.save(update_fields=['photos', 'updated_at'])
        return locked

    @staticmethod
    def visible_to(user) -> QuerySet:
        """
        Emergencies a user may list: gestionnaires their own, artisans the
        open ones plus those they bid on, admins all.
        """
        queryset = Emergency.objects.select_related('created_by', 'accepted_proposal')
        if user.is_platform_admin:
            return queryset
        if user.is_artisan:
            return queryset.filter(
                Q(status=Emergency.Status.OPEN) | Q(proposals__artisan=user)
            ).distinct()
        return queryset.filter(created_by=user)

    @staticmethod
    def opportunities_for(artisan) -> QuerySet:
        """
        Open emergencies matching the artisan's trades and arrondissements,
        minus those already bid on. An empty declared list matches everything.
        """
        queryset = Emergency.objects.filter(status=Emergency.Status.OPEN).select_related('created_by')
        if artisan.trades:
            queryset = queryset.filter(trade__in=artisan.trades)
        if artisan.arrondissements:
            queryset = queryset.filter(arrondissement__in=artisan.arrondissements)
        return queryset.exclude(proposals__artisan=artisan)


# =============================================================================
# PROPOSAL SERVICE
# =============================================================================

class ProposalService:
    """Proposal registry operations and the acceptance trigger."""

    @staticmethod
    def default_rating() -> Decimal:
        return Decimal(str(getattr(settings, 'DEFAULT_ARTISAN_RATING', '4.5')))

    @staticmethod
    @transaction.atomic
    def create(artisan, emergency: Emergency, price: int, description: str, estimated_duration: str) -> Proposal:
        """Submit a bid; the artisan's profile is snapshotted on the proposal."""
        if not artisan.is_artisan:
            raise RoleRequired(required_role='artisan')

        locked = Emergency.objects.select_for_update().get(pk=emergency.pk)
        if not locked.is_open:
            raise BusinessRuleViolation(
                "Proposals can only be submitted on open emergencies.",
                rule='emergency_open',
            )
        if Proposal.objects.filter(emergency=locked, artisan=artisan).exists():
            raise BusinessRuleViolation(
                "You have already submitted a proposal for this emergency.",
                rule='single_proposal_per_artisan',
            )
        if price <= 0:
            raise BusinessRuleViolation("Price must be positive.", rule='positive_price')

        try:
            with transaction.atomic():
                proposal = Proposal.objects.create(
                    emergency=locked,
                    artisan=artisan,
                    artisan_name=artisan.display_name,
                    artisan_company=artisan.company,
                    artisan_rating=artisan.rating if artisan.rating is not None else ProposalService.default_rating(),
                    price=price,
                    description=sanitize_text(description),
                    estimated_duration=sanitize_text(estimated_duration),
                )
        except IntegrityError:
            raise BusinessRuleViolation(
                "You have already submitted a proposal for this emergency.",
                rule='single_proposal_per_artisan',
            )

        notify(
            locked.created_by,
            Notification.Type.PROPOSAL_RECEIVED,
            "Nouvelle proposition",
            f"{proposal.artisan_name} propose {proposal.price} € pour « {locked.title} ».",
            related_id=proposal.id,
        )
        logger.info(f"PROPOSAL_CREATED: proposal={proposal.id} emergency={locked.id} artisan={artisan.id}")
        return proposal

    @staticmethod
    def visible_to(user) -> QuerySet:
        queryset = Proposal.objects.select_related('emergency', 'artisan')
        if user.is_platform_admin:
            return queryset
        if user.is_artisan:
            return queryset.filter(artisan=user)
        return queryset.filter(emergency__created_by=user)

    @staticmethod
    @transaction.atomic
    def accept(proposal: Proposal, user) -> AcceptanceResult:
        """
        Accept one proposal.

        1. emergency must be open and owned by the caller, proposal pending;
        2. proposal -> accepted, every other pending sibling -> rejected;
        3. emergency -> in_progress with accepted_proposal set;
        4. exactly one project is created;
        5. the artisan is notified once the transaction commits.
        """
        emergency = Emergency.objects.select_for_update().get(pk=proposal.emergency_id)
        _ensure_owner(emergency, user)

        siblings = list(
            Proposal.objects.select_for_update().filter(emergency=emergency).order_by('created_at')
        )
        locked = next(p for p in siblings if p.pk == proposal.pk)

        if emergency.accepted_proposal_id or any(p.status == Proposal.Status.ACCEPTED for p in siblings):
            logger.warning(f"DOUBLE_ACCEPT_BLOCKED: emergency={emergency.id} proposal={locked.id}")
            raise InvalidStatusTransition(
                detail="A proposal has already been accepted for this emergency.",
                extra_data={'entity': 'Emergency', 'current_status': emergency.status},
            )

        Emergency.LIFECYCLE.check(emergency.status, Emergency.Status.IN_PROGRESS)
        locked.transition_to(Proposal.Status.ACCEPTED)

        rejected = []
        for sibling in siblings:
            if sibling.pk != locked.pk and sibling.status == Proposal.Status.PENDING:
                sibling.transition_to(Proposal.Status.REJECTED)
                rejected.append(sibling)

        emergency.status = Emergency.Status.IN_PROGRESS
        emergency.accepted_proposal = locked
        emergency.save(update_fields=['status', 'accepted_proposal', 'updated_at'])

        project = ProjectService.create_from_proposal(locked, emergency)

        notify(
            locked.artisan,
            Notification.Type.PROPOSAL_ACCEPTED,
            "Proposition acceptée",
            f"Votre proposition pour « {emergency.title} » a été acceptée.",
            related_id=project.id,
        )
        logger.info(
            f"PROPOSAL_ACCEPTED: proposal={locked.id} emergency={emergency.id} "
            f"project={project.id} rejected={len(rejected)} user={user.id}"
        )
        return AcceptanceResult(
            proposal=locked,
            emergency=emergency,
            project=project,
            rejected_proposals=rejected,
        )

    @staticmethod
    @transaction.atomic
    def reject(proposal: Proposal, user) -> Proposal:
        emergency = Emergency.objects.select_for_update().get(pk=proposal.emergency_id)
        _ensure_owner(emergency, user)

        locked = Proposal.objects.select_for_update().get(pk=proposal.pk)
        locked.transition_to(Proposal.Status.REJECTED)
        logger.info(f"PROPOSAL_REJECTED: proposal={locked.id} user={user.id}")
        return locked
