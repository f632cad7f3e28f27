"""
Projects Services - Business Logic Layer

- ProjectService: project lifecycle (creation on acceptance, start,
  completion, payment), phase photos and rating
- TimelineService: append-only timeline entries
- ChatService: project chat

Every lifecycle move runs in a transaction with the project row locked and
appends exactly one status_change timeline entry.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List, Optional

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Avg, F
from django.utils import timezone

from api.exceptions import BusinessRuleViolation, NotParticipant, RoleRequired
from core.constants import PHOTO_PHASES
from core.storage import ensure_stored_urls, store_photos
from core.validators import sanitize_text
from emergencies.models import Emergency
from notifications.models import Notification
from notifications.services import notify

from .models import ChatMessage, Project, TimelineEntry

logger = logging.getLogger(__name__)
User = get_user_model()

STATUS_CHANGE_MESSAGE = "Statut changé vers: {status}"
PROJECT_STARTED_MESSAGE = "Projet accepté et démarré"
PHOTOS_ADDED_MESSAGE = "Photos {phase} ajoutées"


def ensure_participant(project: Project, user) -> None:
    if project.is_participant(user) or getattr(user, 'is_platform_admin', False):
        return
    logger.warning(f"NOT_PARTICIPANT: user={user.id} project={project.id}")
    raise NotParticipant()


# =============================================================================
# TIMELINE SERVICE
# =============================================================================

class TimelineService:
    """Appends entries to a project's timeline."""

    # Entry types a participant may add by hand; the others come from
    # lifecycle operations.
    MANUAL_TYPES = {TimelineEntry.EntryType.MESSAGE, TimelineEntry.EntryType.PHOTO_UPLOAD}

    @staticmethod
    def add_entry(
        project: Project,
        entry_type: str,
        message: str,
        author: str = TimelineEntry.SYSTEM_AUTHOR,
        author_user=None,
        photos: Optional[List[str]] = None,
    ) -> TimelineEntry:
        return TimelineEntry.objects.create(
            project=project,
            entry_type=entry_type,
            message=message,
            author=author,
            author_user=author_user,
            photos=photos or [],
        )

    @staticmethod
    def add_status_change(project: Project, user=None) -> TimelineEntry:
        return TimelineService.add_entry(
            project,
            TimelineEntry.EntryType.STATUS_CHANGE,
            STATUS_CHANGE_MESSAGE.format(status=project.status),
            author=user.display_name if user else TimelineEntry.SYSTEM_AUTHOR,
            author_user=user,
        )

    @staticmethod
    def add_participant_entry(
        project: Project,
        user,
        entry_type: str,
        message: str,
        photos: Optional[List[str]] = None,
    ) -> TimelineEntry:
        """Timeline entry written by one of the project's parties."""
        ensure_participant(project, user)
        if entry_type not in TimelineService.MANUAL_TYPES:
            raise BusinessRuleViolation(
                f"Timeline entries of type '{entry_type}' are recorded automatically.",
                rule='manual_timeline_type',
            )
        return TimelineService.add_entry(
            project,
            entry_type,
            sanitize_text(message),
            author=user.display_name,
            author_user=user,
            photos=ensure_stored_urls(photos),
        )


# =============================================================================
# PROJECT SERVICE
# =============================================================================

class ProjectService:
    """Project lifecycle operations."""

    @staticmethod
    def _lock(project: Project) -> Project:
        return Project.objects.select_for_update().get(pk=project.pk)

    @staticmethod
    def _other_party(project: Project, user):
        return project.gestionnaire if user.pk == project.artisan_id else project.artisan

    @staticmethod
    def create_from_proposal(proposal, emergency) -> Project:
        """
        Create the project for an accepted proposal.

        Called inside the acceptance transaction; the one-to-one links on
        emergency and proposal make a second project impossible.
        """
        project = Project.objects.create(
            emergency=emergency,
            proposal=proposal,
            gestionnaire=emergency.created_by,
            artisan=proposal.artisan,
            title=emergency.title,
            description=emergency.description,
            address=emergency.address,
            price=proposal.price,
            status=Project.Status.ACCEPTED,
        )
        TimelineService.add_entry(
            project,
            TimelineEntry.EntryType.STATUS_CHANGE,
            PROJECT_STARTED_MESSAGE,
        )
        logger.info(f"PROJECT_CREATED: project={project.id} proposal={proposal.id}")
        return project

    @staticmethod
    @transaction.atomic
    def start(project: Project, user) -> Project:
        """accepted -> in_progress, by the project's artisan."""
        if user.pk != project.artisan_id and not user.is_platform_admin:
            raise RoleRequired(required_role='artisan', detail="Only the project's artisan can start it.")

        locked = ProjectService._lock(project)
        changed = locked.transition_to(Project.Status.IN_PROGRESS)
        locked.save(update_fields=changed)
        TimelineService.add_status_change(locked, user)

        notify(
            locked.gestionnaire,
            Notification.Type.PROJECT_UPDATE,
            "Projet démarré",
            f"{user.display_name} a démarré le projet « {locked.title} ».",
            related_id=locked.id,
        )
        logger.info(f"PROJECT_STARTED: project={locked.id} user={user.id}")
        return locked

    @staticmethod
    @transaction.atomic
    def complete(project: Project, user) -> Project:
        """
        Mark the work done.

        Sets completed_date, appends one status_change entry and moves the
        linked emergency to completed.
        """
        ensure_participant(project, user)

        locked = ProjectService._lock(project)
        changed = locked.transition_to(Project.Status.COMPLETED)
        locked.save(update_fields=changed)
        TimelineService.add_status_change(locked, user)

        emergency = Emergency.objects.select_for_update().get(pk=locked.emergency_id)
        emergency.transition_to(Emergency.Status.COMPLETED)

        notify(
            ProjectService._other_party(locked, user),
            Notification.Type.PROJECT_UPDATE,
            "Projet terminé",
            f"Le projet « {locked.title} » est terminé.",
            related_id=locked.id,
        )
        logger.info(f"PROJECT_COMPLETED: project={locked.id} user={user.id}")
        return locked

    @staticmethod
    @transaction.atomic
    def mark_paid(project: Project) -> Project:
        """
        completed -> paid once the payment went through.

        Closes the emergency and counts the project on the artisan's profile.
        """
        locked = ProjectService._lock(project)
        changed = locked.transition_to(Project.Status.PAID)
        locked.save(update_fields=changed)
        TimelineService.add_status_change(locked)

        emergency = Emergency.objects.select_for_update().get(pk=locked.emergency_id)
        emergency.transition_to(Emergency.Status.CLOSED)

        User.objects.filter(pk=locked.artisan_id).update(completed_projects=F('completed_projects') + 1)

        logger.info(f"PROJECT_PAID: project={locked.id}")
        return locked

    @staticmethod
    @transaction.atomic
    def upload_photos(project: Project, user, phase: str, files: Iterable) -> Project:
        """Append photos to one phase set and record one photo_upload entry."""
        ensure_participant(project, user)
        if phase not in PHOTO_PHASES:
            raise BusinessRuleViolation(
                f"Unknown photo phase '{phase}'. Expected one of: {', '.join(PHOTO_PHASES)}.",
                rule='photo_phase',
            )

        locked = ProjectService._lock(project)
        urls = store_photos(files, f"projects/{locked.id}/{phase}")

        field = f'photos_{phase}'
        setattr(locked, field, locked.photos_for_phase(phase) + urls)
        locked.save(update_fields=[field, 'updated_at'])

        TimelineService.add_entry(
            locked,
            TimelineEntry.EntryType.PHOTO_UPLOAD,
            PHOTOS_ADDED_MESSAGE.format(phase=phase),
            author=user.display_name,
            author_user=user,
            photos=urls,
        )
        return locked

    @staticmethod
    @transaction.atomic
    def rate(project: Project, user, rating: int, review: str = '') -> Project:
        """Gestionnaire rates the finished work; the artisan's average is recomputed."""
        if user.pk != project.gestionnaire_id:
            raise RoleRequired(required_role='gestionnaire', detail="Only the project's gestionnaire can rate it.")

        locked = ProjectService._lock(project)
        if locked.status not in (Project.Status.COMPLETED, Project.Status.PAID):
            raise BusinessRuleViolation(
                "A project can only be rated once it is completed.",
                rule='rate_after_completion',
            )
        if locked.rating is not None:
            raise BusinessRuleViolation("This project has already been rated.", rule='single_rating')
        if not 1 <= rating <= 5:
            raise BusinessRuleViolation("Rating must be between 1 and 5.", rule='rating_range')

        locked.rating = rating
        locked.review = sanitize_text(review or '')
        locked.rated_at = timezone.now()
        locked.save(update_fields=['rating', 'review', 'rated_at', 'updated_at'])

        ProjectService.recompute_artisan_rating(locked.artisan_id)
        return locked

    @staticmethod
    def recompute_artisan_rating(artisan_id) -> Optional[Decimal]:
        average = Project.objects.filter(
            artisan_id=artisan_id, rating__isnull=False
        ).aggregate(avg=Avg('rating'))['avg']
        rating = None
        if average is not None:
            rating = Decimal(str(average)).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
        User.objects.filter(pk=artisan_id).update(rating=rating)
        return rating


# =============================================================================
# CHAT SERVICE
# =============================================================================

class ChatService:
    """Messages between the gestionnaire and the artisan of a project."""

    @staticmethod
    def send_message(
        project: Project,
        user,
        message: str,
        photos: Optional[List[str]] = None,
        attachments: Optional[Iterable] = None,
    ) -> ChatMessage:
        """
        Store a chat message.

        `photos` are URLs already served by our storage; `attachments` are
        uploaded files, saved under the project's chat folder.
        """
        ensure_participant(project, user)
        text = sanitize_text(message)
        if not text:
            raise BusinessRuleViolation("Message cannot be empty.", rule='empty_message')

        urls = ensure_stored_urls(photos)
        attachments = list(attachments or [])
        if attachments:
            urls += store_photos(attachments, f"projects/{project.id}/chat")

        chat_message = ChatMessage.objects.create(
            project=project,
            sender=user,
            sender_name=user.display_name,
            message=text,
            photos=urls,
        )
        logger.info(f"CHAT_MESSAGE_SENT: project={project.id} sender={user.id}")
        return chat_message

    @staticmethod
    def list_messages(project: Project, user):
        ensure_participant(project, user)
        return project.messages.order_by('timestamp', 'created_at')

    @staticmethod
    def mark_read(project: Project, user) -> int:
        """Mark every message of the project not sent by `user` as read."""
        ensure_participant(project, user)
        return ChatMessage.objects.filter(
            project=project, is_read=False
        ).exclude(sender=user).update(is_read=True, updated_at=timezone.now())
