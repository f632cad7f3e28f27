"""
Projects Signal Handlers - realtime broadcast of project activity.

- TimelineEntry post_save (created) -> 'timeline.entry'
- ChatMessage post_save (created)   -> 'chat.message'
- Project post_save with a status update -> 'project.status'
"""

from django.db.models.signals import post_save
from django.dispatch import receiver

from . import realtime
from .models import ChatMessage, Project, TimelineEntry
from .serializers import ChatMessageSerializer, TimelineEntrySerializer


@receiver(post_save, sender=TimelineEntry)
def timeline_entry_created(sender, instance, created, **kwargs):
    if not created:
        return
    realtime.broadcast(
        instance.project_id,
        realtime.TIMELINE_ENTRY,
        dict(TimelineEntrySerializer(instance).data),
    )


@receiver(post_save, sender=ChatMessage)
def chat_message_created(sender, instance, created, **kwargs):
    if not created:
        return
    realtime.broadcast(
        instance.project_id,
        realtime.CHAT_MESSAGE,
        dict(ChatMessageSerializer(instance).data),
    )


@receiver(post_save, sender=Project)
def project_status_changed(sender, instance, created, update_fields=None, **kwargs):
    if created or not update_fields or 'status' not in update_fields:
        return
    realtime.broadcast(instance.id, realtime.PROJECT_STATUS, {
        'project_id': str(instance.id),
        'status': instance.status,
        'start_date': instance.start_date.isoformat() if instance.start_date else None,
        'completed_date': instance.completed_date.isoformat() if instance.completed_date else None,
    })
