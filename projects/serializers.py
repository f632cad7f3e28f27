"""
Projects Serializers - projects, timeline entries and chat messages.

Timeline and chat serializers also build the realtime payloads, so every
field they emit is JSON-native (UUIDs and dates as strings).
"""

from rest_framework import serializers

from accounts.serializers import UserSummarySerializer
from core.constants import PHOTO_PHASES

from .models import ChatMessage, Project, TimelineEntry


# ==================== TIMELINE & CHAT ====================

class TimelineEntrySerializer(serializers.ModelSerializer):
    type = serializers.CharField(source='entry_type', read_only=True)
    project_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = TimelineEntry
        fields = ['id', 'project_id', 'type', 'message', 'author', 'timestamp', 'photos']
        read_only_fields = fields


class TimelineEntryCreateSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=[
        TimelineEntry.EntryType.MESSAGE,
        TimelineEntry.EntryType.PHOTO_UPLOAD,
    ])
    message = serializers.CharField(max_length=5000)
    photos = serializers.ListField(child=serializers.CharField(max_length=500), required=False, default=list)


class ChatMessageSerializer(serializers.ModelSerializer):
    project_id = serializers.UUIDField(read_only=True)
    sender_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = ChatMessage
        fields = ['id', 'project_id', 'sender_id', 'sender_name', 'message', 'timestamp', 'photos', 'is_read']
        read_only_fields = fields


class ChatMessageCreateSerializer(serializers.Serializer):
    """`photos` reference files already in storage; `attachments` are new multipart uploads."""
    message = serializers.CharField(max_length=5000)
    photos = serializers.ListField(child=serializers.CharField(max_length=500), required=False, default=list)
    attachments = serializers.ListField(child=serializers.ImageField(), required=False, default=list)


# ==================== PROJECT ====================

class ProjectListSerializer(serializers.ModelSerializer):
    gestionnaire = UserSummarySerializer(read_only=True)
    artisan = UserSummarySerializer(read_only=True)
    emergency_id = serializers.UUIDField(read_only=True)
    proposal_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = Project
        fields = [
            'id', 'emergency_id', 'proposal_id', 'gestionnaire', 'artisan',
            'title', 'address', 'price', 'status',
            'start_date', 'completed_date', 'rating', 'created_at',
        ]
        read_only_fields = fields


class ProjectSerializer(ProjectListSerializer):
    """Full project with both parties' profiles, photos and the timeline."""
    timeline = TimelineEntrySerializer(many=True, read_only=True)
    unread_messages = serializers.SerializerMethodField()

    class Meta(ProjectListSerializer.Meta):
        fields = ProjectListSerializer.Meta.fields + [
            'description', 'photos_before', 'photos_during', 'photos_after',
            'review', 'rated_at', 'timeline', 'unread_messages', 'updated_at',
        ]
        read_only_fields = fields

    def get_unread_messages(self, obj):
        request = self.context.get('request')
        if request is None or not request.user.is_authenticated:
            return 0
        return obj.messages.filter(is_read=False).exclude(sender=request.user).count()


class ProjectPhotoUploadSerializer(serializers.Serializer):
    phase = serializers.ChoiceField(choices=list(PHOTO_PHASES))
    photos = serializers.ListField(
        child=serializers.ImageField(allow_empty_file=False, use_url=False),
        allow_empty=False
    )


class ProjectRatingSerializer(serializers.Serializer):
    rating = serializers.IntegerField(min_value=1, max_value=5)
    review = serializers.CharField(max_length=5000, required=False, allow_blank=True, default='')
