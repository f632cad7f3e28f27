"""
Emergencies Serializers - DRF serializers for emergencies and proposals.

Read serializers expose the full record; write serializers accept only
the fields a user may set, the services fill in the rest.
"""

from rest_framework import serializers

from accounts.serializers import UserSummarySerializer

from .models import Emergency, Proposal


# ==================== EMERGENCY SERIALIZERS ====================

class EmergencySerializer(serializers.ModelSerializer):
    created_by = UserSummarySerializer(read_only=True)
    proposals_count = serializers.SerializerMethodField()
    project_id = serializers.SerializerMethodField()

    class Meta:
        model = Emergency
        fields = [
            'id', 'title', 'description', 'address', 'arrondissement',
            'trade', 'max_budget', 'urgency_level', 'status', 'photos',
            'created_by', 'accepted_proposal', 'proposals_count', 'project_id',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields

    def get_proposals_count(self, obj):
        return obj.proposals.count()

    def get_project_id(self, obj):
        project = getattr(obj, 'project', None)
        return str(project.id) if project else None


class EmergencyCreateSerializer(serializers.ModelSerializer):
    """Fields a gestionnaire provides when posting an emergency."""

    class Meta:
        model = Emergency
        fields = [
            'title', 'description', 'address', 'arrondissement',
            'trade', 'max_budget', 'urgency_level',
        ]


class PhotoUploadSerializer(serializers.Serializer):
    photos = serializers.ListField(
        child=serializers.ImageField(allow_empty_file=False, use_url=False),
        allow_empty=False
    )


# ==================== PROPOSAL SERIALIZERS ====================

class ProposalSerializer(serializers.ModelSerializer):
    emergency_title = serializers.CharField(source='emergency.title', read_only=True)

    class Meta:
        model = Proposal
        fields = [
            'id', 'emergency', 'emergency_title', 'artisan',
            'artisan_name', 'artisan_company', 'artisan_rating',
            'price', 'description', 'estimated_duration',
            'status', 'responded_at', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class ProposalCreateSerializer(serializers.Serializer):
    """Bid fields; `emergency` is omitted when posting under /emergencies/{id}/proposals/."""
    emergency = serializers.PrimaryKeyRelatedField(
        queryset=Emergency.objects.all(),
        required=False
    )
    price = serializers.IntegerField(min_value=1)
    description = serializers.CharField(max_length=5000)
    estimated_duration = serializers.CharField(max_length=100)

    def validate(self, attrs):
        if 'emergency' not in attrs and 'emergency' not in self.context:
            raise serializers.ValidationError({'emergency': ["This field is required."]})
        return attrs
