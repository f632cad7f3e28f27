"""
Notification serializers.
"""

from rest_framework import serializers

from .models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    type = serializers.CharField(source='notification_type', read_only=True)

    class Meta:
        model = Notification
        fields = ['id', 'type', 'title', 'message', 'is_read', 'read_at', 'related_id', 'created_at']
        read_only_fields = fields
