"""
Notifications API ViewSets.

Endpoints:
- GET  /notifications/                  own notifications (filter: is_read, type)
- GET  /notifications/unread-count/     number of unread notifications
- POST /notifications/{id}/read/        mark one as read
- POST /notifications/read-all/         mark every unread notification as read
"""

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters
from rest_framework.decorators import action
from rest_framework.response import Response

from api.base import APIResponse
from core.viewsets import SecureReadOnlyViewSet

from ..models import Notification
from ..serializers import NotificationSerializer
from ..services import NotificationService


class NotificationViewSet(SecureReadOnlyViewSet):
    serializer_class = NotificationSerializer
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    filterset_fields = {
        'is_read': ['exact'],
        'notification_type': ['exact'],
    }
    ordering_fields = ['created_at']

    def get_queryset(self):
        return Notification.objects.filter(recipient=self.request.user)

    @action(detail=True, methods=['post'])
    def read(self, request, pk=None):
        notification = self.get_object()
        notification.mark_as_read()
        return Response(NotificationSerializer(notification).data)

    @action(detail=False, methods=['post'], url_path='read-all')
    def read_all(self, request):
        count = NotificationService.mark_all_read(request.user)
        return APIResponse.success(data={'updated': count})

    @action(detail=False, methods=['get'], url_path='unread-count')
    def unread_count(self, request):
        return APIResponse.success(data={'count': NotificationService.unread_count(request.user)})
