"""
Projects API ViewSets.

Endpoints:
- GET      /projects/                      projects the user takes part in (?status=)
- GET      /projects/{id}/                 both parties, photos and timeline
- POST     /projects/{id}/start/           artisan: accepted -> in_progress
- POST     /projects/{id}/complete/        participant: -> completed
- POST     /projects/{id}/photos/          multipart `phase` + `photos`
- GET/POST /projects/{id}/timeline/
- GET/POST /projects/{id}/messages/        multipart `attachments` upload chat photos
- POST     /projects/{id}/messages/read/   mark the other party's messages read
- POST     /projects/{id}/rate/            gestionnaire, once completed
"""

from django.db.models import Q
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, permissions, status
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.response import Response

from api.base import APIResponse
from core.permissions import IsParticipant
from core.viewsets import SecureReadOnlyViewSet

from ..models import Project
from ..serializers import (
    ChatMessageCreateSerializer,
    ChatMessageSerializer,
    ProjectListSerializer,
    ProjectPhotoUploadSerializer,
    ProjectRatingSerializer,
    ProjectSerializer,
    TimelineEntryCreateSerializer,
    TimelineEntrySerializer,
)
from ..services import ChatService, ProjectService, TimelineService


class ProjectViewSet(SecureReadOnlyViewSet):
    """
    Projects are created by proposal acceptance only; every change after
    that goes through a custom action.
    """
    permission_classes = [permissions.IsAuthenticated, IsParticipant]
    participant_fields = ['gestionnaire', 'artisan']
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['status']
    search_fields = ['title', 'address']
    ordering_fields = ['created_at', 'price', 'completed_date']
    ordering = ['-created_at']

    def get_queryset(self):
        queryset = Project.objects.select_related('gestionnaire', 'artisan')
        user = self.request.user
        if not user.is_platform_admin:
            queryset = queryset.filter(Q(gestionnaire=user) | Q(artisan=user))
        if self.action == 'retrieve':
            queryset = queryset.prefetch_related('timeline')
        return queryset

    def get_serializer_class(self):
        if self.action == 'list':
            return ProjectListSerializer
        return ProjectSerializer

    def _project_response(self, project):
        return Response(ProjectSerializer(project, context=self.get_serializer_context()).data)

    @action(detail=True, methods=['post'])
    def start(self, request, pk=None):
        return self._project_response(ProjectService.start(self.get_object(), request.user))

    @action(detail=True, methods=['post'])
    def complete(self, request, pk=None):
        return self._project_response(ProjectService.complete(self.get_object(), request.user))

    @action(detail=True, methods=['post'], parser_classes=[MultiPartParser, FormParser])
    def photos(self, request, pk=None):
        project = self.get_object()
        serializer = ProjectPhotoUploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        phase = serializer.validated_data['phase']
        project = ProjectService.upload_photos(project, request.user, phase, serializer.validated_data['photos'])
        return APIResponse.success(
            data={'phase': phase, 'photos': project.photos_for_phase(phase)},
            message='Photos uploaded'
        )

    @action(detail=True, methods=['get', 'post'])
    def timeline(self, request, pk=None):
        project = self.get_object()

        if request.method == 'POST':
            serializer = TimelineEntryCreateSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            entry = TimelineService.add_participant_entry(
                project,
                request.user,
                serializer.validated_data['type'],
                serializer.validated_data['message'],
                photos=serializer.validated_data['photos'],
            )
            return Response(TimelineEntrySerializer(entry).data, status=status.HTTP_201_CREATED)

        return Response(TimelineEntrySerializer(project.timeline.all(), many=True).data)

    @action(detail=True, methods=['get', 'post'])
    def messages(self, request, pk=None):
        project = self.get_object()

        if request.method == 'POST':
            serializer = ChatMessageCreateSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            message = ChatService.send_message(
                project,
                request.user,
                serializer.validated_data['message'],
                serializer.validated_data['photos'],
                attachments=serializer.validated_data['attachments'],
            )
            return Response(ChatMessageSerializer(message).data, status=status.HTTP_201_CREATED)

        queryset = ChatService.list_messages(project, request.user)
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(ChatMessageSerializer(page, many=True).data)
        return Response(ChatMessageSerializer(queryset, many=True).data)

    @action(detail=True, methods=['post'], url_path='messages/read')
    def messages_read(self, request, pk=None):
        count = ChatService.mark_read(self.get_object(), request.user)
        return APIResponse.success(data={'updated': count})

    @action(detail=True, methods=['post'])
    def rate(self, request, pk=None):
        project = self.get_object()
        serializer = ProjectRatingSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        project = ProjectService.rate(
            project,
            request.user,
            serializer.validated_data['rating'],
            serializer.validated_data['review'],
        )
        return self._project_response(project)
