"""
Emergencies API ViewSets.

Endpoints:
- GET/POST /emergencies/                      list (role-scoped) / post an emergency
- GET      /emergencies/{id}/
- POST     /emergencies/{id}/close/           withdraw or archive
- POST     /emergencies/{id}/photos/          multipart `photos`
- GET/POST /emergencies/{id}/proposals/       bids on one emergency
- GET      /opportunities/                    open emergencies matching the artisan
- GET/POST /proposals/
- POST     /proposals/{id}/accept/            creates the project
- POST     /proposals/{id}/reject/
"""

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, permissions, status
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.response import Response

from api.base import APIResponse
from core.permissions import IsArtisan, IsGestionnaire
from core.viewsets import SecureReadOnlyViewSet, SecureViewSet

from ..filters import EmergencyFilter, OpportunityFilter, ProposalFilter
from ..models import Emergency
from ..serializers import (
    EmergencyCreateSerializer,
    EmergencySerializer,
    PhotoUploadSerializer,
    ProposalCreateSerializer,
    ProposalSerializer,
)
from ..services import EmergencyService, ProposalService


# =============================================================================
# EMERGENCIES
# =============================================================================

class EmergencyViewSet(SecureViewSet):
    """
    Emergency registry.

    Gestionnaires see the emergencies they posted, artisans the open ones
    plus those they bid on. Emergencies are never edited or deleted through
    the API; status moves go through the custom actions.
    """
    http_method_names = ['get', 'post', 'head', 'options']
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = EmergencyFilter
    search_fields = ['title', 'description', 'address']
    ordering_fields = ['created_at', 'max_budget']
    ordering = ['-created_at']
    action_permissions = {
        'create': [permissions.IsAuthenticated, IsGestionnaire],
        'close': [permissions.IsAuthenticated, IsGestionnaire],
        'photos': [permissions.IsAuthenticated, IsGestionnaire],
    }

    def get_queryset(self):
        return EmergencyService.visible_to(self.request.user).prefetch_related('proposals')

    def get_serializer_class(self):
        if self.action == 'create':
            return EmergencyCreateSerializer
        if self.action == 'photos':
            return PhotoUploadSerializer
        return EmergencySerializer

    def create(self, request, *args, **kwargs):
        serializer = EmergencyCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        emergency = EmergencyService.create(request.user, **serializer.validated_data)
        return Response(
            EmergencySerializer(emergency, context=self.get_serializer_context()).data,
            status=status.HTTP_201_CREATED
        )

    @action(detail=True, methods=['post'])
    def close(self, request, pk=None):
        emergency = EmergencyService.close(self.get_object(), request.user)
        return Response(EmergencySerializer(emergency, context=self.get_serializer_context()).data)

    @action(detail=True, methods=['post'], parser_classes=[MultiPartParser, FormParser])
    def photos(self, request, pk=None):
        emergency = self.get_object()
        serializer = PhotoUploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        emergency = EmergencyService.add_photos(emergency, request.user, serializer.validated_data['photos'])
        return APIResponse.success(data={'photos': emergency.photos}, message='Photos uploaded')

    @action(detail=True, methods=['get', 'post'])
    def proposals(self, request, pk=None):
        """GET the visible bids on this emergency, POST a new bid (artisans)."""
        emergency = self.get_object()

        if request.method == 'POST':
            serializer = ProposalCreateSerializer(data=request.data, context={'emergency': emergency})
            serializer.is_valid(raise_exception=True)
            data = dict(serializer.validated_data)
            data.pop('emergency', None)
            proposal = ProposalService.create(request.user, emergency, **data)
            return Response(ProposalSerializer(proposal).data, status=status.HTTP_201_CREATED)

        queryset = ProposalService.visible_to(request.user).filter(emergency=emergency)
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(ProposalSerializer(page, many=True).data)
        return Response(ProposalSerializer(queryset, many=True).data)


class OpportunityViewSet(SecureReadOnlyViewSet):
    """Open emergencies an artisan can still bid on."""
    serializer_class = EmergencySerializer
    permission_classes = [permissions.IsAuthenticated, IsArtisan]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = OpportunityFilter
    search_fields = ['title', 'description']
    ordering_fields = ['created_at', 'max_budget']
    ordering = ['-created_at']

    def get_queryset(self):
        return EmergencyService.opportunities_for(self.request.user)


# =============================================================================
# PROPOSALS
# =============================================================================

class ProposalViewSet(SecureViewSet):
    """
    Proposals.

    Artisans see and submit their own bids; gestionnaires see the bids on
    their emergencies and accept or reject them.
    """
    http_method_names = ['get', 'post', 'head', 'options']
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    filterset_class = ProposalFilter
    ordering_fields = ['created_at', 'price']
    ordering = ['-created_at']
    action_permissions = {
        'create': [permissions.IsAuthenticated, IsArtisan],
        'accept': [permissions.IsAuthenticated, IsGestionnaire],
        'reject': [permissions.IsAuthenticated, IsGestionnaire],
    }

    def get_queryset(self):
        return ProposalService.visible_to(self.request.user)

    def get_serializer_class(self):
        if self.action == 'create':
            return ProposalCreateSerializer
        return ProposalSerializer

    def create(self, request, *args, **kwargs):
        serializer = ProposalCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        emergency: Emergency = data.pop('emergency')
        proposal = ProposalService.create(request.user, emergency, **data)
        return Response(ProposalSerializer(proposal).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'])
    def accept(self, request, pk=None):
        result = ProposalService.accept(self.get_object(), request.user)
        return APIResponse.success(
            data={
                'proposal': ProposalSerializer(result.proposal).data,
                'project_id': str(result.project.id),
                'rejected_proposals': [str(p.id) for p in result.rejected_proposals],
            },
            message='Proposal accepted'
        )

    @action(detail=True, methods=['post'])
    def reject(self, request, pk=None):
        proposal = ProposalService.reject(self.get_object(), request.user)
        return Response(ProposalSerializer(proposal).data)
