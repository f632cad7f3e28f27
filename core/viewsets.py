"""
Core ViewSets - Secure base classes with permission enforcement and audit logging

USAGE:
    from core.viewsets import SecureViewSet, SecureReadOnlyViewSet

    class EmergencyViewSet(SecureViewSet):
        queryset = Emergency.objects.all()
        serializer_class = EmergencySerializer
        action_permissions = {
            'create': [IsAuthenticated, IsGestionnaire],
        }

CLASSES:

1. SecureViewSet:
   - Default permission: IsAuthenticated
   - Per-action permission overrides via `action_permissions`
   - API_ACCESS / RESOURCE_* security log lines
   - camelCase query parameters (`?pageSize=`, `?ordering=-createdAt`)
   - created_by tracking on create

2. SecureReadOnlyViewSet:
   - Same guarantees for list/retrieve only resources
"""

import logging
from typing import Dict, List, Type

from rest_framework import permissions, viewsets
from rest_framework.request import Request

from core.casing import underscoreize_query_params

logger = logging.getLogger('security.viewsets')


class AuditedViewSetMixin:
    """Per-action permissions and access logging shared by the secure viewsets."""

    permission_classes = [permissions.IsAuthenticated]

    # Override per-action permissions (optional)
    action_permissions: Dict[str, List[Type[permissions.BasePermission]]] = {}

    # Enable audit logging (default: True)
    enable_audit_logging: bool = True

    def get_permissions(self) -> List[permissions.BasePermission]:
        """
        Get permission classes based on action.

        If action_permissions lists the current action, use those; otherwise
        fall back to class-level permission_classes.
        """
        if self.action in self.action_permissions:
            return [perm() for perm in self.action_permissions[self.action]]
        return super().get_permissions()

    def initialize_request(self, request, *args, **kwargs) -> Request:
        # Query strings follow the same camelCase convention as bodies.
        request.GET = underscoreize_query_params(request.GET)
        return super().initialize_request(request, *args, **kwargs)

    def initial(self, request: Request, *args, **kwargs) -> None:
        super().initial(request, *args, **kwargs)
        if self.enable_audit_logging:
            user_id = request.user.id if request.user.is_authenticated else None
            logger.info(
                f"API_ACCESS: user={user_id} "
                f"view={self.__class__.__name__} action={self.action} "
                f"method={request.method} path={request.path}"
            )


# =============================================================================
# SECURE VIEWSET
# =============================================================================

class SecureViewSet(AuditedViewSetMixin, viewsets.ModelViewSet):
    """
    Base ViewSet with authentication, per-action permissions and audit logging.

    Subclasses scope `get_queryset()` to what the requesting user may see.
    """

    # Track created_by (default: True)
    track_user_modifications: bool = True

    def perform_create(self, serializer) -> None:
        save_kwargs = {}
        if self.track_user_modifications:
            model = serializer.Meta.model
            if hasattr(model, 'created_by'):
                save_kwargs['created_by'] = self.request.user

        serializer.save(**save_kwargs)

        if self.enable_audit_logging:
            logger.info(
                f"RESOURCE_CREATED: model={serializer.Meta.model.__name__} "
                f"pk={serializer.instance.pk} user={self.request.user.id}"
            )

    def perform_update(self, serializer) -> None:
        serializer.save()

        if self.enable_audit_logging:
            logger.info(
                f"RESOURCE_UPDATED: model={serializer.Meta.model.__name__} "
                f"pk={serializer.instance.pk} user={self.request.user.id}"
            )

    def perform_destroy(self, instance) -> None:
        if self.enable_audit_logging:
            logger.info(
                f"RESOURCE_DELETED: model={instance.__class__.__name__} "
                f"pk={instance.pk} user={self.request.user.id}"
            )
        super().perform_destroy(instance)


# =============================================================================
# SECURE READ-ONLY VIEWSET
# =============================================================================

class SecureReadOnlyViewSet(AuditedViewSetMixin, viewsets.ReadOnlyModelViewSet):
    """
    Read-only ViewSet with authentication and security logging.

    Use for resources that are only mutated through custom actions.
    """
