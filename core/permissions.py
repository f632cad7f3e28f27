"""
Core Permissions - Role and participant checks for Mano-Pro

USAGE:
    from core.permissions import IsGestionnaire, IsArtisan, IsParticipant

    class ProposalViewSet(SecureViewSet):
        action_permissions = {
            'create': [IsAuthenticated, IsArtisan],
            'accept': [IsAuthenticated, IsGestionnaire],
        }

PERMISSION CATEGORIES:

1. ROLE-BASED:
   - IsGestionnaire: property managers (admins pass too)
   - IsArtisan: tradespeople (admins pass too)
   - IsPlatformAdmin: platform administrators only

2. OBJECT-LEVEL:
   - IsParticipant: user appears on one of the view's participant_fields
"""

import logging
from typing import Any

from rest_framework import permissions
from rest_framework.request import Request
from rest_framework.views import APIView

logger = logging.getLogger('security.permissions')


def _is_platform_admin(user) -> bool:
    return bool(user and user.is_authenticated and getattr(user, 'is_platform_admin', False))


# =============================================================================
# ROLE-BASED PERMISSIONS
# =============================================================================

class RolePermission(permissions.BasePermission):
    """
    Base class for single-role checks.

    Platform admins satisfy every role check.
    """

    role: str = ''
    code = 'ROLE_REQUIRED'

    @property
    def message(self) -> str:
        return f"This action requires the '{self.role}' role."

    def has_permission(self, request: Request, view: APIView) -> bool:
        user = request.user
        if not user or not user.is_authenticated:
            return False
        if getattr(user, 'role', None) == self.role or _is_platform_admin(user):
            return True

        logger.warning(
            f"ROLE_DENIED: user={user.id} role={getattr(user, 'role', None)} "
            f"required={self.role} view={view.__class__.__name__}"
        )
        return False


class IsGestionnaire(RolePermission):
    role = 'gestionnaire'


class IsArtisan(RolePermission):
    role = 'artisan'


class IsPlatformAdmin(permissions.BasePermission):
    message = "This action is restricted to platform administrators."
    code = 'ROLE_REQUIRED'

    def has_permission(self, request: Request, view: APIView) -> bool:
        return _is_platform_admin(request.user)


# =============================================================================
# OBJECT-LEVEL PERMISSIONS
# =============================================================================

class IsParticipant(permissions.BasePermission):
    """
    Object-level permission for resources shared by several users.

    Usage:
        class ProjectViewSet(SecureViewSet):
            permission_classes = [IsAuthenticated, IsParticipant]
            participant_fields = ['gestionnaire', 'artisan']

    Dotted paths are followed ('project.artisan'). Platform admins always pass.
    """

    message = "You must be a participant to access this resource."
    code = 'NOT_PARTICIPANT'

    def has_permission(self, request: Request, view: APIView) -> bool:
        return bool(request.user and request.user.is_authenticated)

    def has_object_permission(self, request: Request, view: APIView, obj: Any) -> bool:
        if _is_platform_admin(request.user):
            return True

        for field in getattr(view, 'participant_fields', []):
            current = obj
            for part in field.split('.'):
                current = getattr(current, part, None)
                if current is None:
                    break
            if current is not None and current == request.user:
                return True

        return False
