"""
Accounts Views - Authentication, profile and user administration endpoints.
"""

import logging

from django.contrib.auth import get_user_model
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, permissions, status, views
from rest_framework.exceptions import ValidationError
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.response import Response
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

from api.base import APIResponse
from core.permissions import IsPlatformAdmin
from core.viewsets import SecureViewSet

from .serializers import (
    AdminUserSerializer,
    AvatarUploadSerializer,
    CurrentUserSerializer,
    LogoutSerializer,
    UserLoginSerializer,
    UserRegistrationSerializer,
)

logger = logging.getLogger(__name__)
security_logger = logging.getLogger('security.auth')

User = get_user_model()


def _token_pair(user) -> dict:
    refresh = RefreshToken.for_user(user)
    return {
        'refresh': str(refresh),
        'access': str(refresh.access_token),
    }


# ==================== AUTHENTICATION VIEWS ====================

class RegisterView(views.APIView):
    """
    User registration endpoint.

    POST: Create a gestionnaire or artisan account and return a token pair.
    """
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        serializer = UserRegistrationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()

        logger.info(f"USER_REGISTERED: user={user.id} role={user.role}")

        return Response({
            'user': CurrentUserSerializer(user, context={'request': request}).data,
            'tokens': _token_pair(user),
        }, status=status.HTTP_201_CREATED)


class LoginView(views.APIView):
    """
    User login endpoint.

    POST: Authenticate with email/password and return tokens.
    """
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        serializer = UserLoginSerializer(data=request.data, context={'request': request})
        try:
            serializer.is_valid(raise_exception=True)
        except ValidationError:
            security_logger.warning(
                f"LOGIN_FAILED: email={request.data.get('email', '')!r} "
                f"ip={request.META.get('REMOTE_ADDR')}"
            )
            raise

        user = serializer.validated_data['user']
        security_logger.info(f"LOGIN_SUCCESS: user={user.id}")

        return Response({
            'user': CurrentUserSerializer(user, context={'request': request}).data,
            'tokens': _token_pair(user),
        })


class LogoutView(views.APIView):
    """
    User logout endpoint.

    POST: Blacklist the given refresh token.
    """
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):
        serializer = LogoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            RefreshToken(serializer.validated_data['refresh']).blacklist()
        except TokenError as exc:
            raise ValidationError({'refresh': [str(exc)]})

        security_logger.info(f"LOGOUT: user={request.user.id}")
        return APIResponse.success(message='Logged out')


class CurrentUserView(views.APIView):
    """
    Current authenticated user endpoint.

    GET: Own profile.
    PATCH: Update names, phone, company, trades, arrondissements, bank details.
    """
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        serializer = CurrentUserSerializer(request.user, context={'request': request})
        return Response(serializer.data)

    def patch(self, request):
        serializer = CurrentUserSerializer(
            request.user,
            data=request.data,
            partial=True,
            context={'request': request}
        )
        serializer.is_valid(raise_exception=True)
        serializer.save()
        logger.info(f"PROFILE_UPDATED: user={request.user.id} fields={sorted(serializer.validated_data)}")
        return Response(serializer.data)


class AvatarUploadView(views.APIView):
    """POST: Replace the current user's avatar (multipart `avatar` field)."""
    permission_classes = [permissions.IsAuthenticated]
    parser_classes = [MultiPartParser, FormParser]

    def post(self, request):
        serializer = AvatarUploadSerializer(request.user, data=request.data)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(
            CurrentUserSerializer(request.user, context={'request': request}).data
        )


# ==================== USER ADMINISTRATION ====================

class UserAdminViewSet(SecureViewSet):
    """
    Platform admin user management.

    Admins list users, toggle verification/certification and deactivate
    accounts. Users are never deleted.
    """
    serializer_class = AdminUserSerializer
    permission_classes = [permissions.IsAuthenticated, IsPlatformAdmin]
    http_method_names = ['get', 'patch', 'head', 'options']
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['role', 'is_verified', 'is_certified', 'is_active']
    search_fields = ['email', 'first_name', 'last_name', 'company']
    ordering_fields = ['created_at', 'rating', 'completed_projects']

    def get_queryset(self):
        return User.objects.all().order_by('-created_at')
