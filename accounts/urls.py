"""
Accounts URLs - authentication, current user and user administration.
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenRefreshView

from .views import (
    AvatarUploadView,
    CurrentUserView,
    LoginView,
    LogoutView,
    RegisterView,
    UserAdminViewSet,
)

app_name = 'accounts'

router = DefaultRouter()
router.register(r'users', UserAdminViewSet, basename='user')

urlpatterns = [
    path('auth/register/', RegisterView.as_view(), name='register'),
    path('auth/login/', LoginView.as_view(), name='login'),
    path('auth/logout/', LogoutView.as_view(), name='logout'),
    path('auth/token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
    path('auth/me/', CurrentUserView.as_view(), name='me'),
    path('auth/me/avatar/', AvatarUploadView.as_view(), name='avatar'),

    path('', include(router.urls)),
]
