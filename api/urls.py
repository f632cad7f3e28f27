"""
API v1 URLs - aggregates every app's REST routes under /api/v1/.

Endpoints:
- auth/register/, auth/login/, auth/logout/, auth/token/refresh/, auth/me/
- users/ (platform admins)
- emergencies/, opportunities/, proposals/
- projects/
- payments/, invoices/
- notifications/
"""

from django.urls import include, path

urlpatterns = [
    path('', include('accounts.urls')),
    path('', include('emergencies.api.urls')),
    path('', include('projects.api.urls')),
    path('', include('payments.api.urls')),
    path('', include('notifications.api.urls')),
]
