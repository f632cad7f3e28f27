"""
URL configuration for the Mano-Pro project.

Routes health checks, the versioned JSON API and the OpenAPI schema.
"""

import logging
import time

from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.core.cache import cache
from django.db import connection
from django.http import JsonResponse
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

logger = logging.getLogger(__name__)


# ==================== Health Check Endpoints ====================

def health_check(request):
    """
    Health check endpoint for load balancers and monitoring.
    Reports database and cache connectivity.
    """
    health_status = {
        'status': 'healthy',
        'timestamp': time.time(),
        'version': getattr(settings, 'APP_VERSION', '1.0.0'),
    }

    try:
        with connection.cursor() as cursor:
            cursor.execute('SELECT 1')
        health_status['database'] = 'connected'
    except Exception as e:
        logger.error(f"HEALTH_DATABASE_ERROR: {e}")
        health_status['database'] = 'error'
        health_status['status'] = 'degraded'

    try:
        cache.set('health_check', 'ok', 1)
        if cache.get('health_check') == 'ok':
            health_status['cache'] = 'connected'
        else:
            health_status['cache'] = 'error'
            health_status['status'] = 'degraded'
    except Exception as e:
        logger.error(f"HEALTH_CACHE_ERROR: {e}")
        health_status['cache'] = 'unavailable'
        health_status['status'] = 'degraded'

    status_code = 200 if health_status['status'] == 'healthy' else 503
    return JsonResponse(health_status, status=status_code)


def readiness_check(request):
    """Returns 200 only when the database answers."""
    try:
        with connection.cursor() as cursor:
            cursor.execute('SELECT 1')
        return JsonResponse({'ready': True}, status=200)
    except Exception:
        return JsonResponse({'ready': False}, status=503)


def liveness_check(request):
    return JsonResponse({'alive': True}, status=200)


# ==================== API Root View ====================

def api_root(request):
    """API information and documentation links."""
    base_url = request.build_absolute_uri('/api/')
    return JsonResponse({
        'name': 'Mano-Pro API',
        'version': 'v1',
        'description': 'Building emergency marketplace for property managers and artisans',
        'endpoints': {
            'v1': f'{base_url}v1/',
            'auth': f'{base_url}v1/auth/login/',
            'docs': f'{base_url}docs/',
            'schema': f'{base_url}schema/',
        },
    })


# ==================== URL Patterns ====================

urlpatterns = [
    path('health/', health_check, name='health_check'),
    path('health/ready/', readiness_check, name='readiness_check'),
    path('health/live/', liveness_check, name='liveness_check'),

    path('admin/', admin.site.urls),

    path('api/', api_root, name='api_root'),
    path('api/v1/', include('api.urls')),
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
]

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
