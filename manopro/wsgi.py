"""
WSGI config for Mano-Pro.

Serves the HTTP API only; websockets need the ASGI entry point.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'manopro.settings')

application = get_wsgi_application()
