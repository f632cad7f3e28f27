"""
Websocket URL routing for Mano-Pro.

Aggregates the websocket_urlpatterns of every app with realtime consumers.
"""

from notifications.routing import websocket_urlpatterns as notification_patterns
from projects.routing import websocket_urlpatterns as project_patterns

websocket_urlpatterns = [
    *project_patterns,
    *notification_patterns,
]
