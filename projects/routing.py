"""
WebSocket URL routing for projects app.
"""

from django.urls import path

from . import consumers

websocket_urlpatterns = [
    path('ws/projects/<uuid:project_id>/', consumers.ProjectConsumer.as_asgi()),
]
