"""
JWT authentication for websocket connections.

Browsers cannot set an Authorization header on a websocket handshake, so
the access token travels in the query string: `ws/projects/<id>/?token=<jwt>`.
The resolved user lands in `scope['user']`; missing or invalid tokens give
an AnonymousUser and the consumer decides whether to close.
"""

import logging
from urllib.parse import parse_qs

from channels.auth import AuthMiddlewareStack
from channels.db import database_sync_to_async
from channels.middleware import BaseMiddleware
from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import AccessToken

logger = logging.getLogger('security.websocket')


@database_sync_to_async
def get_user_for_token(raw_token: str):
    try:
        token = AccessToken(raw_token)
    except TokenError as exc:
        logger.warning(f"WS_AUTH_FAILED: {exc}")
        return AnonymousUser()

    User = get_user_model()
    try:
        return User.objects.get(pk=token['user_id'], is_active=True)
    except (User.DoesNotExist, KeyError):
        logger.warning("WS_AUTH_FAILED: token user not found or inactive")
        return AnonymousUser()


class JWTAuthMiddleware(BaseMiddleware):
    """Populate scope['user'] from a `token` query-string parameter."""

    async def __call__(self, scope, receive, send):
        params = parse_qs(scope.get('query_string', b'').decode())
        tokens = params.get('token')
        if tokens:
            scope = dict(scope, user=await get_user_for_token(tokens[0]))
        return await super().__call__(scope, receive, send)


def JWTAuthMiddlewareStack(inner):
    """Session auth first, then JWT from the query string takes precedence."""
    return AuthMiddlewareStack(JWTAuthMiddleware(inner))
