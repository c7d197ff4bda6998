"""
WebSocket authentication middleware.

Provides JWT authentication for WebSocket connections. The token is checked
once, during the handshake; the consumer decides what to do with the result.

Related files:
    - routing.py: WebSocket URL patterns
    - consumers.py: WebSocket handlers
    - authentication/tokens.py: Token verification
    - config/asgi.py: ASGI configuration

Token Passing Methods (in order of precedence):
    1. Query string: ws://host/ws/chat/?token=<jwt_token>
    2. Header: Authorization: Bearer <jwt_token>
    3. Subprotocol: Sec-WebSocket-Protocol: jwt, <jwt_token>

Scope keys set:
    user: Authenticated User, or AnonymousUser
    auth_error: Error code when authentication failed, else None
    token_subprotocol: True when the token arrived as a subprotocol, so the
        consumer must echo "jwt" when accepting

Usage in config/asgi.py:
    from chat.middleware import JWTAuthMiddleware

    application = ProtocolTypeRouter({
        "websocket": JWTAuthMiddleware(
            URLRouter(websocket_urlpatterns)
        ),
    })
"""

from __future__ import annotations

import logging
from urllib.parse import parse_qs

from channels.db import database_sync_to_async
from channels.middleware import BaseMiddleware
from django.contrib.auth.models import AnonymousUser

from authentication.tokens import authenticate_token
from chat.constants import GATEWAY_CONFIG
from core.exceptions import AuthenticationError

logger = logging.getLogger(__name__)


def get_token_from_query(scope) -> str | None:
    """Extract token from query string."""
    query_string = scope.get("query_string", b"").decode()
    params = parse_qs(query_string)
    token_list = params.get("token", [])

    return token_list[0] if token_list else None


def get_token_from_header(scope) -> str | None:
    """Extract token from an "Authorization: Bearer <token>" header."""
    for name, value in scope.get("headers", []):
        if name.lower() != b"authorization":
            continue
        scheme, _, credential = value.decode("latin1").partition(" ")
        if scheme.lower() == "bearer" and credential.strip():
            return credential.strip()
    return None


def get_token_from_subprotocol(scope) -> str | None:
    """
    Extract token from WebSocket subprotocol.

    Expects: Sec-WebSocket-Protocol: jwt, <token>
    """
    subprotocols = scope.get("subprotocols", [])

    if len(subprotocols) >= 2 and subprotocols[0] == GATEWAY_CONFIG.TOKEN_SUBPROTOCOL:
        return subprotocols[1]

    return None


class JWTAuthMiddleware(BaseMiddleware):
    """
    JWT authentication middleware for WebSocket connections.

    Extracts the JWT token from the handshake, validates it, and attaches
    the user to the scope. Never rejects the connection itself.

    Usage:
        # Client connection with query string
        ws = new WebSocket("ws://host/ws/chat/?token=eyJ...")

        # Client connection with subprotocol
        ws = new WebSocket("ws://host/ws/chat/", ["jwt", "eyJ..."])
    """

    async def __call__(self, scope, receive, send):
        """
        Process WebSocket connection.

        Authenticates user and adds to scope before
        passing to inner application.
        """
        scope = dict(scope)

        subprotocol_token = get_token_from_subprotocol(scope)
        token = (
            get_token_from_query(scope)
            or get_token_from_header(scope)
            or subprotocol_token
        )

        scope["token_subprotocol"] = subprotocol_token is not None
        scope["user"], scope["auth_error"] = await self._authenticate(token)

        return await super().__call__(scope, receive, send)

    @database_sync_to_async
    def _authenticate(self, token: str | None):
        """
        Validate JWT token and get user.

        Returns:
            (User, None) if valid, (AnonymousUser, error_code) otherwise
        """
        try:
            return authenticate_token(token), None
        except AuthenticationError as e:
            logger.warning(f"WebSocket authentication failed: {e}")
            return AnonymousUser(), e.error_code
        except Exception:
            logger.exception("Error authenticating WebSocket")
            return AnonymousUser(), "AUTHENTICATION_ERROR"
