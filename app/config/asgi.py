"""
ASGI entry point for the social chat backend.

One process serves both protocols:
- http: Django (admin, health check, token endpoints)
- websocket: the chat gateway at ws/chat/, behind origin validation and
  JWT handshake authentication

Run with:
    uvicorn config.asgi:application --app-dir app
"""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

# Apps must be loaded before consumers and middleware import models
django_asgi_app = get_asgi_application()

from channels.routing import ProtocolTypeRouter, URLRouter  # noqa: E402
from channels.security.websocket import AllowedHostsOriginValidator  # noqa: E402

from chat.middleware import JWTAuthMiddleware  # noqa: E402
from chat.routing import websocket_urlpatterns  # noqa: E402

# Origin check runs first so rejected origins never reach token parsing
chat_gateway = AllowedHostsOriginValidator(
    JWTAuthMiddleware(URLRouter(websocket_urlpatterns))
)

application = ProtocolTypeRouter(
    {
        "http": django_asgi_app,
        "websocket": chat_gateway,
    }
)
