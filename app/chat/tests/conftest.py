"""
Test configuration and fixtures for chat tests.

This module provides:
- User fixtures for the two-party scenarios most tests need
- Conversation and message fixtures
- Gateway fixtures: a fresh connection registry and channel layer per test,
  plus a helper for opening authenticated WebSocket communicators

Usage:
    @pytest.mark.asyncio
    @pytest.mark.django_db(transaction=True)
    async def test_example(alice, open_socket):
        socket = await open_socket(alice)
        ...
"""

import pytest
from channels.layers import channel_layers
from channels.routing import URLRouter
from channels.testing import WebsocketCommunicator

from authentication.tests.factories import UserFactory
from chat.consumers import ChatConsumer
from chat.middleware import JWTAuthMiddleware
from chat.registry import ConnectionRegistry
from chat.routing import websocket_urlpatterns
from chat.tests.factories import ConversationFactory
from chat.tests.ws import token_for


# =============================================================================
# User Fixtures
# =============================================================================


@pytest.fixture
def alice(db):
    return UserFactory(name="Alice", gender="female")


@pytest.fixture
def bob(db):
    return UserFactory(name="Bob", gender="male")


@pytest.fixture
def carol(db):
    """A user who is not a participant in the alice/bob conversation."""
    return UserFactory(name="Carol")


# =============================================================================
# Conversation Fixtures
# =============================================================================


@pytest.fixture
def conversation(alice, bob):
    """Conversation between alice and bob."""
    return ConversationFactory(participants=[alice, bob])


# =============================================================================
# Gateway Fixtures
# =============================================================================


@pytest.fixture
def registry(monkeypatch):
    """Fresh connection registry installed on the gateway for one test."""
    fresh = ConnectionRegistry()
    monkeypatch.setattr(ChatConsumer, "registry", fresh)
    return fresh


@pytest.fixture
def channel_layer_reset():
    """Drop cached channel layers so each test starts with empty groups."""
    channel_layers.backends = {}
    yield
    channel_layers.backends = {}


@pytest.fixture
def ws_application():
    """
    Gateway stack as served by config/asgi.py, minus origin validation.

    AllowedHostsOriginValidator rejects handshakes without an Origin
    header, which test communicators do not send.
    """
    return JWTAuthMiddleware(URLRouter(websocket_urlpatterns))


@pytest.fixture
def open_socket(ws_application, registry, channel_layer_reset):
    """
    Factory that opens an authenticated communicator for a user.

    Tests disconnect their sockets explicitly so that disconnect side
    effects can be asserted.
    """

    async def _open(user, path=None):
        path = path or f"/ws/chat/?token={token_for(user)}"
        communicator = WebsocketCommunicator(ws_application, path)
        connected, _ = await communicator.connect()
        assert connected
        return communicator

    return _open
