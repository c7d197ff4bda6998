"""
Tests for chat app.

- test_registry.py: Presence and typing bookkeeping
- test_services.py: ConversationService and MessageService
- test_serializers.py: Inbound payload validation and outbound shapes
- test_middleware.py: Handshake token extraction and authentication
- test_consumers.py: Gateway events over WebSocket communicators
- test_integration.py: Two-user flow from create to offline

Usage:
    pytest chat/tests/
    pytest -m e2e
"""
