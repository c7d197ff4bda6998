"""
Tests for authentication app.

- test_models.py: User model and manager
- test_tokens.py: Access token verification used by the WebSocket handshake
- test_serializers.py: Public profile shape
- test_views.py: Token obtain/refresh endpoints
"""
