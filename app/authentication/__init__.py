"""
Authentication application.

Owns the user model and bearer token handling consumed by the chat core.

Key components:
    - User model: Email login plus public profile (name, avatar, gender)
    - tokens: Access token verification for the WebSocket handshake
    - urls: simplejwt token obtain/refresh endpoints

Usage:
    from authentication.models import User
    from authentication.tokens import authenticate_token
"""
