"""
URL configuration for authentication app.

URL structure:
    /api/v1/auth/register/        - Create an account, returns access + refresh tokens
    /api/v1/auth/token/           - Exchange email/password for access + refresh tokens
    /api/v1/auth/token/refresh/   - Rotate a refresh token
    /api/v1/auth/logout/          - Blacklist a refresh token

The access token is what clients present to the chat WebSocket handshake
(see chat/middleware.py).
"""

from django.urls import path
from rest_framework_simplejwt.views import (
    TokenBlacklistView,
    TokenObtainPairView,
    TokenRefreshView,
)

from authentication.views import RegisterView

app_name = "authentication"

urlpatterns = [
    path("register/", RegisterView.as_view(), name="register"),
    path("token/", TokenObtainPairView.as_view(), name="token-obtain"),
    path("token/refresh/", TokenRefreshView.as_view(), name="token-refresh"),
    path("logout/", TokenBlacklistView.as_view(), name="logout"),
]
