"""
Authentication views.

This module provides API views for:
- Email/password registration

Related files:
    - serializers.py: Request/response serialization
    - urls.py: URL routing

Note:
    Login, refresh and logout are simplejwt views mounted in urls.py:
    - Login: /api/v1/auth/token/
    - Refresh: /api/v1/auth/token/refresh/
    - Logout: /api/v1/auth/logout/ (blacklists the refresh token)
"""

import logging

from django.contrib.auth import user_logged_in
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken

from authentication.serializers import RegisterSerializer, UserPublicSerializer

logger = logging.getLogger(__name__)


class RegisterView(APIView):
    """
    API view for user registration.

    POST: Create an account and sign it in

    URL: /api/v1/auth/register/

    No authentication required. The response carries the same token pair
    as /token/, so a client can open the chat socket right away.
    """

    permission_classes = []

    def post(self, request):
        """
        Register a new user.

        Request body:
            {
                "email": "user@example.com",
                "password": "<password>",
                "name": "Ada Lovelace",
                "gender": "female"
            }

        Returns:
            201 {
                "access": "<jwt_access_token>",
                "refresh": "<jwt_refresh_token>",
                "user": {"id", "name", "profilePicture", "gender"}
            }

        Errors:
            400: Invalid payload, weak password or email already registered
        """
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()

        refresh = RefreshToken.for_user(user)
        user_logged_in.send(sender=user.__class__, request=request, user=user)

        logger.info(f"Registered user {user.id}")

        return Response(
            {
                "access": str(refresh.access_token),
                "refresh": str(refresh),
                "user": UserPublicSerializer(user).data,
            },
            status=status.HTTP_201_CREATED,
        )
