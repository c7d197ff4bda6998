"""
Bearer token verification.

The realtime gateway authenticates once, at handshake time. This module is
the only place that knows how a bearer credential maps to a user:

    verify_access_token: signature/expiry check, returns the subject id
    authenticate_token: verify_access_token + active user lookup

Tokens are issued by the simplejwt endpoints mounted in authentication.urls
and signed with SIMPLE_JWT["SIGNING_KEY"].
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import AccessToken

from core.exceptions import AuthenticationError

if TYPE_CHECKING:
    from authentication.models import User

logger = logging.getLogger(__name__)


def verify_access_token(raw_token: str | None) -> str:
    """
    Validate an access token and return its subject.

    Args:
        raw_token: Encoded JWT, without the "Bearer " prefix

    Returns:
        The user id carried by the token, as a string

    Raises:
        AuthenticationError: Token missing, malformed, expired,
            of the wrong type, or without a subject claim
    """
    if not raw_token:
        raise AuthenticationError("No token provided", error_code="TOKEN_MISSING")

    try:
        token = AccessToken(raw_token)
    except TokenError as e:
        logger.warning(f"Rejected access token: {e}")
        raise AuthenticationError(
            "Invalid or expired token", error_code="TOKEN_INVALID"
        ) from e

    subject = token.get(api_settings.USER_ID_CLAIM)
    if subject:
        return str(subject)

    raise AuthenticationError("Token has no subject", error_code="TOKEN_INVALID")


def authenticate_token(raw_token: str | None) -> User:
    """
    Resolve a bearer token to an active user.

    Synchronous: async callers wrap it with database_sync_to_async.

    Raises:
        AuthenticationError: Token invalid, user missing or deactivated
    """
    user_id = verify_access_token(raw_token)
    User = get_user_model()

    try:
        user = User.objects.get(pk=user_id)
    except (User.DoesNotExist, DjangoValidationError, ValueError) as e:
        logger.warning(f"No user found for token subject {user_id}")
        raise AuthenticationError(
            "User not found", error_code="USER_NOT_FOUND"
        ) from e

    if not user.is_active:
        logger.warning(f"Inactive user attempted to authenticate: {user_id}")
        raise AuthenticationError("User is inactive", error_code="USER_INACTIVE")

    return user
