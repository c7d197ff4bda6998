"""
Test configuration and fixtures for authentication tests.

This module provides:
- User fixtures for common account states
- Token helpers for bearer authentication

Usage:
    def test_example(user, access_token):
        assert authenticate_token(access_token) == user
"""

import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken

from authentication.models import User
from authentication.tests.factories import UserFactory


# =============================================================================
# User Fixtures
# =============================================================================


@pytest.fixture
def user(db):
    """Create a basic active user."""
    return UserFactory(email="jane@example.com", name="Jane", password="TestPass123!")


@pytest.fixture
def superuser(db):
    """Create a superuser with admin privileges."""
    return User.objects.create_superuser(
        email="admin@example.com", password="AdminPass123!"
    )


@pytest.fixture
def deactivated_user(db):
    """Create a deactivated user (is_active=False)."""
    return UserFactory(is_active=False)


# =============================================================================
# Token / Client Fixtures
# =============================================================================


@pytest.fixture
def access_token(user):
    """Encoded access token for `user`."""
    return str(AccessToken.for_user(user))


@pytest.fixture
def api_client():
    """Unauthenticated DRF API client."""
    return APIClient()
