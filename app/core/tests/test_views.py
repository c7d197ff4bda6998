"""Tests for the health check endpoint."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from django.db import DatabaseError


@pytest.mark.django_db
class TestHealthCheck:
    def test_healthy(self, client):
        response = client.get("/health/")

        assert response.status_code == 200
        assert response.json() == {
            "status": "healthy",
            "database": "connected",
            "channel_layer": "InMemoryChannelLayer",
        }

    def test_database_down(self, client):
        with patch("core.views.connection") as connection:
            connection.cursor.side_effect = DatabaseError("gone")
            response = client.get("/health/")

        assert response.status_code == 503
        assert response.json()["database"] == "disconnected"
        assert response.json()["status"] == "unhealthy"
