"""
Base exception classes for application-wide error handling.

This module provides the exception hierarchy shared by the service layer
and the realtime gateway:
- Consistent failure envelopes across HTTP and WebSocket transports
- Machine-readable error codes for client handling
- Detailed error information for debugging

Exception Hierarchy:
    BaseApplicationError (base)
    ├── ValidationError - Malformed input
    ├── NotFoundError - Resource not found
    ├── PermissionDeniedError - Authenticated but not authorized
    └── AuthenticationError - Missing or invalid credential

Usage:
    from core.exceptions import NotFoundError, PermissionDeniedError

    # Raise with message only
    raise NotFoundError("Conversation not found")

    # Raise with error code for client handling
    raise PermissionDeniedError(
        "You are not a participant in this conversation",
        error_code="NOT_PARTICIPANT",
    )

    # Convert to an ack envelope
    try:
        ...
    except BaseApplicationError as e:
        return ServiceResult.from_exception(e).to_response()

Note:
    These exceptions are for domain/business logic errors.
    DRF handles API-layer exceptions (serialization, authentication, etc.).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional error context (field errors, metadata, etc.)
    """

    default_error_code: str = "APPLICATION_ERROR"

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        """
        Initialize the exception.

        Args:
            message: Human-readable error description
            error_code: Machine-readable error code (defaults to class default)
            details: Additional error context
        """
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation with error code."""
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        """Return detailed representation for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class ValidationError(BaseApplicationError):
    """
    Raised when input validation fails.

    Use for:
    - Malformed event payloads
    - Field-level validation errors

    Example:
        raise ValidationError(
            "Invalid payload",
            details={"conversationId": ["Must be a valid UUID."]},
        )

    Note:
        For DRF serializer validation, use DRF's built-in validation.
        Use this where service-layer code rejects input itself.
    """

    default_error_code: str = "VALIDATION_ERROR"


class NotFoundError(BaseApplicationError):
    """
    Raised when a requested resource is not found.

    Example:
        conversation = Conversation.objects.filter(id=conversation_id).first()
        if not conversation:
            raise NotFoundError(
                "Conversation not found",
                error_code="CONVERSATION_NOT_FOUND",
            )
    """

    default_error_code: str = "NOT_FOUND"


class PermissionDeniedError(BaseApplicationError):
    """
    Raised when an authenticated user lacks permission for an operation.

    Use for:
    - Accessing a conversation the user does not participate in
    - Deleting another user's message

    Note:
        For authentication failures (missing/invalid token), use
        AuthenticationError. Use this for authorization failures.
    """

    default_error_code: str = "PERMISSION_DENIED"


class AuthenticationError(BaseApplicationError):
    """
    Raised when a credential is missing, malformed, expired or revoked.

    On the realtime gateway this is fatal at handshake time and a plain
    failure envelope afterwards.
    """

    default_error_code: str = "UNAUTHORIZED"
