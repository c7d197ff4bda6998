"""
Base service layer patterns for business logic encapsulation.

This module provides foundational patterns for the service layer:
- ServiceResult: Standard result wrapper for consistent success/failure handling
- BaseService: Base class with common service utilities

Service Layer Philosophy:
    Services encapsulate business logic separate from transports and models.
    Consumers and views handle transport concerns, models handle data,
    services handle logic.

Pattern Comparison:
    - Exceptions (core.exceptions): raised by services for domain failures
      (not found, not a participant, not the sender)
    - ServiceResult: the envelope a transport returns to its caller, built
      from either the service's return value or the caught exception

Usage:
    from core.exceptions import BaseApplicationError
    from core.services import ServiceResult

    try:
        message = MessageService.send_message(user_id, conversation_id, "Hi")
    except BaseApplicationError as e:
        return ServiceResult.from_exception(e).to_response()
    return ServiceResult.success(MessageSerializer(message).data).to_response()

Related:
    - core.exceptions: Typed domain failures
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

from django.db import transaction

from core.exceptions import BaseApplicationError, ValidationError

if TYPE_CHECKING:
    from collections.abc import Generator
    from typing import Any

# Generic type for ServiceResult data
T = TypeVar("T")


@dataclass
class ServiceResult(Generic[T]):
    """
    Standard result wrapper for service operations.

    This is also the ack envelope of the realtime gateway: its
    to_response() shape is {success, data?, error?, error_code?, errors?}.

    Attributes:
        success: Whether the operation succeeded
        data: Result data if successful (None if failed)
        error: Error message if failed (None if successful)
        error_code: Machine-readable error code for client handling
        errors: Field-level errors for validation failures

    Usage:
        # Success case
        return ServiceResult.success(serialized_conversation)

        # Failure case
        return ServiceResult.failure("Message not found", "MESSAGE_NOT_FOUND")

        # Validation errors with field details
        return ServiceResult.failure(
            "Invalid payload",
            error_code="VALIDATION_ERROR",
            errors={"conversationId": ["Must be a valid UUID."]},
        )
    """

    success: bool
    data: T | None = None
    error: str | None = None
    error_code: str | None = None
    errors: dict[str, list[str]] | None = field(default=None)

    @classmethod
    def success(cls, data: T | None = None) -> ServiceResult[T]:
        """
        Create a successful result.

        Args:
            data: The result data (omitted from the response when None)

        Returns:
            ServiceResult with success=True and data set
        """
        return cls(success=True, data=data)

    @classmethod
    def failure(
        cls,
        error: str,
        error_code: str | None = None,
        errors: dict[str, list[str]] | None = None,
    ) -> ServiceResult[T]:
        """
        Create a failed result.

        Args:
            error: Human-readable error message
            error_code: Machine-readable error code for client handling
            errors: Field-level errors (for validation failures)

        Returns:
            ServiceResult with success=False and error details

        Example:
            return ServiceResult.failure(
                "You can only delete your own messages",
                error_code="NOT_SENDER",
            )
        """
        return cls(
            success=False,
            error=error,
            error_code=error_code,
            errors=errors,
        )

    @classmethod
    def from_exception(cls, exc: BaseApplicationError) -> ServiceResult[T]:
        """
        Create a failed result from an application error.

        The error keeps its own message and code. Field errors are carried
        over from ValidationError details only; other errors keep their
        details server-side.

        Args:
            exc: The caught application error

        Returns:
            ServiceResult with error details from exception
        """
        errors = exc.details if isinstance(exc, ValidationError) else None
        return cls.failure(
            exc.message, error_code=exc.error_code, errors=errors or None
        )

    def to_response(self) -> dict[str, Any]:
        """
        Convert to the wire envelope.

        Returns:
            Dict with success status and data or error details

        Example:
            {"success": True, "data": {...}}
            {"success": False, "error": "Message not found",
             "error_code": "MESSAGE_NOT_FOUND"}
        """
        if self.success:
            response: dict[str, Any] = {"success": True}
            if self.data is not None:
                response["data"] = self.data
            return response

        response = {
            "success": False,
            "error": self.error,
        }
        if self.error_code:
            response["error_code"] = self.error_code
        if self.errors:
            response["errors"] = self.errors
        return response


class BaseService:
    """
    Base class for service layer classes.

    Provides common utilities for services:
    - Logging setup per service
    - Database transaction management
    - Exception handling patterns

    Usage:
        class MessageService(BaseService):
            @classmethod
            def send_message(cls, ...) -> Message:
                with cls.atomic():
                    message = Message.objects.create(...)
                    conversation.save(update_fields=["last_message", "updated_at"])

                cls.get_logger().info(f"Created message {message.id}")
                return message

    Design Notes:
        - Use @staticmethod or @classmethod (no instance state)
        - Services should be stateless
        - Raise core.exceptions for domain failures
    """

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """
        Get logger for this service.

        Returns a logger named after the service class for
        easy filtering in logs.
        """
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @classmethod
    @contextmanager
    def atomic(cls) -> Generator[None, None, None]:
        """
        Execute operations in a database transaction.

        All database operations within this context manager are
        wrapped in a transaction. If any operation fails, all
        changes are rolled back.

        Note:
            This is a thin wrapper around Django's transaction.atomic().
            Use it to make transaction boundaries explicit in service code.
        """
        with transaction.atomic():
            yield
