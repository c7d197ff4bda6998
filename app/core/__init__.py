"""
Core Application - Infrastructure & Base Classes

Generic, reusable building blocks with no chat-specific logic.

Models (import from core.models):
    - BaseModel: Abstract model with timestamps (created_at, updated_at)
    - UUIDPrimaryKeyMixin: UUID as primary key

Services (import from core.services):
    - BaseService: Base class for service layer
    - ServiceResult: Success/failure envelope (also the realtime ack shape)

Exceptions (import from core.exceptions):
    - BaseApplicationError: Base exception with error codes
    - ValidationError: Malformed input
    - NotFoundError: Resource not found
    - PermissionDeniedError: Authorization failures
    - AuthenticationError: Missing or invalid credentials

Views (import from core.views):
    - health_check: Liveness/readiness probe
"""
