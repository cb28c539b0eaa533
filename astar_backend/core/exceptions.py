"""
Exception hierarchy for the Astar Management backend.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging, a stable
machine-readable code and the HTTP status the API layer maps them to.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class AstarException(Exception):
    """Base exception for all application errors."""

    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Serialize into the API error body."""
        return {"error": self.message, "code": self.code, "details": self.details}


class ValidationError(AstarException):
    """Raised when input validation fails."""

    code = "VALIDATION_ERROR"
    status_code = 400

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class NotFoundError(AstarException):
    """Raised when a tenant-scoped resource cannot be found."""

    code = "NOT_FOUND"
    status_code = 404

    def __init__(
        self,
        resource: str,
        resource_id: Any,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize not found error.

        Args:
            resource: Resource kind (e.g. "Expense")
            resource_id: Identifier that was looked up
            details: Additional context
        """
        details = details or {}
        details.update({"resource": resource, "id": str(resource_id)})
        super().__init__(f"{resource} not found: {resource_id}", details)


class ConflictError(AstarException):
    """Raised on duplicates and state conflicts."""

    code = "CONFLICT"
    status_code = 409


class DuplicateError(ConflictError):
    """Raised when a unique name or key is already taken."""

    code = "DUPLICATE"


class RoleInUseError(ConflictError):
    """Raised when deleting a role that is still assigned to users."""

    code = "ROLE_IN_USE"

    def __init__(self, role_name: str, user_count: int) -> None:
        super().__init__(
            f"Role '{role_name}' is assigned to {user_count} user(s) and cannot be deleted",
            {"role": role_name, "user_count": user_count},
        )


class OptimisticLockError(ConflictError):
    """Raised when an update carries a stale version."""

    code = "OPTIMISTIC_LOCK"

    def __init__(self, resource: str, resource_id: Any, expected: int, actual: int) -> None:
        super().__init__(
            f"{resource} {resource_id} was modified concurrently",
            {"expected_version": expected, "actual_version": actual},
        )


class BusinessRuleError(AstarException):
    """Raised when an operation violates a domain rule (limits, protected rows)."""

    code = "BUSINESS_RULE_VIOLATION"
    status_code = 422


class AuthenticationError(AstarException):
    """Raised when a bearer token is missing or invalid."""

    code = "UNAUTHORIZED"
    status_code = 401


class PermissionDeniedError(AstarException):
    """Raised when the caller lacks a required permission."""

    code = "FORBIDDEN"
    status_code = 403

    def __init__(self, permission: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["required_permission"] = permission
        super().__init__(f"Permission denied: {permission}", details)


class TenantContextError(AstarException):
    """Raised when a tenant-scoped operation runs without a tenant."""

    code = "TENANT_CONTEXT_REQUIRED"
    status_code = 403


class StorageError(AstarException):
    """Raised when the file storage backend fails."""

    code = "STORAGE_ERROR"
    status_code = 500

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize storage error.

        Args:
            message: Error message
            operation: Operation that failed (store, read, delete)
            details: Additional context
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, details)


class ExternalServiceError(AstarException):
    """Raised when an upstream dependency (JWKS endpoint) is unavailable."""

    code = "SERVICE_UNAVAILABLE"
    status_code = 503
