"""Domain exceptions for the provisioning workflows.

Every error the workflows surface has a stable machine-readable error_code.
The presentation layer maps codes to HTTP statuses in
preschool.core.exception_handlers. Messages are safe to show to callers:
they never carry identity-directory identifiers or raw provider text.
"""

from typing import Any


class PreschoolException(Exception):
    """Base exception for all application errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. entity, field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for API responses."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(PreschoolException):
    """Raised when input shape validation fails (empty field, bad email, bad ttl)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class InvalidStateException(PreschoolException):
    """Raised when an entity is in the wrong lifecycle stage for a transition."""

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message, "INVALID_STATE", details)


class ResourceNotFoundException(PreschoolException):
    """Raised when a request, tenant or profile does not exist."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class UnauthorizedException(PreschoolException):
    """Raised when the caller's role or tenant does not satisfy the operation."""

    def __init__(
        self,
        action: str | None = None,
        message: str = "Caller is not allowed to perform this operation",
    ) -> None:
        details = {"action": action} if action else {}
        super().__init__(message, "UNAUTHORIZED", details)


class ConflictException(PreschoolException):
    """Raised by the record store when a unique constraint rejects a write."""

    def __init__(self, resource_type: str, message: str | None = None) -> None:
        super().__init__(
            message or f"{resource_type} conflicts with an existing record",
            "CONFLICT",
            {"resource_type": resource_type},
        )


class InvitationException(PreschoolException):
    """Base for the invitation-specific redemption failures."""


class InvalidCodeException(InvitationException):
    """Raised when an invitation code is malformed or does not exist."""

    def __init__(self) -> None:
        super().__init__("Invitation code is not valid", "INVALID_CODE")


class AlreadyUsedException(InvitationException):
    """Raised when an invitation code has already been redeemed."""

    def __init__(self) -> None:
        super().__init__("Invitation code has already been used", "ALREADY_USED")


class ExpiredException(InvitationException):
    """Raised when an invitation code is past its expiry (or was revoked)."""

    def __init__(self) -> None:
        super().__init__("Invitation code has expired", "EXPIRED")


class EmailMismatchException(InvitationException):
    """Raised when a targeted invitation is redeemed with a different email."""

    def __init__(self) -> None:
        super().__init__(
            "Invitation code is restricted to a different email address",
            "EMAIL_MISMATCH",
        )


class ProviderUnavailableException(PreschoolException):
    """Raised on a transient failure or timeout of an external collaborator."""

    def __init__(self, provider: str, operation: str) -> None:
        super().__init__(
            f"{provider} is temporarily unavailable",
            "PROVIDER_UNAVAILABLE",
            {"provider": provider, "operation": operation},
        )


class PartialFailureException(PreschoolException):
    """Raised when a pipeline passed its commit point but some writes did not persist.

    details carries enough to drive a repair pass: the entity type and id
    and the list of fields that were not written.
    """

    def __init__(
        self,
        entity_type: str,
        entity_id: str,
        fields: list[str],
        **details_extra: Any,
    ) -> None:
        details = {
            "entity_type": entity_type,
            "entity_id": entity_id,
            "fields": fields,
            **details_extra,
        }
        super().__init__(
            f"Provisioning completed but {', '.join(fields)} did not persist",
            "PARTIAL_FAILURE",
            details,
        )


class EmailTakenException(PreschoolException):
    """Raised by the identity directory when the email already has an account."""

    def __init__(self) -> None:
        super().__init__("An account already exists for this email", "EMAIL_TAKEN")


class WeakPasswordException(PreschoolException):
    """Raised by the identity directory when a password fails its policy."""

    def __init__(self, min_length: int) -> None:
        super().__init__(
            f"Password must be at least {min_length} characters",
            "WEAK_PASSWORD",
            {"min_length": min_length},
        )


class IdentityProviderException(PreschoolException):
    """Raised when the identity provider rejects a request for a non-transient reason."""

    def __init__(self, operation: str) -> None:
        super().__init__(
            "Identity provider rejected the request",
            "IDENTITY_PROVIDER_ERROR",
            {"operation": operation},
        )
