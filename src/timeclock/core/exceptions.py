from __future__ import annotations

from typing import Any, Optional


class DomainError(Exception):
    """Base exception for business rule violations.

    Every subclass has a stable ``kind`` that callers can check, plus the
    HTTP status the web layer answers with.
    """

    kind = "domain_error"
    status = 422

    def __init__(self, message: str, *, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        out: dict[str, Any] = {"kind": self.kind, "message": self.message}
        if self.details:
            out["details"] = self.details
        return out


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    kind = "validation_failure"
    status = 422

    def __init__(
        self,
        message: str = "Validation failed",
        *,
        errors: Optional[dict[str, list[str]]] = None,
        details: Optional[Any] = None,
    ):
        super().__init__(message, details=details)
        self.errors: dict[str, list[str]] = dict(errors or {})

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls("Validation failed", errors={field: [message]})

    def to_dict(self) -> dict:
        out = super().to_dict()
        if self.errors:
            out["errors"] = self.errors
        return out


class InvalidStateError(DomainError):
    """Raised when a clock action is not allowed from the current status."""

    kind = "invalid_state"
    status = 422


class NotFoundError(DomainError):
    kind = "not_found"
    status = 404


class PersistenceError(DomainError):
    """Raised when storage I/O fails; the transaction has been rolled back."""

    kind = "persistence_failure"
    status = 503


class DuplicateRecordError(PersistenceError):
    """Unique-key conflict (e.g. a second attendance row for the same day)."""

    kind = "duplicate_record"
    status = 409


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""

    kind = "authentication_failure"
    status = 401


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    kind = "authorization_failure"
    status = 403
