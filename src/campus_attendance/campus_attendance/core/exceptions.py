from __future__ import annotations

from typing import Any, Optional


class DomainError(Exception):
    """Base exception for business rule violations.

    Every error carries a machine-readable ``code`` and a ``details`` mapping so
    callers can explain the failure without re-deriving it.
    """

    code = "domain_error"
    retryable = False

    def __init__(self, message: str, *, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = dict(details or {})

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.code,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "validation_error"


class NotFoundError(ValidationError):
    code = "not_found"


class ScheduleConflictError(ValidationError):
    """The candidate schedule entry overlaps entries of the same person/day."""

    code = "schedule_conflict"

    def __init__(self, message: str, *, conflicts: list[dict[str, Any]]):
        super().__init__(message, details={"conflicts": conflicts})
        self.conflicts = conflicts


class InvalidTransitionError(ValidationError):
    code = "invalid_transition"


class PayrollLockedError(ValidationError):
    """A payroll line past Pending can no longer be recomputed."""

    code = "payroll_locked"


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    code = "forbidden"


class ConsistencyError(DomainError):
    """Store state changed under the caller; re-fetch and retry."""

    code = "conflict"
    retryable = True


class ConcurrencyConflictError(ConsistencyError):
    code = "concurrent_update"


class StoreTimeoutError(ConsistencyError):
    code = "store_timeout"


class DataError(DomainError):
    """Bad input data (negative durations, malformed timestamps). Never auto-corrected."""

    code = "data_error"
