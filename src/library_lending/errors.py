"""
Error kinds raised by the lending core.

Every ``LendingError`` is an expected outcome the caller can recover from:
the tool layer turns it into a structured error result with ``to_dict()``.
``InvariantViolation`` is not part of that hierarchy. It signals
a programming defect (e.g. a negative availability counter) and must never
be rendered as an ordinary borrow/return failure.
"""

from typing import Any


class LendingError(Exception):
    """Base exception for recoverable lending outcomes."""

    kind = "lending_error"

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        """Structured form used in tool responses."""
        return {"kind": self.kind, "message": self.message, "details": self.details}


class NotFoundError(LendingError):
    """A referenced book, member or active loan does not exist."""

    kind = "not_found"


class UnavailableError(LendingError):
    """No copies of the book are available at borrow time."""

    kind = "unavailable"


class ConflictError(LendingError):
    """The operation clashes with current lending state."""

    kind = "conflict"


class DuplicateKeyError(LendingError):
    """An ISBN or email is already taken."""

    kind = "duplicate_key"


class ValidationFailedError(LendingError):
    """One or more field rules were violated."""

    kind = "validation_failed"

    def __init__(self, errors: list[str], message: str | None = None, **details: Any):
        super().__init__(message or "Validation failed: " + "; ".join(errors), **details)
        self.errors = list(errors)

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["errors"] = self.errors
        return payload


class StoreError(Exception):
    """Unexpected failure in the store backend."""


class InvariantViolation(AssertionError):
    """An internal lending invariant would be broken; indicates a bug."""
