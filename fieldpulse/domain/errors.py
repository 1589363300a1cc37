"""
Typed errors raised by the analytics core.

Every error carries a machine-readable kind and, where one exists, the
offending field so callers can render an actionable message.
"""
from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    """Categories of core failures."""
    INSUFFICIENT_DATA = "insufficient_data"
    INVALID_TRANSITION = "invalid_transition"
    INVARIANT_VIOLATION = "invariant_violation"
    OUT_OF_RANGE = "out_of_range"
    NOT_FOUND = "not_found"


class FieldPulseError(Exception):
    """Base class for all core errors."""

    kind: ErrorKind = ErrorKind.INVARIANT_VIOLATION

    def __init__(self, message: str, field: Optional[str] = None, **details: Any):
        super().__init__(message)
        self.message = message
        self.field = field
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        """Structured representation for API responses and logs."""
        payload: Dict[str, Any] = {
            "error": self.kind.value,
            "field": self.field,
            "detail": self.message,
        }
        if self.details:
            payload["context"] = self.details
        return payload


class InsufficientDataError(FieldPulseError):
    """Computation requested with too little history or an empty source."""
    kind = ErrorKind.INSUFFICIENT_DATA


class InvalidTransitionError(FieldPulseError):
    """Status command attempted from a state that disallows it."""
    kind = ErrorKind.INVALID_TRANSITION


class ConcurrentUpdateError(InvalidTransitionError):
    """The record changed since it was read (lost update)."""


class InvariantViolationError(FieldPulseError):
    """Area accounting or ordering invariants do not hold."""
    kind = ErrorKind.INVARIANT_VIOLATION


class OutOfRangeError(FieldPulseError):
    """A mandatory value is missing or non-numeric."""
    kind = ErrorKind.OUT_OF_RANGE


class NotFoundError(FieldPulseError):
    """No record exists for the requested identifier."""
    kind = ErrorKind.NOT_FOUND
