"""
Vesting exception hierarchy.

Typed exceptions for schedule validation, identity derivation, argument
encoding and release operations. Every error is raised before any ledger
operation is built, so none of them leaves partial state behind.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class VestingError(Exception):
    """Base exception for all vesting errors.

    Attributes:
        message: Human-readable error description
        details: Additional context about the error
        recoverable: Whether the caller can retry or adjust and try again
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable


# ==================== Schedule Validation Errors ====================


class ValidationErrorKind(Enum):
    EMPTY_SCHEDULE = "EmptySchedule"
    NON_MONOTONIC_TIME = "NonMonotonicTime"
    NEGATIVE_AMOUNT = "NegativeAmount"
    AMOUNT_MISMATCH = "AmountMismatch"


class ScheduleValidationError(VestingError):
    """Raised when proposed tranches fail validation.

    Always recoverable: the caller corrects the tranches and resubmits.
    """

    kind: ValidationErrorKind

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, details=details, recoverable=True)


class EmptyScheduleError(ScheduleValidationError):
    """Raised when a schedule has no tranches."""

    kind = ValidationErrorKind.EMPTY_SCHEDULE


class NonMonotonicTimeError(ScheduleValidationError):
    """Raised when release times are not strictly increasing."""

    kind = ValidationErrorKind.NON_MONOTONIC_TIME


class NegativeAmountError(ScheduleValidationError):
    """Raised when a tranche amount is below zero."""

    kind = ValidationErrorKind.NEGATIVE_AMOUNT


class AmountMismatchError(ScheduleValidationError):
    """Raised when tranche amounts do not sum to the declared total."""

    kind = ValidationErrorKind.AMOUNT_MISMATCH


# ==================== Lifecycle Errors ====================


class AlreadyExistsError(VestingError):
    """Raised when a schedule already exists at the derived key."""

    def __init__(self, message: str, key: Optional[str] = None, **kwargs: Any) -> None:
        kwargs.setdefault("recoverable", True)
        super().__init__(message, **kwargs)
        self.key = key


class NothingToReleaseError(VestingError):
    """Raised when a claim finds no releasable amount.

    Covers both a claim made before the next tranche is due and a claim
    against a fully vested schedule. ``fully_vested`` tells them apart.
    """

    def __init__(
        self,
        message: str,
        claimed_amount: int = 0,
        total_amount: int = 0,
        **kwargs: Any,
    ) -> None:
        kwargs.setdefault("recoverable", True)
        super().__init__(message, **kwargs)
        self.claimed_amount = claimed_amount
        self.total_amount = total_amount

    @property
    def fully_vested(self) -> bool:
        return self.claimed_amount >= self.total_amount


class InsufficientBalanceError(VestingError):
    """Raised when the grantor cannot fund the schedule total."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        kwargs.setdefault("recoverable", True)
        super().__init__(message, **kwargs)


# ==================== Caller Precondition Errors ====================


class IdentityError(VestingError):
    """Raised when grantor, beneficiary or seed violate format preconditions."""
    pass


class EncodingError(VestingError):
    """Raised when a value cannot be encoded or decoded without loss."""
    pass


class ConfigurationError(VestingError):
    """Raised when vesting configuration is invalid."""
    pass


# ==================== Utility Functions ====================


def get_error_context(exc: Exception) -> Dict[str, Any]:
    """Extract error context from an exception for logging.

    Args:
        exc: The exception to extract context from

    Returns:
        Dictionary containing error type, message, and any additional details
    """
    context: Dict[str, Any] = {
        "error_type": type(exc).__name__,
        "error_message": str(exc),
    }

    if isinstance(exc, VestingError):
        context["recoverable"] = exc.recoverable
        if exc.details:
            context["details"] = exc.details

    if isinstance(exc, ScheduleValidationError):
        context["validation_kind"] = exc.kind.value

    if isinstance(exc, NothingToReleaseError):
        context["claimed_amount"] = exc.claimed_amount
        context["total_amount"] = exc.total_amount
        context["fully_vested"] = exc.fully_vested

    if isinstance(exc, AlreadyExistsError) and exc.key:
        context["schedule_key"] = exc.key

    return context
