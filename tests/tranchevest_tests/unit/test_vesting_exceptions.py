"""
Unit tests for the vesting exception hierarchy.
"""

import pytest

from tranchevest.core.vesting_exceptions import (
    AlreadyExistsError,
    AmountMismatchError,
    EmptyScheduleError,
    EncodingError,
    IdentityError,
    InsufficientBalanceError,
    NegativeAmountError,
    NonMonotonicTimeError,
    NothingToReleaseError,
    ScheduleValidationError,
    ValidationErrorKind,
    VestingError,
    get_error_context,
)


@pytest.mark.parametrize(
    "exc_type,kind",
    [
        (EmptyScheduleError, ValidationErrorKind.EMPTY_SCHEDULE),
        (NonMonotonicTimeError, ValidationErrorKind.NON_MONOTONIC_TIME),
        (NegativeAmountError, ValidationErrorKind.NEGATIVE_AMOUNT),
        (AmountMismatchError, ValidationErrorKind.AMOUNT_MISMATCH),
    ],
)
def test_validation_kinds(exc_type, kind):
    exc = exc_type("bad")
    assert isinstance(exc, ScheduleValidationError)
    assert isinstance(exc, VestingError)
    assert exc.kind is kind
    assert exc.recoverable is True


def test_caller_errors_not_recoverable():
    assert IdentityError("bad seed").recoverable is False
    assert EncodingError("overflow").recoverable is False


def test_insufficient_balance_recoverable():
    assert InsufficientBalanceError("poor").recoverable is True


def test_nothing_to_release_disambiguation():
    early = NothingToReleaseError("early", claimed_amount=20, total_amount=140)
    done = NothingToReleaseError("done", claimed_amount=140, total_amount=140)
    assert early.fully_vested is False
    assert done.fully_vested is True


def test_error_context_for_validation():
    context = get_error_context(AmountMismatchError("sum", details={"sum": 1}))
    assert context["error_type"] == "AmountMismatchError"
    assert context["validation_kind"] == "AmountMismatch"
    assert context["details"] == {"sum": 1}
    assert context["recoverable"] is True


def test_error_context_for_release_and_exists():
    context = get_error_context(NothingToReleaseError("none", claimed_amount=5, total_amount=5))
    assert context["fully_vested"] is True
    context = get_error_context(AlreadyExistsError("dup", key="0xabc"))
    assert context["schedule_key"] == "0xabc"


def test_error_context_for_plain_exception():
    context = get_error_context(RuntimeError("boom"))
    assert context == {"error_type": "RuntimeError", "error_message": "boom"}
