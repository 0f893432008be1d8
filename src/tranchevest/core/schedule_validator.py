"""
Tranche validation.

Checks run in a fixed order and stop at the first failure:
non-empty, strictly increasing release times, non-negative amounts,
amounts summing exactly to the declared total.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence

from tranchevest.core.vesting_exceptions import (
    AmountMismatchError,
    EmptyScheduleError,
    NegativeAmountError,
    NonMonotonicTimeError,
)


@dataclass(frozen=True)
class Tranche:
    """One discrete unlock: ``amount`` becomes releasable at ``release_time``."""

    release_time: int
    amount: int

    def to_dict(self) -> dict:
        return {"release_time": self.release_time, "amount": self.amount}

    @classmethod
    def from_dict(cls, data: dict) -> "Tranche":
        return cls(release_time=data["release_time"], amount=data["amount"])


def validate(tranches: Sequence[Tranche], total_amount: int) -> None:
    """
    Validate proposed tranches against a declared total.

    Args:
        tranches: Tranches in the order they were supplied
        total_amount: Declared schedule total

    Raises:
        EmptyScheduleError: No tranches supplied
        NonMonotonicTimeError: Two consecutive release times are equal or decreasing
        NegativeAmountError: A tranche amount is below zero
        AmountMismatchError: Amounts do not sum to total_amount
        TypeError: A time or amount is not an int
    """
    if not tranches:
        raise EmptyScheduleError("Vesting schedule must contain at least one tranche")

    for index, tranche in enumerate(tranches):
        for field_name in ("release_time", "amount"):
            value = getattr(tranche, field_name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(
                    f"Tranche {index} {field_name} must be an int, got {type(value).__name__}"
                )
    if isinstance(total_amount, bool) or not isinstance(total_amount, int):
        raise TypeError(f"total_amount must be an int, got {type(total_amount).__name__}")

    for index in range(1, len(tranches)):
        previous = tranches[index - 1].release_time
        current = tranches[index].release_time
        if current <= previous:
            raise NonMonotonicTimeError(
                f"Release time of tranche {index} ({current}) must be after tranche "
                f"{index - 1} ({previous})",
                details={"index": index, "previous": previous, "current": current},
            )

    for index, tranche in enumerate(tranches):
        if tranche.amount < 0:
            raise NegativeAmountError(
                f"Tranche {index} amount cannot be negative: {tranche.amount}",
                details={"index": index, "amount": tranche.amount},
            )

    tranche_sum = sum(tranche.amount for tranche in tranches)
    if tranche_sum != total_amount:
        raise AmountMismatchError(
            f"Tranche amounts sum to {tranche_sum}, expected {total_amount}",
            details={"sum": tranche_sum, "total_amount": total_amount},
        )


def tranches_from_pairs(release_times: Iterable[int], amounts: Iterable[int]) -> List[Tranche]:
    """Zip parallel release-time and amount lists into tranches.

    Raises:
        ValueError: If the lists differ in length
    """
    times = list(release_times)
    values = list(amounts)
    if len(times) != len(values):
        raise ValueError(
            f"Got {len(times)} release times for {len(values)} amounts"
        )
    return [Tranche(release_time=t, amount=a) for t, a in zip(times, values)]


def tranches_from_offsets(start: int, offsets: Iterable[int], amounts: Iterable[int]) -> List[Tranche]:
    """Build tranches with the first release at ``start`` and the rest at ``start + offset``."""
    release_times = [start] + [start + offset for offset in offsets]
    return tranches_from_pairs(release_times, amounts)
