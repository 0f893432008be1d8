"""
Release computation for tranche vesting.

``claim`` is the only operation that advances ``claimed_amount``. It
releases everything currently due in one step and returns a new schedule;
the schedule passed in is never modified.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Optional, Tuple

from tranchevest.core.vesting_exceptions import NothingToReleaseError
from tranchevest.core.vesting_schedule import VestingSchedule

logger = logging.getLogger("tranchevest.core.release_engine")


def vested_amount(schedule: VestingSchedule, now: int) -> int:
    """Sum of tranche amounts whose release time is at or before ``now``."""
    total = 0
    for tranche in schedule.tranches:
        # tranches are sorted by release time
        if tranche.release_time > now:
            break
        total += tranche.amount
    return total


def releasable_amount(schedule: VestingSchedule, now: int) -> int:
    """Amount due at ``now`` that has not been claimed yet. Never negative."""
    return max(0, vested_amount(schedule, now) - schedule.claimed_amount)


def next_release_time(schedule: VestingSchedule, now: int) -> Optional[int]:
    """Release time of the first tranche still in the future, or None."""
    for tranche in schedule.tranches:
        if tranche.release_time > now:
            return tranche.release_time
    return None


def claim(schedule: VestingSchedule, now: int) -> Tuple[VestingSchedule, int]:
    """
    Release the full amount currently due.

    Returns:
        (updated schedule, amount released)

    Raises:
        NothingToReleaseError: Nothing is due yet, or the schedule is fully vested
    """
    due = releasable_amount(schedule, now)
    if due == 0:
        logger.warning(
            "No tokens available to claim for schedule %s",
            schedule.key.hex(),
            extra={"event": "vesting.nothing_to_release", "now": now},
        )
        raise NothingToReleaseError(
            f"Nothing to release from schedule {schedule.key.hex()} at {now}",
            claimed_amount=schedule.claimed_amount,
            total_amount=schedule.total_amount,
            details={"next_release_time": next_release_time(schedule, now)},
        )

    updated = dataclasses.replace(schedule, claimed_amount=schedule.claimed_amount + due)
    logger.info(
        "Released %d from schedule %s (%d of %d claimed)",
        due,
        schedule.key.hex(),
        updated.claimed_amount,
        updated.total_amount,
        extra={"event": "vesting.released", "status": updated.status.value},
    )
    return updated, due
