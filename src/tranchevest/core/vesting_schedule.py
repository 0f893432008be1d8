"""
Vesting schedule data model and creation.

A schedule is immutable apart from ``claimed_amount``, which only the
release engine advances. Lifecycle::

    ACTIVE (claimed < total) --claim--> ACTIVE ... --claim--> FULLY_VESTED

FULLY_VESTED is terminal; the schedule stays queryable.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple

from aptos_sdk.account_address import AccountAddress

from tranchevest.core.account_address import AddressLike, address_hex, to_address
from tranchevest.core.ledger_interfaces import LedgerReader
from tranchevest.core.schedule_identity import ScheduleKey, derive, seed_bytes
from tranchevest.core.schedule_validator import Tranche, validate
from tranchevest.core.vesting_exceptions import AlreadyExistsError, ScheduleValidationError

logger = logging.getLogger("tranchevest.core.vesting_schedule")


class ScheduleStatus(str, Enum):
    ACTIVE = "active"
    FULLY_VESTED = "fully_vested"


@dataclass(frozen=True)
class VestingSchedule:
    grantor: AccountAddress
    beneficiary: AccountAddress
    seed: str
    tranches: Tuple[Tranche, ...]
    total_amount: int
    created_at: int
    claimed_amount: int = 0
    _key: Optional[ScheduleKey] = field(default=None, repr=False, compare=False)

    @property
    def key(self) -> ScheduleKey:
        if self._key is None:
            # frozen: cache through object.__setattr__
            object.__setattr__(self, "_key", derive(self.grantor, self.beneficiary, self.seed))
        return self._key  # type: ignore[return-value]

    @property
    def status(self) -> ScheduleStatus:
        if self.claimed_amount >= self.total_amount:
            return ScheduleStatus.FULLY_VESTED
        return ScheduleStatus.ACTIVE

    @property
    def remaining_amount(self) -> int:
        return self.total_amount - self.claimed_amount

    @property
    def release_times(self) -> Tuple[int, ...]:
        return tuple(t.release_time for t in self.tranches)

    @property
    def amounts(self) -> Tuple[int, ...]:
        return tuple(t.amount for t in self.tranches)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key.hex(),
            "grantor": address_hex(self.grantor),
            "beneficiary": address_hex(self.beneficiary),
            "seed": self.seed,
            "tranches": [t.to_dict() for t in self.tranches],
            "total_amount": self.total_amount,
            "claimed_amount": self.claimed_amount,
            "created_at": self.created_at,
            "status": self.status.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VestingSchedule":
        """
        Rebuild a schedule from ``to_dict`` output or ledger state.

        Re-runs tranche validation and bounds ``claimed_amount``.
        """
        tranches = tuple(Tranche.from_dict(t) for t in data["tranches"])
        total_amount = data["total_amount"]
        claimed_amount = data.get("claimed_amount", 0)
        validate(tranches, total_amount)
        if isinstance(claimed_amount, bool) or not isinstance(claimed_amount, int):
            raise TypeError("claimed_amount must be an int")
        if not 0 <= claimed_amount <= total_amount:
            raise ValueError(
                f"claimed_amount {claimed_amount} outside [0, {total_amount}]"
            )
        seed = data["seed"]
        seed_bytes(seed)
        return cls(
            grantor=to_address(data["grantor"]),
            beneficiary=to_address(data["beneficiary"]),
            seed=seed,
            tranches=tranches,
            total_amount=total_amount,
            created_at=data["created_at"],
            claimed_amount=claimed_amount,
        )


def create(
    grantor: AddressLike,
    beneficiary: AddressLike,
    seed: str,
    tranches: Sequence[Tranche],
    total_amount: int,
    now: int,
    ledger: Optional[LedgerReader] = None,
) -> VestingSchedule:
    """
    Create a validated schedule with nothing claimed.

    The caller must ensure no schedule already exists at the derived key.
    Passing ``ledger`` performs that check here; without it the check is
    the caller's precondition.

    Raises:
        ScheduleValidationError: Tranches failed validation
        IdentityError: Grantor, beneficiary or seed are malformed
        AlreadyExistsError: The ledger already holds a schedule at the key
    """
    tranche_tuple = tuple(tranches)
    try:
        validate(tranche_tuple, total_amount)
    except ScheduleValidationError as exc:
        logger.warning(
            "Rejected vesting schedule: %s",
            exc.message,
            extra={"event": "vesting.create_rejected", "kind": exc.kind.value},
        )
        raise

    grantor_addr = to_address(grantor)
    beneficiary_addr = to_address(beneficiary)
    key = derive(grantor_addr, beneficiary_addr, seed)

    if ledger is not None and ledger.account_exists(key.hex()):
        raise AlreadyExistsError(
            f"Vesting schedule already exists at {key.hex()}",
            key=key.hex(),
            details={"grantor": address_hex(grantor_addr), "seed": seed},
        )

    schedule = VestingSchedule(
        grantor=grantor_addr,
        beneficiary=beneficiary_addr,
        seed=seed,
        tranches=tranche_tuple,
        total_amount=total_amount,
        created_at=now,
        claimed_amount=0,
        _key=key,
    )
    logger.info(
        "Vesting schedule %s created for %s with %d tranches",
        key.hex(),
        address_hex(beneficiary_addr),
        len(tranche_tuple),
        extra={"event": "vesting.created", "total_amount": total_amount},
    )
    return schedule
