from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Sequence

from tranchevest.core import config
from tranchevest.core.account_address import AddressLike, address_hex, to_address
from tranchevest.core.ledger_interfaces import LedgerReader, LedgerWriter
from tranchevest.core.payload_builder import (
    OperationDescriptor,
    create_payload_for,
    release_payload_for,
)
from tranchevest.core.release_engine import claim, next_release_time, releasable_amount
from tranchevest.core.schedule_identity import ScheduleKey
from tranchevest.core.schedule_validator import Tranche
from tranchevest.core.vesting_exceptions import (
    AlreadyExistsError,
    ConfigurationError,
    InsufficientBalanceError,
    VestingError,
    get_error_context,
)
from tranchevest.core.vesting_schedule import VestingSchedule, create

logger = logging.getLogger("tranchevest.blockchain.vesting_manager")


@dataclass(frozen=True)
class PreparedCreate:
    schedule: VestingSchedule
    descriptor: OperationDescriptor


@dataclass(frozen=True)
class PreparedRelease:
    schedule: VestingSchedule
    amount: int
    descriptor: OperationDescriptor


class VestingManager:
    """
    Runs the create and release flows against an injected ledger.

    The ledger stays authoritative. The manager keeps local copies of the
    schedules it prepared so callers can query them, and never submits
    anything unless ``submit`` is called.
    """

    def __init__(
        self,
        reader: LedgerReader,
        writer: LedgerWriter | None = None,
        time_provider: Callable[[], int] | None = None,
        check_balance: bool = True,
    ):
        self.reader = reader
        self.writer = writer
        self.check_balance = check_balance
        # {schedule key hex: VestingSchedule}
        self.vesting_schedules: dict[str, VestingSchedule] = {}
        self._lock = threading.RLock()
        self._time_provider = time_provider or (lambda: int(time.time()))
        logger.info("VestingManager initialized with deterministic time provider: %s", bool(time_provider))

    def _current_time(self) -> int:
        timestamp = self._time_provider()
        if isinstance(timestamp, bool):
            raise ValueError("time_provider must return an integer timestamp")
        try:
            return int(timestamp)
        except (TypeError, ValueError) as exc:
            raise ValueError("time_provider must return an integer timestamp") from exc

    def prepare_create(
        self,
        grantor: AddressLike,
        beneficiary: AddressLike,
        seed: str,
        tranches: Sequence[Tranche],
        total_amount: int,
        token_type: str | None = None,
    ) -> PreparedCreate:
        """
        Validates a schedule, checks ledger preconditions and builds its create payload.
        """
        token = token_type or config.DEFAULT_TOKEN
        try:
            schedule = create(
                grantor,
                beneficiary,
                seed,
                tranches,
                total_amount,
                now=self._current_time(),
                ledger=self.reader,
            )
            if self.check_balance:
                self._require_balance(schedule, token)
            descriptor = create_payload_for(schedule, token_type=token)
            key_hex = schedule.key.hex()
            with self._lock:
                if key_hex in self.vesting_schedules:
                    raise AlreadyExistsError(
                        f"Vesting schedule already exists at {key_hex}",
                        key=key_hex,
                    )
                self.vesting_schedules[key_hex] = schedule
        except VestingError as exc:
            logger.warning(
                "Create vesting rejected: %s",
                exc.message,
                extra={"event": "vesting.prepare_create_failed", **get_error_context(exc)},
            )
            raise
        return PreparedCreate(schedule=schedule, descriptor=descriptor)

    def _require_balance(self, schedule: VestingSchedule, token_type: str) -> None:
        balance = self.reader.get_account_balance(address_hex(schedule.grantor), token_type)
        if balance < schedule.total_amount:
            raise InsufficientBalanceError(
                f"Grantor {address_hex(schedule.grantor)} holds {balance}, "
                f"schedule needs {schedule.total_amount}",
                details={
                    "balance": balance,
                    "total_amount": schedule.total_amount,
                    "token_type": token_type,
                },
            )

    def prepare_release(
        self,
        schedule: VestingSchedule,
        token_type: str | None = None,
        current_time: int | None = None,
    ) -> PreparedRelease:
        """
        Claims what is due on a local copy and builds the matching release payload.

        The local copy is updated only after the payload is built, so a
        failure leaves it unchanged.
        """
        if current_time is None:
            current_time = self._current_time()
        try:
            updated, amount = claim(schedule, current_time)
            descriptor = release_payload_for(updated, token_type=token_type)
        except VestingError as exc:
            logger.warning(
                "Release vesting rejected: %s",
                exc.message,
                extra={"event": "vesting.prepare_release_failed", **get_error_context(exc)},
            )
            raise
        with self._lock:
            self.vesting_schedules[updated.key.hex()] = updated
        return PreparedRelease(schedule=updated, amount=amount, descriptor=descriptor)

    def submit(self, descriptor: OperationDescriptor) -> Any:
        if self.writer is None:
            raise ConfigurationError("No ledger writer configured for submission")
        handle = self.writer.submit(descriptor)
        logger.info(
            "Submitted %s",
            descriptor.operation_name,
            extra={"event": "vesting.submitted", "sender": descriptor.sender},
        )
        return handle

    def get_schedule(self, key: ScheduleKey | str) -> VestingSchedule | None:
        key_hex = key.hex() if isinstance(key, ScheduleKey) else ScheduleKey.from_hex(key).hex()
        with self._lock:
            return self.vesting_schedules.get(key_hex)

    def list_schedules(self, beneficiary: AddressLike | None = None) -> list[VestingSchedule]:
        with self._lock:
            schedules = list(self.vesting_schedules.values())
        if beneficiary is None:
            return schedules
        target = to_address(beneficiary)
        return [s for s in schedules if s.beneficiary == target]

    def get_releasable(self, schedule: VestingSchedule, current_time: int | None = None) -> int:
        if current_time is None:
            current_time = self._current_time()
        return releasable_amount(schedule, current_time)

    def get_next_release_time(self, schedule: VestingSchedule, current_time: int | None = None) -> int | None:
        if current_time is None:
            current_time = self._current_time()
        return next_release_time(schedule, current_time)
