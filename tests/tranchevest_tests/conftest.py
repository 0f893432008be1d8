from __future__ import annotations

import pytest

from tranchevest.core.account_address import address_hex, generate_account
from tranchevest.core.schedule_validator import tranches_from_offsets

START_TIME = 1_700_000_000


class ManualClock:
    def __init__(self, start_time: int):
        self.current_time = start_time

    def now(self) -> int:
        return self.current_time

    def advance(self, seconds: int):
        self.current_time += seconds


class FakeLedger:
    """In-memory stand-in for the ledger read and write ports."""

    def __init__(self):
        self.existing_keys: set[str] = set()
        self.balances: dict[tuple[str, str], int] = {}
        self.submitted = []

    def account_exists(self, key: str) -> bool:
        return key in self.existing_keys

    def get_account_balance(self, address: str, token_type: str) -> int:
        return self.balances.get((address, token_type), 0)

    def fund(self, address: str, token_type: str, amount: int) -> None:
        self.balances[(address, token_type)] = self.balances.get((address, token_type), 0) + amount

    def submit(self, descriptor):
        self.submitted.append(descriptor)
        return f"0xtx{len(self.submitted)}"


@pytest.fixture
def clock():
    return ManualClock(START_TIME)


@pytest.fixture
def ledger():
    return FakeLedger()


@pytest.fixture
def grantor():
    return address_hex(generate_account()[1])


@pytest.fixture
def beneficiary():
    return address_hex(generate_account()[1])


@pytest.fixture
def sample_tranches():
    # 20 at t0, 30 at t0+15, 40 at t0+20, 50 at t0+30
    return tranches_from_offsets(START_TIME, [15, 20, 30], [20, 30, 40, 50])
