import logging

import pytest

from tranchevest.blockchain.vesting_manager import VestingManager
from tranchevest.core.constants import CREATE_FUNCTION, DEFAULT_TOKEN_TYPE, RELEASE_FUNCTION
from tranchevest.core.payload_builder import decode_arguments
from tranchevest.core.vesting_exceptions import (
    AlreadyExistsError,
    AmountMismatchError,
    ConfigurationError,
    InsufficientBalanceError,
    NothingToReleaseError,
)


@pytest.fixture
def funded_ledger(ledger, grantor):
    ledger.fund(grantor, DEFAULT_TOKEN_TYPE, 100_000)
    return ledger


@pytest.fixture
def manager(funded_ledger, clock):
    return VestingManager(funded_ledger, writer=funded_ledger, time_provider=clock.now)


def test_create_and_release_flow(manager, funded_ledger, clock, grantor, beneficiary, sample_tranches):
    prepared = manager.prepare_create(grantor, beneficiary, "ABC", sample_tranches, 140)
    assert prepared.descriptor.function == CREATE_FUNCTION
    assert prepared.descriptor.sender == grantor
    assert prepared.schedule.created_at == clock.now()
    assert manager.submit(prepared.descriptor) == "0xtx1"

    # Ledger confirmed creation: the key is now occupied
    funded_ledger.existing_keys.add(prepared.schedule.key.hex())

    release = manager.prepare_release(prepared.schedule)
    assert release.amount == 20
    assert release.descriptor.function == RELEASE_FUNCTION
    assert release.descriptor.sender == beneficiary
    assert decode_arguments(release.descriptor) == {"grantor": grantor, "seed": "ABC"}
    manager.submit(release.descriptor)
    assert len(funded_ledger.submitted) == 2

    with pytest.raises(NothingToReleaseError):
        manager.prepare_release(release.schedule)

    clock.advance(30)
    final = manager.prepare_release(release.schedule)
    assert final.amount == 120
    assert manager.get_schedule(final.schedule.key).claimed_amount == 140


def test_failed_release_leaves_local_copy(manager, clock, grantor, beneficiary, sample_tranches):
    prepared = manager.prepare_create(grantor, beneficiary, "ABC", sample_tranches, 140)
    clock.current_time -= 1
    with pytest.raises(NothingToReleaseError):
        manager.prepare_release(prepared.schedule)
    assert manager.get_schedule(prepared.schedule.key.hex()).claimed_amount == 0


def test_duplicate_schedule_rejected(manager, funded_ledger, grantor, beneficiary, sample_tranches):
    prepared = manager.prepare_create(grantor, beneficiary, "ABC", sample_tranches, 140)
    funded_ledger.existing_keys.add(prepared.schedule.key.hex())
    with pytest.raises(AlreadyExistsError):
        manager.prepare_create(grantor, beneficiary, "ABC", sample_tranches, 140)


def test_recreate_keeps_claimed_progress(manager, grantor, beneficiary, sample_tranches):
    prepared = manager.prepare_create(grantor, beneficiary, "ABC", sample_tranches, 140)
    release = manager.prepare_release(prepared.schedule)
    assert release.schedule.claimed_amount == 20

    # Not yet on the ledger, but already held locally
    with pytest.raises(AlreadyExistsError) as exc_info:
        manager.prepare_create(grantor, beneficiary, "ABC", sample_tranches, 140)
    assert exc_info.value.key == prepared.schedule.key.hex()
    assert manager.get_schedule(prepared.schedule.key).claimed_amount == 20


def test_rejected_release_is_logged(manager, clock, grantor, beneficiary, sample_tranches, caplog):
    prepared = manager.prepare_create(grantor, beneficiary, "ABC", sample_tranches, 140)
    clock.current_time -= 1
    with caplog.at_level(logging.WARNING, logger="tranchevest.blockchain.vesting_manager"):
        with pytest.raises(NothingToReleaseError):
            manager.prepare_release(prepared.schedule)
    records = [r for r in caplog.records if getattr(r, "event", None) == "vesting.prepare_release_failed"]
    assert len(records) == 1
    assert records[0].error_type == "NothingToReleaseError"


def test_insufficient_balance(ledger, clock, grantor, beneficiary, sample_tranches):
    ledger.fund(grantor, DEFAULT_TOKEN_TYPE, 139)
    manager = VestingManager(ledger, time_provider=clock.now)
    with pytest.raises(InsufficientBalanceError) as exc_info:
        manager.prepare_create(grantor, beneficiary, "ABC", sample_tranches, 140)
    assert exc_info.value.details["balance"] == 139
    assert manager.list_schedules() == []


def test_balance_check_can_be_disabled(ledger, clock, grantor, beneficiary, sample_tranches):
    manager = VestingManager(ledger, time_provider=clock.now, check_balance=False)
    prepared = manager.prepare_create(grantor, beneficiary, "ABC", sample_tranches, 140)
    assert prepared.schedule.total_amount == 140


def test_balance_checked_per_token_type(manager, grantor, beneficiary, sample_tranches):
    with pytest.raises(InsufficientBalanceError):
        manager.prepare_create(
            grantor, beneficiary, "ABC", sample_tranches, 140, token_type="0x9::usd::USD"
        )


def test_invalid_schedule_not_stored(manager, grantor, beneficiary, sample_tranches):
    with pytest.raises(AmountMismatchError):
        manager.prepare_create(grantor, beneficiary, "ABC", sample_tranches, 141)
    assert manager.list_schedules() == []


def test_submit_without_writer(funded_ledger, clock, grantor, beneficiary, sample_tranches):
    manager = VestingManager(funded_ledger, time_provider=clock.now)
    prepared = manager.prepare_create(grantor, beneficiary, "ABC", sample_tranches, 140)
    with pytest.raises(ConfigurationError):
        manager.submit(prepared.descriptor)


def test_list_schedules_by_beneficiary(manager, grantor, beneficiary, sample_tranches):
    manager.prepare_create(grantor, beneficiary, "ABC", sample_tranches, 140)
    manager.prepare_create(grantor, grantor, "SELF", sample_tranches, 140)
    assert len(manager.list_schedules()) == 2
    assert [s.seed for s in manager.list_schedules(beneficiary)] == ["ABC"]


def test_queries_use_time_provider(manager, clock, grantor, beneficiary, sample_tranches):
    schedule = manager.prepare_create(grantor, beneficiary, "ABC", sample_tranches, 140).schedule
    assert manager.get_releasable(schedule) == 20
    assert manager.get_next_release_time(schedule) == clock.now() + 15
    assert manager.get_releasable(schedule, current_time=clock.now() + 20) == 90


def test_time_provider_must_return_int(funded_ledger):
    manager = VestingManager(funded_ledger, time_provider=lambda: "soon")
    with pytest.raises(ValueError):
        manager.get_releasable(None)
