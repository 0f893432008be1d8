"""
Core vesting components:
- Schedule validation and the vesting schedule data model
- Deterministic schedule identity derivation
- Release computation and claims
- Canonical argument encoding and operation payloads
"""

from tranchevest.core.payload_builder import (
    OperationDescriptor,
    build_create_payload,
    build_release_payload,
    decode_arguments,
)
from tranchevest.core.release_engine import claim, releasable_amount
from tranchevest.core.schedule_identity import ScheduleKey, derive
from tranchevest.core.schedule_validator import Tranche, validate
from tranchevest.core.vesting_schedule import ScheduleStatus, VestingSchedule, create

__all__ = [
    "OperationDescriptor",
    "ScheduleKey",
    "ScheduleStatus",
    "Tranche",
    "VestingSchedule",
    "build_create_payload",
    "build_release_payload",
    "claim",
    "create",
    "decode_arguments",
    "derive",
    "releasable_amount",
    "validate",
]
