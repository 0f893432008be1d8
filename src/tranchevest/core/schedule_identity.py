"""
Deterministic schedule identity.

A schedule is located by a key derived from (grantor, beneficiary, seed).
The derivation hashes a fixed domain tag followed by every field with a
length prefix, so distinct triples never share a preimage.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from typing import Optional

from aptos_sdk.account_address import AccountAddress
from aptos_sdk.bcs import Serializer

from tranchevest.core import config
from tranchevest.core.account_address import AddressLike, address_hex, to_address
from tranchevest.core.constants import SCHEDULE_KEY_DOMAIN, SCHEDULE_KEY_LENGTH
from tranchevest.core.vesting_exceptions import IdentityError

logger = logging.getLogger("tranchevest.core.schedule_identity")


@dataclass(frozen=True)
class ScheduleKey:
    digest: bytes

    def __post_init__(self) -> None:
        if len(self.digest) != SCHEDULE_KEY_LENGTH:
            raise IdentityError(f"Schedule key must be {SCHEDULE_KEY_LENGTH} bytes")

    @classmethod
    def from_hex(cls, value: str) -> "ScheduleKey":
        hex_part = value[2:] if value.lower().startswith("0x") else value
        try:
            return cls(bytes.fromhex(hex_part))
        except ValueError as exc:
            raise IdentityError(f"Invalid schedule key: {value!r}") from exc

    def hex(self) -> str:
        return "0x" + self.digest.hex()

    def __str__(self) -> str:
        return self.hex()


def seed_bytes(seed: str, max_length: Optional[int] = None) -> bytes:
    """Validate a seed and return its UTF-8 encoding.

    Raises:
        IdentityError: If the seed is not a non-empty string within the
            configured maximum length (measured in UTF-8 bytes)
    """
    if not isinstance(seed, str):
        raise IdentityError(f"Seed must be a string, got {type(seed).__name__}")
    limit = config.MAX_SEED_LENGTH if max_length is None else max_length
    raw = seed.encode("utf-8")
    if not raw:
        raise IdentityError("Seed cannot be empty")
    if len(raw) > limit:
        raise IdentityError(
            f"Seed exceeds maximum length of {limit} bytes",
            details={"length": len(raw), "max_length": limit},
        )
    return raw


def derive(
    grantor: AddressLike,
    beneficiary: AddressLike,
    seed: str,
    max_seed_length: Optional[int] = None,
) -> ScheduleKey:
    """
    Derive the key of the schedule identified by (grantor, beneficiary, seed).

    Pure and deterministic. Changing any one field changes the key.
    """
    grantor_addr: AccountAddress = to_address(grantor)
    beneficiary_addr: AccountAddress = to_address(beneficiary)
    raw_seed = seed_bytes(seed, max_seed_length)

    preimage = Serializer()
    preimage.to_bytes(SCHEDULE_KEY_DOMAIN)
    preimage.to_bytes(grantor_addr.address)
    preimage.to_bytes(beneficiary_addr.address)
    preimage.to_bytes(raw_seed)
    key = ScheduleKey(hashlib.sha3_256(preimage.output()).digest())
    logger.debug(
        "Derived schedule key %s for grantor %s",
        key.hex(),
        address_hex(grantor_addr),
    )
    return key
