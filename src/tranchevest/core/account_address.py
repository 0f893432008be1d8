"""Ledger account addresses and Ed25519 account helpers."""

from __future__ import annotations

from typing import Union

from aptos_sdk.account_address import AccountAddress
from aptos_sdk.ed25519 import PrivateKey

from tranchevest.core.vesting_exceptions import IdentityError

AddressLike = Union[AccountAddress, str, bytes]


def to_address(value: AddressLike) -> AccountAddress:
    """Parse an address; hex short forms such as ``0x1`` are zero-padded."""
    if isinstance(value, AccountAddress):
        return value
    if isinstance(value, (bytes, bytearray)):
        if len(value) != AccountAddress.LENGTH:
            raise IdentityError(f"Address must be {AccountAddress.LENGTH} bytes")
        return AccountAddress(bytes(value))
    if not isinstance(value, str):
        raise IdentityError(f"Address must be a hex string, got {type(value).__name__}")
    hex_part = value[2:] if value[:2].lower() == "0x" else value
    if not hex_part or len(hex_part) > AccountAddress.LENGTH * 2:
        raise IdentityError(f"Invalid address: {value!r}")
    try:
        return AccountAddress.from_str_relaxed(hex_part.lower())
    except (RuntimeError, ValueError) as exc:
        raise IdentityError(f"Invalid address: {value!r}") from exc


def address_hex(value: AddressLike) -> str:
    """Long form ``0x`` + 64 lowercase hex chars, also for special addresses."""
    return "0x" + to_address(value).address.hex()


def generate_account() -> tuple[PrivateKey, AccountAddress]:
    private_key = PrivateKey.random()
    return private_key, AccountAddress.from_key(private_key.public_key())


def account_from_private_hex(private_hex: str) -> tuple[PrivateKey, AccountAddress]:
    try:
        private_key = PrivateKey.from_str(private_hex)
    except ValueError as exc:
        raise IdentityError("Private key must be 32 bytes of hex") from exc
    return private_key, AccountAddress.from_key(private_key.public_key())
