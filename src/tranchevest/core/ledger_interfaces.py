"""
Ledger Protocol Interfaces - the boundary between vesting logic and a ledger.

The vesting core never owns balances or schedule storage. It reads ledger
state through LedgerReader and hands operation descriptors to a
LedgerWriter supplied by the caller. Both are injected, never global, so
tests substitute in-memory fakes.

Usage:
    class AptosLedgerClient:
        def account_exists(self, key: str) -> bool: ...
        def get_account_balance(self, address: str, token_type: str) -> int: ...
        def submit(self, descriptor: OperationDescriptor) -> str: ...

    manager = VestingManager(reader=client, writer=client)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from tranchevest.core.payload_builder import OperationDescriptor


@runtime_checkable
class LedgerReader(Protocol):
    """Read-only view of ledger state."""

    def account_exists(self, key: str) -> bool:
        """Return True if an account or resource already lives at ``key``."""
        ...

    def get_account_balance(self, address: str, token_type: str) -> int:
        """Return the balance of ``token_type`` held by ``address`` in base units."""
        ...


@runtime_checkable
class LedgerWriter(Protocol):
    """Submits operation descriptors; signing and transport live behind it."""

    def submit(self, descriptor: "OperationDescriptor") -> Any:
        """Submit a descriptor and return an opaque transaction handle."""
        ...
