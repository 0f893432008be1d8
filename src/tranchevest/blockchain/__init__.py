"""
Vesting Blockchain Module

Ledger-facing orchestration of vesting schedules: creation and release
flows that check ledger preconditions and emit operation descriptors.
"""

__all__ = []
