"""
Tranche Vesting

Token vesting schedules released to a beneficiary in discrete tranches,
with deterministic schedule identities and ledger-ready operation payloads.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
