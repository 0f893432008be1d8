"""
Vesting Constants

Values in this module are part of the ledger calling convention or the
schedule identity derivation. Changing any value marked [WIRE] breaks
compatibility with the deployed vesting module and with previously
derived schedule keys.
"""

from typing import Final

# =============================================================================
# INTEGER BOUNDS [WIRE]
# =============================================================================

U64_MAX: Final[int] = 2**64 - 1

# =============================================================================
# SCHEDULE IDENTITY [WIRE]
# =============================================================================

SCHEDULE_KEY_DOMAIN: Final[bytes] = b"tranchevest::schedule_key::v1"
SCHEDULE_KEY_LENGTH: Final[int] = 32
DEFAULT_MAX_SEED_LENGTH: Final[int] = 128

# =============================================================================
# VESTING MODULE [WIRE]
# =============================================================================

DEFAULT_MODULE_ADDRESS: Final[str] = (
    "0x5afd8bcbb3d4271d3a05ff958fcf69c011be9faf6d41fcd2c5e6d12910f255bb"
)
DEFAULT_MODULE_NAME: Final[str] = "acl_based_mb"
CREATE_FUNCTION: Final[str] = "create_vesting"
RELEASE_FUNCTION: Final[str] = "release_fund"
DEFAULT_TOKEN_TYPE: Final[str] = "0x1::aptos_coin::AptosCoin"
