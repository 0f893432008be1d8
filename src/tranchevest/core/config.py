"""
Vesting Configuration

Values are read from environment variables once, at import time. Every
variable is optional; defaults target the development network and the
module the reference deployment uses.
"""

from __future__ import annotations

import logging
import os
from enum import Enum

from tranchevest.core.constants import (
    DEFAULT_MAX_SEED_LENGTH,
    DEFAULT_MODULE_ADDRESS,
    DEFAULT_MODULE_NAME,
    DEFAULT_TOKEN_TYPE,
)
from tranchevest.core.vesting_exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class NetworkType(Enum):
    DEVNET = "devnet"
    TESTNET = "testnet"
    MAINNET = "mainnet"


def _get_network(env_var: str, default: str) -> NetworkType:
    value = os.getenv(env_var, default).strip().lower()
    try:
        return NetworkType(value)
    except ValueError as exc:
        raise ConfigurationError(
            f"{env_var} must be one of {[n.value for n in NetworkType]}, got {value!r}",
            details={"env_var": env_var, "value": value},
        ) from exc


def _get_positive_int(env_var: str, default: int) -> int:
    raw = os.getenv(env_var, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigurationError(
            f"{env_var} must be an integer, got {raw!r}",
            details={"env_var": env_var, "value": raw},
        ) from exc
    if value <= 0:
        raise ConfigurationError(
            f"{env_var} must be positive, got {value}",
            details={"env_var": env_var, "value": value},
        )
    return value


def _get_str(env_var: str, default: str) -> str:
    return os.getenv(env_var, "").strip() or default


NETWORK = _get_network("TRANCHEVEST_NETWORK", NetworkType.DEVNET.value)

MODULE_ADDRESS = _get_str("TRANCHEVEST_MODULE_ADDRESS", DEFAULT_MODULE_ADDRESS)
MODULE_NAME = _get_str("TRANCHEVEST_MODULE_NAME", DEFAULT_MODULE_NAME)
DEFAULT_TOKEN = _get_str("TRANCHEVEST_DEFAULT_TOKEN_TYPE", DEFAULT_TOKEN_TYPE)
MAX_SEED_LENGTH = _get_positive_int("TRANCHEVEST_MAX_SEED_LENGTH", DEFAULT_MAX_SEED_LENGTH)
LOG_LEVEL = _get_str("TRANCHEVEST_LOG_LEVEL", "INFO").upper()

if LOG_LEVEL not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
    raise ConfigurationError(
        f"TRANCHEVEST_LOG_LEVEL is not a logging level: {LOG_LEVEL!r}",
        details={"env_var": "TRANCHEVEST_LOG_LEVEL", "value": LOG_LEVEL},
    )

if NETWORK is NetworkType.MAINNET and MODULE_ADDRESS == DEFAULT_MODULE_ADDRESS:
    logger.warning(
        "Using the development vesting module address on mainnet. "
        "Set TRANCHEVEST_MODULE_ADDRESS for production.",
        extra={"event": "config.default_module_on_mainnet"},
    )


def module_id() -> str:
    """Fully qualified vesting module id, ``<address>::<name>``."""
    return f"{MODULE_ADDRESS}::{MODULE_NAME}"
