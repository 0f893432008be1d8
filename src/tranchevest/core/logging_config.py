"""
Vesting - Structured Logging Configuration

Configures JSON logging for the ``tranchevest`` logger hierarchy:
- JSON format for easy parsing and aggregation
- Optional rotating file output
- ``extra={"event": ...}`` fields carried into every record

Usage:
    from tranchevest.core.logging_config import setup_logging

    logger = setup_logging(level="DEBUG", log_file="/var/log/tranchevest/vesting.json")
"""

import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from pythonjsonlogger import jsonlogger

from tranchevest.core import config


class VestingJsonFormatter(jsonlogger.JsonFormatter):
    """
    JSON formatter adding timestamp, network and source location fields.
    """

    def __init__(
        self,
        fmt: str = "%(timestamp)s %(level)s %(name)s %(message)s",
        network: Optional[str] = None,
        service_name: str = "tranchevest",
    ):
        super().__init__(fmt=fmt)
        self.network = network or config.NETWORK.value
        self.service_name = service_name

    def add_fields(
        self,
        log_record: Dict[str, Any],
        record: logging.LogRecord,
        message_dict: Dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        if not log_record.get("timestamp"):
            log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        if not log_record.get("level"):
            log_record["level"] = record.levelname.lower()

        log_record["network"] = self.network
        log_record["service"] = self.service_name
        log_record["source"] = {
            "function": record.funcName,
            "module": record.module,
            "line": record.lineno,
        }


def setup_logging(
    name: str = "tranchevest",
    log_file: Optional[str] = None,
    level: Optional[str] = None,
    enable_console: bool = True,
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
) -> logging.Logger:
    """
    Attach JSON handlers to the ``name`` logger.

    Args:
        name: Logger name; child loggers such as ``tranchevest.core`` inherit it
        log_file: Path to a JSON log file (optional)
        level: Logging level, defaults to TRANCHEVEST_LOG_LEVEL
        enable_console: Whether to log to stdout
        max_bytes: Maximum log file size before rotation
        backup_count: Number of rotated files to keep

    Returns:
        Configured logger instance
    """
    resolved_level = getattr(logging, (level or config.LOG_LEVEL).upper())
    logger = logging.getLogger(name)
    logger.setLevel(resolved_level)

    # Remove existing handlers to avoid duplicates
    logger.handlers = []

    formatter = VestingJsonFormatter(service_name=name.split(".")[0])

    if enable_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(resolved_level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            filename=log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
        )
        file_handler.setLevel(resolved_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Return ``name``, configuring the root ``tranchevest`` logger on first use."""
    root = logging.getLogger("tranchevest")
    if not root.handlers:
        setup_logging()
    return logging.getLogger(name)
