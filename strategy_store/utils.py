"""
Strategy Store Utilities

Small helpers shared across the package:
- Epoch-millisecond timestamps used for `updateTs` and the S3 change marker
- Package logging setup driven by StrategyStoreConfig
"""

import logging
import time
from typing import Optional

from .config import StrategyStoreConfig

PACKAGE_LOGGER = "strategy_store"


def current_time_millis() -> int:
    """Return the current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def configure_logging(config: Optional[StrategyStoreConfig] = None) -> logging.Logger:
    """Apply logging levels for the package and the AWS SDK.

    Debug logging for the package is switched on by
    `enable_debug_logging`; botocore and boto3 are kept at WARNING either way
    since their debug output includes request bodies.

    Returns:
        The package logger
    """
    config = config or StrategyStoreConfig()
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(logging.DEBUG if config.enable_debug_logging else logging.INFO)

    for noisy in ("botocore", "boto3", "urllib3"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    return package_logger
