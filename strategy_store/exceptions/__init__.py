# Base exception class
from .base import StrategyStoreError

from .domain_exceptions import (
    DUPLICATE_NAME_MESSAGE,
    DuplicateNameError,
    NotFoundError,
    StoreUnavailableError,
    ValidationError,
)

__all__ = [
    # Base exception
    "StrategyStoreError",

    # Domain exceptions (alphabetically ordered)
    "DuplicateNameError",
    "NotFoundError",
    "StoreUnavailableError",
    "ValidationError",

    "DUPLICATE_NAME_MESSAGE",
]
