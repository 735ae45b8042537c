"""
Pipeline strategy handlers.

- StrategyReadApi: listing and lookups
- StrategyWriteApi: save (create-or-replace), move (rename), delete
"""

from .commands import MoveCommand, StrategyWriteApi, parse_strategy
from .queries import StrategyReadApi

__all__ = [
    "MoveCommand",
    "StrategyReadApi",
    "StrategyWriteApi",
    "parse_strategy",
]
