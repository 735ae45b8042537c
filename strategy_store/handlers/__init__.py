"""
Request-side entry points over the DAO, split into read and write APIs.
"""

from .pipeline_strategy import MoveCommand, StrategyReadApi, StrategyWriteApi, parse_strategy
from .responses import error_response

__all__ = [
    "MoveCommand",
    "StrategyReadApi",
    "StrategyWriteApi",
    "error_response",
    "parse_strategy",
]
