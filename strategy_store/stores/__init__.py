"""
Backing store adapters.

Both variants implement StrategyStore so the DAO never branches on backend:
- DynamoDBStrategyStore: column store, consistent listing
- S3StrategyStore: object store, enumerate-and-download listing
"""

from .base import StrategyStore
from .dynamodb import DynamoDBStrategyStore
from .s3 import S3StrategyStore

__all__ = [
    "StrategyStore",
    "DynamoDBStrategyStore",
    "S3StrategyStore",
]
