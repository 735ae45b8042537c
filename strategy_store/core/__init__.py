"""
Core infrastructure components for backend access.

- TableGateway: Thin wrapper over boto3 DynamoDB operations
- BucketGateway: Thin wrapper over boto3 S3 operations
- IdGenerator: Unique ids for strategies and cron triggers
"""

from .bucket_gateway import BucketGateway, create_bucket_gateway, map_s3_error
from .ids import IdGenerator
from .table_gateway import TableGateway, create_table_gateway, map_dynamodb_error

__all__ = [
    "BucketGateway",
    "IdGenerator",
    "TableGateway",
    "create_bucket_gateway",
    "create_table_gateway",
    "map_dynamodb_error",
    "map_s3_error",
]
