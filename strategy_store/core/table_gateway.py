"""
Thin DynamoDB Table Gateway

Lightweight wrapper around boto3 DynamoDB operations used by the column store
adapter. The gateway focuses on:

- Creating boto3 Table handles lazily from configuration
- Mapping botocore ClientErrors to store exceptions
- Paginating full-table scans

It knows nothing about strategies; the adapter converts items to models.
"""

import logging
from typing import Any, Dict, Iterator, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..config import StrategyStoreConfig
from ..exceptions import StoreUnavailableError, ValidationError

logger = logging.getLogger(__name__)

THROTTLING_CODES = frozenset([
    'ProvisionedThroughputExceededException', 'RequestLimitExceeded',
    'ThrottlingException', 'TooManyRequestsException',
])

SERVICE_CODES = frozenset([
    'InternalServerError', 'ServiceUnavailable', 'ServiceUnavailableException',
    'InternalFailure', 'RequestTimeoutException',
])

CREDENTIAL_CODES = frozenset([
    'UnrecognizedClientException', 'AccessDeniedException',
    'ExpiredTokenException', 'InvalidSignatureException',
    'IncompleteSignatureException',
])


def map_dynamodb_error(
    error: ClientError,
    operation: str,
    table_name: str,
    resource_id: Optional[str] = None
) -> Exception:
    """Map DynamoDB ClientError to store exceptions.

    Args:
        error: The boto3 ClientError
        operation: The operation that failed (e.g., "GetItem", "PutItem")
        table_name: The DynamoDB table name
        resource_id: Optional resource identifier for context

    Returns:
        ValidationError for rejected requests, StoreUnavailableError otherwise
    """
    error_code = error.response.get('Error', {}).get('Code', 'Unknown')
    error_message = error.response.get('Error', {}).get('Message', str(error))

    context = f"{operation} on {table_name}"
    if resource_id:
        context += f" (resource: {resource_id})"

    full_message = f"{context}: {error_message}"
    error_context = {'table_name': table_name, 'error_code': error_code}
    if resource_id:
        error_context['resource_id'] = resource_id

    if error_code == 'ValidationException':
        return ValidationError(f"Validation failed - {full_message}", original_error=error)

    elif error_code == 'ResourceNotFoundException':
        return StoreUnavailableError(f"Table not found - {full_message}", error, error_context)

    elif error_code in THROTTLING_CODES:
        return StoreUnavailableError(f"Throttling - {full_message}", error, error_context)

    elif error_code in SERVICE_CODES:
        return StoreUnavailableError(f"Service unavailable - {full_message}", error, error_context)

    elif error_code in CREDENTIAL_CODES:
        return StoreUnavailableError(f"Authentication/authorization failed - {full_message}", error, error_context)

    logger.warning(f"Unknown DynamoDB error code '{error_code}' mapped to StoreUnavailableError")
    return StoreUnavailableError(f"DynamoDB operation failed - {full_message}", error, error_context)


class TableGateway:
    """
    Thin gateway for DynamoDB table operations.

    Every call goes to the table directly; item-level strong consistency is
    requested on reads and scans because the column store adapter promises
    consistent listing.
    """

    def __init__(self, config: StrategyStoreConfig, table_name: str):
        """Initialize table gateway.

        Args:
            config: Store configuration
            table_name: Name of the DynamoDB table
        """
        self.config = config
        self.table_name = table_name
        self._dynamodb = None
        self._table = None

    @property
    def dynamodb(self):
        """Lazy initialization of DynamoDB resource."""
        if self._dynamodb is None:
            try:
                session = boto3.Session(
                    aws_access_key_id=self.config.aws_access_key_id,
                    aws_secret_access_key=self.config.aws_secret_access_key,
                    region_name=self.config.region_name
                )

                dynamodb_config = {
                    'region_name': self.config.region_name,
                    'config': self.config.boto_config(),
                }

                if self.config.dynamodb_endpoint_url:
                    dynamodb_config['endpoint_url'] = self.config.dynamodb_endpoint_url

                self._dynamodb = session.resource('dynamodb', **dynamodb_config)
            except Exception as e:
                logger.error(f"Failed to create DynamoDB resource: {e}")
                raise StoreUnavailableError(f"Failed to connect to DynamoDB: {e}", e) from e
        return self._dynamodb

    @property
    def table(self):
        """Get boto3 DynamoDB Table resource."""
        if self._table is None:
            try:
                self._table = self.dynamodb.Table(self.table_name)
            except Exception as e:
                logger.error(f"Failed to access table '{self.table_name}': {e}")
                raise StoreUnavailableError(f"Failed to access table '{self.table_name}': {e}", e) from e
        return self._table

    def get_item(self, key: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Read a single item with a strongly consistent GetItem.

        Returns:
            The raw item, or None if no item has that key
        """
        try:
            response = self.table.get_item(Key=key, ConsistentRead=True)
        except ClientError as e:
            raise map_dynamodb_error(e, "GetItem", self.table_name, _key_id(key)) from e
        except BotoCoreError as e:
            raise StoreUnavailableError(f"GetItem on {self.table_name} failed: {e}", e) from e
        return response.get('Item')

    def put_item(self, item: Dict[str, Any], condition_expression=None) -> None:
        """
        Put item into DynamoDB table, overwriting any previous version.

        Args:
            item: Item to store
            condition_expression: Optional condition for put operation
        """
        try:
            put_kwargs = {'Item': item}
            if condition_expression is not None:
                put_kwargs['ConditionExpression'] = condition_expression

            self.table.put_item(**put_kwargs)
            logger.debug(f"Put item in {self.table_name}: {_key_id(item)}")
        except ClientError as e:
            raise map_dynamodb_error(e, "PutItem", self.table_name, _key_id(item)) from e
        except BotoCoreError as e:
            raise StoreUnavailableError(f"PutItem on {self.table_name} failed: {e}", e) from e

    def delete_item(self, key: Dict[str, Any]) -> None:
        """
        Delete item from DynamoDB table.

        DeleteItem on a missing key succeeds, so the operation is idempotent.
        """
        try:
            self.table.delete_item(Key=key)
            logger.debug(f"Deleted item from {self.table_name}: {key}")
        except ClientError as e:
            raise map_dynamodb_error(e, "DeleteItem", self.table_name, _key_id(key)) from e
        except BotoCoreError as e:
            raise StoreUnavailableError(f"DeleteItem on {self.table_name} failed: {e}", e) from e

    def scan_all(self, **kwargs) -> Iterator[Dict[str, Any]]:
        """
        Yield every item of the table using a consistent, paginated Scan.

        Args:
            **kwargs: Extra boto3 scan parameters (e.g. ProjectionExpression)

        Yields:
            Raw DynamoDB items
        """
        scan_kwargs = dict(kwargs)
        scan_kwargs.setdefault('ConsistentRead', True)
        pages = 0
        while True:
            try:
                response = self.table.scan(**scan_kwargs)
            except ClientError as e:
                raise map_dynamodb_error(e, "Scan", self.table_name) from e
            except BotoCoreError as e:
                raise StoreUnavailableError(f"Scan on {self.table_name} failed: {e}", e) from e

            pages += 1
            for item in response.get('Items', []):
                yield item

            last_key = response.get('LastEvaluatedKey')
            if not last_key:
                break
            scan_kwargs['ExclusiveStartKey'] = last_key
        logger.debug(f"Scanned {self.table_name} in {pages} page(s)")


def _key_id(item: Dict[str, Any]) -> Optional[str]:
    return item.get('id') if item else None


def create_table_gateway(config: StrategyStoreConfig, table_name: str) -> TableGateway:
    """
    Factory function to create a TableGateway instance.

    Args:
        config: Store configuration
        table_name: Base table name (prefixed through config.get_table_name())

    Returns:
        Configured TableGateway instance
    """
    full_table_name = config.get_table_name(table_name)
    return TableGateway(config, full_table_name)
