"""
Thin S3 Bucket Gateway

Lightweight wrapper around the boto3 S3 client used by the object store
adapter. Mirrors TableGateway:

- Lazy client creation from configuration
- ClientError -> store exception mapping
- Paginated listing through the list_objects_v2 paginator

Missing objects are reported as None rather than raised, since both the
adapter's get() and the listing refresh treat absence as a normal outcome.
"""

import logging
from typing import Any, Dict, Iterator, Optional, Tuple

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..config import StrategyStoreConfig
from ..exceptions import StoreUnavailableError, ValidationError

logger = logging.getLogger(__name__)

MISSING_OBJECT_CODES = frozenset(['NoSuchKey', '404', 'NotFound'])

THROTTLING_CODES = frozenset(['SlowDown', 'Throttling', 'ThrottlingException', 'RequestLimitExceeded'])

SERVICE_CODES = frozenset(['InternalError', 'ServiceUnavailable', 'RequestTimeout', '503', '500'])

CREDENTIAL_CODES = frozenset([
    'AccessDenied', 'InvalidAccessKeyId', 'SignatureDoesNotMatch',
    'ExpiredToken', 'TokenRefreshRequired', '403',
])


def map_s3_error(
    error: ClientError,
    operation: str,
    bucket_name: str,
    key: Optional[str] = None
) -> Exception:
    """Map S3 ClientError to store exceptions.

    Args:
        error: The boto3 ClientError
        operation: The operation that failed (e.g., "GetObject", "PutObject")
        bucket_name: The S3 bucket name
        key: Optional object key for context

    Returns:
        ValidationError for rejected requests, StoreUnavailableError otherwise
    """
    error_code = str(error.response.get('Error', {}).get('Code', 'Unknown'))
    error_message = error.response.get('Error', {}).get('Message', str(error))

    context = f"{operation} on {bucket_name}"
    if key:
        context += f" (key: {key})"

    full_message = f"{context}: {error_message}"
    error_context = {'bucket_name': bucket_name, 'error_code': error_code}
    if key:
        error_context['key'] = key

    if error_code == 'NoSuchBucket':
        return StoreUnavailableError(f"Bucket not found - {full_message}", error, error_context)

    elif error_code in ('InvalidArgument', 'InvalidRequest', 'MalformedXML', 'KeyTooLongError'):
        return ValidationError(f"Request rejected - {full_message}", original_error=error)

    elif error_code in THROTTLING_CODES:
        return StoreUnavailableError(f"Throttling - {full_message}", error, error_context)

    elif error_code in SERVICE_CODES:
        return StoreUnavailableError(f"Service unavailable - {full_message}", error, error_context)

    elif error_code in CREDENTIAL_CODES:
        return StoreUnavailableError(f"Authentication/authorization failed - {full_message}", error, error_context)

    logger.warning(f"Unknown S3 error code '{error_code}' mapped to StoreUnavailableError")
    return StoreUnavailableError(f"S3 operation failed - {full_message}", error, error_context)


def _normalize_etag(etag: Optional[str]) -> Optional[str]:
    return etag.strip('"') if etag else etag


class BucketGateway:
    """Thin gateway for S3 object operations on a single bucket."""

    def __init__(self, config: StrategyStoreConfig, bucket_name: Optional[str] = None):
        """Initialize bucket gateway.

        Args:
            config: Store configuration
            bucket_name: Bucket to operate on (defaults to config.bucket_name)
        """
        self.config = config
        self.bucket_name = bucket_name or config.bucket_name
        self._client = None

    @property
    def client(self):
        """Lazy initialization of the S3 client."""
        if self._client is None:
            try:
                session = boto3.Session(
                    aws_access_key_id=self.config.aws_access_key_id,
                    aws_secret_access_key=self.config.aws_secret_access_key,
                    region_name=self.config.region_name
                )

                s3_config = {
                    'region_name': self.config.region_name,
                    'config': self.config.boto_config(),
                }

                if self.config.s3_endpoint_url:
                    s3_config['endpoint_url'] = self.config.s3_endpoint_url

                self._client = session.client('s3', **s3_config)
            except Exception as e:
                logger.error(f"Failed to create S3 client: {e}")
                raise StoreUnavailableError(f"Failed to connect to S3: {e}", e) from e
        return self._client

    def ensure_bucket(self) -> None:
        """Create the bucket if it does not exist yet."""
        try:
            self.client.head_bucket(Bucket=self.bucket_name)
            return
        except ClientError as e:
            error_code = str(e.response.get('Error', {}).get('Code', ''))
            if error_code not in ('404', 'NoSuchBucket', 'NotFound'):
                raise map_s3_error(e, "HeadBucket", self.bucket_name) from e
        except BotoCoreError as e:
            raise StoreUnavailableError(f"HeadBucket on {self.bucket_name} failed: {e}", e) from e

        create_kwargs: Dict[str, Any] = {'Bucket': self.bucket_name}
        if self.config.region_name != 'us-east-1':
            create_kwargs['CreateBucketConfiguration'] = {'LocationConstraint': self.config.region_name}
        try:
            self.client.create_bucket(**create_kwargs)
            logger.info(f"Created bucket {self.bucket_name}")
        except ClientError as e:
            raise map_s3_error(e, "CreateBucket", self.bucket_name) from e
        except BotoCoreError as e:
            raise StoreUnavailableError(f"CreateBucket on {self.bucket_name} failed: {e}", e) from e

    def get_object(self, key: str) -> Optional[Tuple[bytes, Optional[str]]]:
        """
        Download an object.

        Returns:
            (body, etag) tuple, or None if no object has that key
        """
        try:
            response = self.client.get_object(Bucket=self.bucket_name, Key=key)
            body = response['Body'].read()
        except ClientError as e:
            error_code = str(e.response.get('Error', {}).get('Code', ''))
            if error_code in MISSING_OBJECT_CODES:
                logger.debug(f"Object {key} does not exist in bucket {self.bucket_name}")
                return None
            raise map_s3_error(e, "GetObject", self.bucket_name, key) from e
        except BotoCoreError as e:
            raise StoreUnavailableError(f"GetObject on {self.bucket_name} failed: {e}", e) from e
        return body, _normalize_etag(response.get('ETag'))

    def put_object(self, key: str, body: bytes, content_type: str = 'application/json') -> Optional[str]:
        """
        Upload an object, replacing any previous version.

        Returns:
            The ETag of the stored object
        """
        try:
            response = self.client.put_object(
                Bucket=self.bucket_name, Key=key, Body=body, ContentType=content_type
            )
            logger.debug(f"Put object {key} in bucket {self.bucket_name}")
        except ClientError as e:
            raise map_s3_error(e, "PutObject", self.bucket_name, key) from e
        except BotoCoreError as e:
            raise StoreUnavailableError(f"PutObject on {self.bucket_name} failed: {e}", e) from e
        return _normalize_etag(response.get('ETag'))

    def delete_object(self, key: str) -> None:
        """Delete an object; deleting a missing key is not an error in S3."""
        try:
            self.client.delete_object(Bucket=self.bucket_name, Key=key)
            logger.debug(f"Deleted object {key} from bucket {self.bucket_name}")
        except ClientError as e:
            raise map_s3_error(e, "DeleteObject", self.bucket_name, key) from e
        except BotoCoreError as e:
            raise StoreUnavailableError(f"DeleteObject on {self.bucket_name} failed: {e}", e) from e

    def list_objects(self, prefix: str = "") -> Iterator[Dict[str, Any]]:
        """
        Yield listing entries (Key, ETag, LastModified, Size) under a prefix.

        ETags are returned without surrounding quotes.
        """
        paginator = self.client.get_paginator('list_objects_v2')
        try:
            for page in paginator.paginate(Bucket=self.bucket_name, Prefix=prefix, PaginationConfig={'PageSize': 1000}):
                for obj in page.get('Contents', []):
                    entry = dict(obj)
                    entry['ETag'] = _normalize_etag(obj.get('ETag'))
                    yield entry
        except ClientError as e:
            raise map_s3_error(e, "ListObjectsV2", self.bucket_name, prefix) from e
        except BotoCoreError as e:
            raise StoreUnavailableError(f"ListObjectsV2 on {self.bucket_name} failed: {e}", e) from e


def create_bucket_gateway(config: StrategyStoreConfig) -> BucketGateway:
    """
    Factory function to create a BucketGateway for config.bucket_name.
    """
    return BucketGateway(config, config.bucket_name)
