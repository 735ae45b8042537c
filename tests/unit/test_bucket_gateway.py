"""
Tests for BucketGateway (core/bucket_gateway.py)

Object operations run against moto; error mapping is exercised with
hand-built ClientErrors.
"""

import boto3
import pytest
from unittest.mock import Mock, patch
from botocore.exceptions import ClientError

from strategy_store.config import StrategyStoreConfig
from strategy_store.core.bucket_gateway import BucketGateway, create_bucket_gateway, map_s3_error
from strategy_store.exceptions import StoreUnavailableError, ValidationError


def _client_error(code, operation="GetObject", message="boom"):
    return ClientError({'Error': {'Code': code, 'Message': message}}, operation)


@pytest.fixture
def gateway(store_config, strategies_bucket):
    return create_bucket_gateway(store_config)


class TestBucketGatewaySetup:
    """Test construction and lazy client creation."""

    def test_defaults_to_configured_bucket(self, store_config):
        gateway = BucketGateway(store_config)

        assert gateway.bucket_name == "front50"
        assert gateway._client is None

    def test_explicit_bucket(self, store_config):
        assert BucketGateway(store_config, "other").bucket_name == "other"

    def test_client_uses_endpoint_url(self):
        config = StrategyStoreConfig(
            region_name="us-east-1",
            environment="dev",
            s3_endpoint_url="http://localhost:4566"
        )
        with patch('boto3.Session') as mock_session_class:
            session = mock_session_class.return_value

            client = BucketGateway(config).client

            assert client == session.client.return_value
            args, kwargs = session.client.call_args
            assert args == ('s3',)
            assert kwargs['endpoint_url'] == "http://localhost:4566"

    def test_client_creation_failure(self, store_config):
        with patch('boto3.Session', side_effect=Exception("no credentials")):
            with pytest.raises(StoreUnavailableError, match="Failed to connect to S3"):
                BucketGateway(store_config).client


class TestBucketGatewayOperations:
    """Test object operations against moto."""

    def test_put_then_get(self, gateway):
        etag = gateway.put_object("test/a.json", b'{"a": 1}')

        body, stored_etag = gateway.get_object("test/a.json")

        assert body == b'{"a": 1}'
        assert etag == stored_etag
        assert not etag.startswith('"')

    def test_get_missing_object(self, gateway):
        assert gateway.get_object("test/missing.json") is None

    def test_delete_missing_object(self, gateway):
        gateway.delete_object("test/missing.json")

        assert gateway.get_object("test/missing.json") is None

    def test_delete_object(self, gateway):
        gateway.put_object("test/a.json", b'{}')

        gateway.delete_object("test/a.json")

        assert gateway.get_object("test/a.json") is None

    def test_list_objects_by_prefix(self, gateway):
        gateway.put_object("test/a.json", b'{}')
        gateway.put_object("test/b.json", b'{"b": true}')
        gateway.put_object("other/c.json", b'{}')

        entries = list(gateway.list_objects("test/"))

        assert sorted(entry['Key'] for entry in entries) == ["test/a.json", "test/b.json"]
        for entry in entries:
            assert not entry['ETag'].startswith('"')

    def test_list_objects_etag_matches_get(self, gateway):
        gateway.put_object("test/a.json", b'{"a": 1}')

        [entry] = list(gateway.list_objects("test/"))

        assert entry['ETag'] == gateway.get_object("test/a.json")[1]

    def test_list_missing_bucket(self, store_config, mocked_aws):
        gateway = BucketGateway(store_config, "does-not-exist")

        with pytest.raises(StoreUnavailableError, match="Bucket not found"):
            list(gateway.list_objects("test/"))


class TestEnsureBucket:
    """Test bucket creation on startup."""

    def test_creates_missing_bucket(self, store_config, mocked_aws):
        gateway = create_bucket_gateway(store_config)

        gateway.ensure_bucket()

        buckets = boto3.client('s3', region_name='us-east-1').list_buckets()['Buckets']
        assert [b['Name'] for b in buckets] == ["front50"]

    def test_existing_bucket_is_kept(self, gateway, strategies_bucket):
        gateway.put_object("test/a.json", b'{}')

        gateway.ensure_bucket()

        assert gateway.get_object("test/a.json") is not None

    def test_location_constraint_outside_us_east_1(self, store_config):
        config = store_config.model_copy(update={'region_name': 'eu-west-1'})
        gateway = BucketGateway(config)
        gateway._client = Mock()
        gateway._client.head_bucket.side_effect = _client_error('404', "HeadBucket")

        gateway.ensure_bucket()

        gateway._client.create_bucket.assert_called_once_with(
            Bucket="front50",
            CreateBucketConfiguration={'LocationConstraint': 'eu-west-1'}
        )

    def test_forbidden_bucket(self, store_config):
        gateway = BucketGateway(store_config)
        gateway._client = Mock()
        gateway._client.head_bucket.side_effect = _client_error('403', "HeadBucket")

        with pytest.raises(StoreUnavailableError, match="Authentication"):
            gateway.ensure_bucket()

        gateway._client.create_bucket.assert_not_called()


class TestS3ErrorMapping:
    """Test ClientError -> store exception mapping."""

    @pytest.mark.parametrize("code,fragment", [
        ('NoSuchBucket', "Bucket not found"),
        ('SlowDown', "Throttling"),
        ('InternalError', "Service unavailable"),
        ('503', "Service unavailable"),
        ('AccessDenied', "Authentication"),
        ('InvalidAccessKeyId', "Authentication"),
    ])
    def test_unavailable_codes(self, code, fragment):
        mapped = map_s3_error(_client_error(code), "GetObject", "front50", "test/a.json")

        assert isinstance(mapped, StoreUnavailableError)
        assert fragment in mapped.message
        assert mapped.context == {'bucket_name': 'front50', 'error_code': code, 'key': 'test/a.json'}

    def test_rejected_request(self):
        mapped = map_s3_error(_client_error('InvalidArgument'), "PutObject", "front50")

        assert isinstance(mapped, ValidationError)

    def test_unknown_code(self, caplog):
        mapped = map_s3_error(_client_error('Teapot'), "PutObject", "front50")

        assert isinstance(mapped, StoreUnavailableError)
        assert "Teapot" in caplog.text

    def test_get_object_maps_other_errors(self, store_config):
        gateway = BucketGateway(store_config)
        gateway._client = Mock()
        gateway._client.get_object.side_effect = _client_error('AccessDenied')

        with pytest.raises(StoreUnavailableError):
            gateway.get_object("test/a.json")
