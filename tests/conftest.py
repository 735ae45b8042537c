"""
Test configuration and fixtures for the strategy store.

Provides moto-mocked DynamoDB tables and S3 buckets, both adapters, and a
parametrized `dao` fixture that runs every DAO contract test against:

- DynamoDB without a cache (reads go straight to consistent scans)
- DynamoDB behind the snapshot cache
- S3 behind the snapshot cache
"""

import boto3
import pytest
from moto import mock_aws

from strategy_store import (
    DynamoDBStrategyStore,
    PipelineStrategyDAO,
    S3StrategyStore,
    StrategyCache,
    StrategyStoreConfig,
    create_bucket_gateway,
    create_table_gateway,
)
from strategy_store.stores.dynamodb import TABLE_NAME


@pytest.fixture(autouse=True)
def aws_credentials(monkeypatch):
    """Fake credentials so nothing can reach a real AWS account."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")


@pytest.fixture
def store_config():
    """Store configuration for mocked testing."""
    return StrategyStoreConfig(
        aws_access_key_id="test_key",
        aws_secret_access_key="test_secret",
        region_name="us-east-1",
        dynamodb_endpoint_url=None,  # Use default AWS endpoint for moto
        s3_endpoint_url=None,
        environment="test",
        table_prefix="test",
        bucket_name="front50",
        root_folder="test",
        refresh_interval_seconds=0,
    )


@pytest.fixture
def mocked_aws():
    """Activate moto for DynamoDB and S3."""
    with mock_aws():
        yield


@pytest.fixture
def strategies_table(mocked_aws, store_config):
    """Create the pipeline_strategies table for testing."""
    dynamodb = boto3.resource('dynamodb', region_name='us-east-1')
    table = dynamodb.create_table(
        TableName=store_config.get_table_name(TABLE_NAME),
        KeySchema=[
            {'AttributeName': 'id', 'KeyType': 'HASH'}
        ],
        AttributeDefinitions=[
            {'AttributeName': 'id', 'AttributeType': 'S'}
        ],
        BillingMode='PAY_PER_REQUEST'
    )
    return table


@pytest.fixture
def strategies_bucket(mocked_aws, store_config):
    """Create the strategies bucket for testing."""
    s3 = boto3.client('s3', region_name='us-east-1')
    s3.create_bucket(Bucket=store_config.bucket_name)
    return s3


@pytest.fixture
def dynamodb_store(store_config, strategies_table):
    """Column store adapter over the mocked table."""
    return DynamoDBStrategyStore(create_table_gateway(store_config, TABLE_NAME))


@pytest.fixture
def s3_store(store_config, strategies_bucket):
    """Object store adapter over the mocked bucket."""
    return S3StrategyStore(create_bucket_gateway(store_config), store_config.root_folder)


@pytest.fixture(params=["dynamodb", "dynamodb-cached", "s3-cached"])
def dao(request):
    """PipelineStrategyDAO over each backend configuration."""
    backend, _, cached = request.param.partition('-')
    store = request.getfixturevalue(f"{backend}_store")

    cache = None
    if cached:
        cache = StrategyCache(store, refresh_interval_seconds=0)
        cache.start()

    strategy_dao = PipelineStrategyDAO(store, cache=cache)
    yield strategy_dao
    strategy_dao.close()
