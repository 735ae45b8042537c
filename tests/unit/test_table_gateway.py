"""
Tests for TableGateway (core/table_gateway.py)

These tests verify the thin DynamoDB wrapper used by the column store adapter:
lazy resource creation, error mapping and paginated scans.
"""

import pytest
from unittest.mock import Mock, patch
from botocore.exceptions import ClientError, EndpointConnectionError

from strategy_store.config import StrategyStoreConfig
from strategy_store.core.table_gateway import TableGateway, create_table_gateway, map_dynamodb_error
from strategy_store.exceptions import StoreUnavailableError, ValidationError


@pytest.fixture
def mock_config():
    """Mock configuration for testing."""
    return StrategyStoreConfig(
        region_name="us-east-1",
        table_prefix="test",
        environment="dev",
        aws_access_key_id="fake_key",
        aws_secret_access_key="fake_secret"
    )


@pytest.fixture
def mock_table():
    """Mock DynamoDB table resource."""
    table = Mock()
    table.get_item.return_value = {}
    table.scan.return_value = {'Items': []}
    table.put_item.return_value = None
    table.delete_item.return_value = {}
    return table


@pytest.fixture
def gateway(mock_config, mock_table):
    """Gateway with its table handle replaced by a mock."""
    gateway = TableGateway(mock_config, "test_dev_pipeline_strategies")
    gateway._table = mock_table
    return gateway


def _client_error(code, operation="PutItem", message="boom"):
    return ClientError({'Error': {'Code': code, 'Message': message}}, operation)


class TestTableGatewaySetup:
    """Test TableGateway construction and lazy resources."""

    def test_initialization(self, mock_config):
        gateway = TableGateway(mock_config, "test_table")

        assert gateway.config == mock_config
        assert gateway.table_name == "test_table"
        assert gateway._dynamodb is None
        assert gateway._table is None

    def test_dynamodb_property_lazy_initialization(self, mock_config):
        """The resource is created on first access only."""
        with patch('boto3.Session') as mock_session_class:
            mock_session = Mock()
            mock_dynamodb = Mock()
            mock_session_class.return_value = mock_session
            mock_session.resource.return_value = mock_dynamodb

            gateway = TableGateway(mock_config, "test_table")

            assert gateway.dynamodb == mock_dynamodb
            assert gateway.dynamodb == mock_dynamodb
            mock_session_class.assert_called_once()
            mock_session.resource.assert_called_once()

    def test_dynamodb_uses_endpoint_url(self):
        """A configured endpoint is passed to boto3."""
        config = StrategyStoreConfig(
            region_name="us-east-1",
            environment="dev",
            dynamodb_endpoint_url="http://localhost:4566"
        )
        with patch('boto3.Session') as mock_session_class:
            session = mock_session_class.return_value

            TableGateway(config, "t").dynamodb

            _, kwargs = session.resource.call_args
            assert kwargs['endpoint_url'] == "http://localhost:4566"
            assert kwargs['region_name'] == "us-east-1"

    def test_dynamodb_creation_failure(self, mock_config):
        """Failures while building the resource surface as StoreUnavailableError."""
        with patch('boto3.Session', side_effect=Exception("no credentials")):
            gateway = TableGateway(mock_config, "test_table")

            with pytest.raises(StoreUnavailableError, match="Failed to connect to DynamoDB"):
                gateway.dynamodb

    def test_table_property(self, mock_config):
        with patch('boto3.Session') as mock_session_class:
            dynamodb = mock_session_class.return_value.resource.return_value
            gateway = TableGateway(mock_config, "test_table")

            assert gateway.table == dynamodb.Table.return_value
            dynamodb.Table.assert_called_once_with("test_table")

    def test_create_table_gateway_applies_prefix(self, mock_config):
        gateway = create_table_gateway(mock_config, "pipeline_strategies")

        assert gateway.table_name == "test_dev_pipeline_strategies"


class TestTableGatewayOperations:
    """Test item operations against a mocked table."""

    def test_get_item(self, gateway, mock_table):
        mock_table.get_item.return_value = {'Item': {'id': 'abc', 'name': 'p'}}

        assert gateway.get_item({'id': 'abc'}) == {'id': 'abc', 'name': 'p'}
        mock_table.get_item.assert_called_once_with(Key={'id': 'abc'}, ConsistentRead=True)

    def test_get_item_missing(self, gateway, mock_table):
        mock_table.get_item.return_value = {}

        assert gateway.get_item({'id': 'abc'}) is None

    def test_put_item(self, gateway, mock_table):
        gateway.put_item({'id': 'abc'})

        mock_table.put_item.assert_called_once_with(Item={'id': 'abc'})

    def test_put_item_with_condition(self, gateway, mock_table):
        gateway.put_item({'id': 'abc'}, condition_expression="attribute_not_exists(id)")

        mock_table.put_item.assert_called_once_with(
            Item={'id': 'abc'}, ConditionExpression="attribute_not_exists(id)"
        )

    def test_delete_item(self, gateway, mock_table):
        gateway.delete_item({'id': 'abc'})

        mock_table.delete_item.assert_called_once_with(Key={'id': 'abc'})

    def test_put_item_throttled(self, gateway, mock_table):
        mock_table.put_item.side_effect = _client_error('ProvisionedThroughputExceededException')

        with pytest.raises(StoreUnavailableError, match="Throttling") as exc_info:
            gateway.put_item({'id': 'abc'})

        assert exc_info.value.context['resource_id'] == 'abc'
        assert isinstance(exc_info.value.original_error, ClientError)

    def test_get_item_connection_failure(self, gateway, mock_table):
        mock_table.get_item.side_effect = EndpointConnectionError(endpoint_url="http://localhost:4566")

        with pytest.raises(StoreUnavailableError, match="GetItem"):
            gateway.get_item({'id': 'abc'})

    def test_delete_item_missing_table(self, gateway, mock_table):
        mock_table.delete_item.side_effect = _client_error('ResourceNotFoundException', "DeleteItem")

        with pytest.raises(StoreUnavailableError, match="Table not found"):
            gateway.delete_item({'id': 'abc'})


class TestScanAll:
    """Test paginated scans."""

    def test_single_page(self, gateway, mock_table):
        mock_table.scan.return_value = {'Items': [{'id': 'a'}, {'id': 'b'}]}

        assert list(gateway.scan_all()) == [{'id': 'a'}, {'id': 'b'}]
        mock_table.scan.assert_called_once_with(ConsistentRead=True)

    def test_follows_last_evaluated_key(self, gateway, mock_table):
        mock_table.scan.side_effect = [
            {'Items': [{'id': 'a'}], 'LastEvaluatedKey': {'id': 'a'}},
            {'Items': [{'id': 'b'}], 'LastEvaluatedKey': {'id': 'b'}},
            {'Items': [{'id': 'c'}]},
        ]

        assert [item['id'] for item in gateway.scan_all()] == ['a', 'b', 'c']
        assert mock_table.scan.call_count == 3
        assert mock_table.scan.call_args_list[1].kwargs['ExclusiveStartKey'] == {'id': 'a'}
        assert mock_table.scan.call_args_list[2].kwargs['ExclusiveStartKey'] == {'id': 'b'}

    def test_extra_scan_arguments(self, gateway, mock_table):
        list(gateway.scan_all(ProjectionExpression="id", ConsistentRead=False))

        mock_table.scan.assert_called_once_with(ProjectionExpression="id", ConsistentRead=False)

    def test_scan_failure(self, gateway, mock_table):
        mock_table.scan.side_effect = _client_error('InternalServerError', "Scan")

        with pytest.raises(StoreUnavailableError, match="Service unavailable"):
            list(gateway.scan_all())


class TestDynamoDBErrorMapping:
    """Test ClientError -> store exception mapping."""

    @pytest.mark.parametrize("code", [
        'ProvisionedThroughputExceededException', 'RequestLimitExceeded',
        'ThrottlingException', 'InternalServerError', 'ServiceUnavailable',
        'UnrecognizedClientException', 'AccessDeniedException', 'ResourceNotFoundException',
    ])
    def test_unavailable_codes(self, code):
        mapped = map_dynamodb_error(_client_error(code), "PutItem", "table", "abc")

        assert isinstance(mapped, StoreUnavailableError)
        assert mapped.context == {'table_name': 'table', 'error_code': code, 'resource_id': 'abc'}

    def test_validation_exception(self):
        mapped = map_dynamodb_error(_client_error('ValidationException', message="bad key"), "GetItem", "table")

        assert isinstance(mapped, ValidationError)
        assert "bad key" in mapped.message
        assert "GetItem on table" in mapped.message

    def test_unknown_code_is_logged(self, caplog):
        mapped = map_dynamodb_error(_client_error('SomethingNew'), "PutItem", "table")

        assert isinstance(mapped, StoreUnavailableError)
        assert "SomethingNew" in caplog.text

    def test_missing_error_block(self):
        error = ClientError({}, "PutItem")

        mapped = map_dynamodb_error(error, "PutItem", "table")

        assert isinstance(mapped, StoreUnavailableError)
        assert mapped.context['error_code'] == 'Unknown'
