"""
Column store adapter backed by a DynamoDB table.

Table layout: one item per strategy, hash key `id`, every other payload key
stored as an attribute. Listing is a consistent, paginated Scan, which is why
this adapter needs no read cache in front of it.
"""

import logging
from typing import List

from ..core import TableGateway
from ..exceptions import NotFoundError, ValidationError
from ..models import PipelineStrategy
from .base import StrategyStore

logger = logging.getLogger(__name__)

TABLE_NAME = "pipeline_strategies"
PARTITION_KEY = "id"


class DynamoDBStrategyStore(StrategyStore):
    """Strategy adapter over a TableGateway."""

    consistent_listing = True

    def __init__(self, gateway: TableGateway):
        """Initialize the adapter.

        Args:
            gateway: Gateway for the strategies table
        """
        self.gateway = gateway

    def put(self, strategy: PipelineStrategy) -> None:
        strategy_id = self._require_id(strategy)
        self.gateway.put_item(strategy.to_dynamodb_item())
        logger.debug(f"Stored strategy {strategy_id} in {self.gateway.table_name}")

    def get(self, strategy_id: str) -> PipelineStrategy:
        item = self.gateway.get_item({PARTITION_KEY: strategy_id})
        if item is None:
            raise NotFoundError(f"No strategy found with id {strategy_id}", strategy_id)
        return PipelineStrategy.from_dynamodb_item(item)

    def delete(self, strategy_id: str) -> None:
        self.gateway.delete_item({PARTITION_KEY: strategy_id})
        logger.debug(f"Deleted strategy {strategy_id} from {self.gateway.table_name}")

    def list_all(self) -> List[PipelineStrategy]:
        """
        Scan the whole table.

        Items that no longer parse are logged and skipped so one bad item
        cannot hide every other strategy.
        """
        strategies = []
        for item in self.gateway.scan_all():
            try:
                strategies.append(PipelineStrategy.from_dynamodb_item(item))
            except ValidationError as e:
                logger.warning(f"Skipping unreadable item {item.get(PARTITION_KEY)} in {self.gateway.table_name}: {e}")
        logger.debug(f"Listed {len(strategies)} strategies from {self.gateway.table_name}")
        return strategies
