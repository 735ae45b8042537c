"""
Wiring of gateways, adapters, cache and DAO from configuration.
"""

import logging
from typing import Optional

from .cache import StrategyCache
from .config import StrategyStoreConfig
from .core import create_bucket_gateway, create_table_gateway
from .dao import PipelineStrategyDAO
from .stores import DynamoDBStrategyStore, S3StrategyStore, StrategyStore
from .stores.dynamodb import TABLE_NAME
from .utils import configure_logging

logger = logging.getLogger(__name__)


def create_strategy_store(config: StrategyStoreConfig, ensure_bucket: bool = True) -> StrategyStore:
    """
    Build the adapter selected by `config.storage_backend`.

    Args:
        config: Store configuration
        ensure_bucket: Create the S3 bucket if it is missing (s3 backend only)

    Returns:
        DynamoDBStrategyStore or S3StrategyStore
    """
    if config.storage_backend == 's3':
        gateway = create_bucket_gateway(config)
        if ensure_bucket:
            gateway.ensure_bucket()
        logger.info(f"Using S3 strategy store s3://{gateway.bucket_name}/{config.root_folder}")
        return S3StrategyStore(gateway, config.root_folder)

    gateway = create_table_gateway(config, TABLE_NAME)
    logger.info(f"Using DynamoDB strategy store table {gateway.table_name}")
    return DynamoDBStrategyStore(gateway)


def should_cache(config: StrategyStoreConfig, store: StrategyStore) -> bool:
    """Whether reads of `store` go through the snapshot cache.

    An explicit `cache_enabled` wins. Otherwise stores whose listing is slow
    or eventually consistent are cached and the others are read directly.
    """
    if config.cache_enabled is not None:
        return config.cache_enabled
    return not store.consistent_listing


def create_pipeline_strategy_dao(
    config: Optional[StrategyStoreConfig] = None,
    start_cache: bool = True,
    ensure_bucket: bool = True
) -> PipelineStrategyDAO:
    """
    Factory function to create a ready-to-use PipelineStrategyDAO.

    The snapshot cache is attached when `should_cache()` says so and, unless
    `start_cache` is False, loaded and its refresher thread started before
    the DAO is returned. Call `dao.close()` to stop the refresher.

    Args:
        config: Store configuration (defaults to environment-driven config)
        start_cache: Start the cache immediately
        ensure_bucket: Create the S3 bucket if it is missing

    Returns:
        Configured PipelineStrategyDAO
    """
    config = config or StrategyStoreConfig.from_env()
    configure_logging(config)

    store = create_strategy_store(config, ensure_bucket=ensure_bucket)

    cache = None
    if should_cache(config, store):
        cache = StrategyCache(store, config.refresh_interval_seconds, config.full_listing_interval_seconds)
        if start_cache:
            cache.start()

    return PipelineStrategyDAO(store, cache=cache)
