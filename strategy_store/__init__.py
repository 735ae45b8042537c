from .config import StrategyStoreConfig
from .exceptions import (
    DUPLICATE_NAME_MESSAGE,
    DuplicateNameError,
    NotFoundError,
    StoreUnavailableError,
    StrategyStoreError,
    ValidationError,
)
from .models import (
    CRON_TRIGGER_TYPE,
    PipelineStrategy,
    Trigger,
)
from .core import (
    BucketGateway,
    IdGenerator,
    TableGateway,
    create_bucket_gateway,
    create_table_gateway,
)
from .stores import (
    DynamoDBStrategyStore,
    S3StrategyStore,
    StrategyStore,
)
from .cache import CacheState, StrategyCache
from .dao import PipelineStrategyDAO
from .factory import create_pipeline_strategy_dao, create_strategy_store
from .handlers import (
    MoveCommand,
    StrategyReadApi,
    StrategyWriteApi,
    error_response,
)

__version__ = "1.0.0"
__all__ = [
    # Configuration
    "StrategyStoreConfig",

    # Exceptions
    "DUPLICATE_NAME_MESSAGE",
    "DuplicateNameError",
    "NotFoundError",
    "StoreUnavailableError",
    "StrategyStoreError",
    "ValidationError",

    # Models
    "CRON_TRIGGER_TYPE",
    "PipelineStrategy",
    "Trigger",

    # Gateways and ids
    "BucketGateway",
    "IdGenerator",
    "TableGateway",
    "create_bucket_gateway",
    "create_table_gateway",

    # Backing store adapters
    "DynamoDBStrategyStore",
    "S3StrategyStore",
    "StrategyStore",

    # Cache and DAO
    "CacheState",
    "StrategyCache",
    "PipelineStrategyDAO",
    "create_pipeline_strategy_dao",
    "create_strategy_store",

    # Handlers
    "MoveCommand",
    "StrategyReadApi",
    "StrategyWriteApi",
    "error_response",
]
