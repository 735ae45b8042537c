import os
from typing import Optional

from botocore.config import Config
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

# Load environment variables from .env file if it exists
load_dotenv()

STORAGE_BACKENDS = ('dynamodb', 's3')


def _env_flag(name: str) -> Optional[bool]:
    value = os.getenv(name)
    if value is None or value == "":
        return None
    return value.lower() == "true"


class StrategyStoreConfig(BaseModel):
    """Configuration for the strategy store backends and read cache."""

    aws_access_key_id: Optional[str] = Field(
        default_factory=lambda: os.getenv("AWS_ACCESS_KEY_ID"),
        description="AWS access key ID"
    )

    aws_secret_access_key: Optional[str] = Field(
        default_factory=lambda: os.getenv("AWS_SECRET_ACCESS_KEY"),
        description="AWS secret access key"
    )

    region_name: str = Field(
        default_factory=lambda: os.getenv("AWS_REGION", "us-east-1"),
        description="AWS region name"
    )

    # Backend selection
    storage_backend: str = Field(
        default_factory=lambda: os.getenv("STRATEGY_STORE_BACKEND", "dynamodb"),
        description="Backing store for strategies ('dynamodb' or 's3')"
    )

    # DynamoDB specific settings
    dynamodb_endpoint_url: Optional[str] = Field(
        default_factory=lambda: os.getenv("DYNAMODB_ENDPOINT_URL"),
        description="DynamoDB endpoint URL (for local development)"
    )

    table_prefix: str = Field(
        default_factory=lambda: os.getenv("DYNAMODB_TABLE_PREFIX", ""),
        description="Prefix to add to all table names"
    )

    # S3 specific settings
    s3_endpoint_url: Optional[str] = Field(
        default_factory=lambda: os.getenv("S3_ENDPOINT_URL"),
        description="S3 endpoint URL (for local development)"
    )

    bucket_name: str = Field(
        default_factory=lambda: os.getenv("S3_BUCKET_NAME", "strategy-store"),
        description="Bucket holding strategy objects"
    )

    root_folder: str = Field(
        default_factory=lambda: os.getenv("S3_ROOT_FOLDER", "strategies"),
        description="Key prefix under which all strategy objects live"
    )

    # Read cache settings
    cache_enabled: Optional[bool] = Field(
        default_factory=lambda: _env_flag("STRATEGY_CACHE_ENABLED"),
        description="Serve reads from an in-memory snapshot (None: only for stores without consistent listing)"
    )

    refresh_interval_seconds: float = Field(
        default_factory=lambda: float(os.getenv("STRATEGY_CACHE_REFRESH_SECONDS", "5")),
        description="Seconds between background cache refreshes (0 disables the refresher thread)"
    )

    full_listing_interval_seconds: float = Field(
        default_factory=lambda: float(os.getenv("STRATEGY_CACHE_FULL_LISTING_SECONDS", "60")),
        description="Longest time an unchanged change marker may replace a full listing"
    )

    # Connection settings
    max_pool_connections: int = Field(
        default=50,
        description="Maximum number of connections in the connection pool"
    )

    retries: int = Field(
        default=3,
        description="Number of retry attempts for failed requests"
    )

    timeout_seconds: float = Field(
        default=30.0,
        description="Request timeout in seconds"
    )

    # Environment settings
    environment: str = Field(
        default_factory=lambda: os.getenv("ENVIRONMENT", "dev"),
        description="Current environment (dev, test, staging, prod)"
    )

    # Logging settings
    enable_debug_logging: bool = Field(
        default_factory=lambda: os.getenv("STRATEGY_STORE_DEBUG_LOGGING", "false").lower() == "true",
        description="Enable debug logging for store operations"
    )

    @field_validator('region_name')
    @classmethod
    def validate_region(cls, v):
        """Validate AWS region name."""
        if not v:
            raise ValueError("AWS region name is required")
        return v

    @field_validator('environment')
    @classmethod
    def validate_environment(cls, v):
        """Validate environment value."""
        valid_environments = ['dev', 'test', 'staging', 'prod']
        if v not in valid_environments:
            raise ValueError(f"Environment must be one of: {valid_environments}")
        return v

    @field_validator('storage_backend')
    @classmethod
    def validate_storage_backend(cls, v):
        """Validate backend name."""
        v = v.lower()
        if v not in STORAGE_BACKENDS:
            raise ValueError(f"Storage backend must be one of: {list(STORAGE_BACKENDS)}")
        return v

    @field_validator('refresh_interval_seconds', 'full_listing_interval_seconds')
    @classmethod
    def validate_refresh_interval(cls, v):
        if v < 0:
            raise ValueError("Cache intervals cannot be negative")
        return v

    def get_table_name(self, base_name: str) -> str:
        """Get the full table name with prefix and environment.

        Args:
            base_name: Base table name

        Returns:
            Full table name with prefix and environment
        """
        parts = []

        if self.table_prefix:
            parts.append(self.table_prefix)

        if self.environment != "prod":
            parts.append(self.environment)

        parts.append(base_name)

        return "_".join(parts)

    def boto_config(self) -> Config:
        """Build the botocore client configuration shared by both backends."""
        return Config(
            retries={'max_attempts': self.retries},
            max_pool_connections=self.max_pool_connections,
            read_timeout=self.timeout_seconds,
            connect_timeout=self.timeout_seconds
        )

    @classmethod
    def from_env(cls) -> 'StrategyStoreConfig':
        """Create configuration from environment variables.

        Returns:
            StrategyStoreConfig instance
        """
        return cls()

    @classmethod
    def for_local_development(cls, storage_backend: str = "dynamodb") -> 'StrategyStoreConfig':
        """Create configuration for LocalStack development.

        Args:
            storage_backend: Backend to point at LocalStack

        Returns:
            StrategyStoreConfig instance configured for local development
        """
        return cls(
            aws_access_key_id="local",
            aws_secret_access_key="local",
            region_name="us-east-1",
            storage_backend=storage_backend,
            dynamodb_endpoint_url="http://localhost:4566",
            s3_endpoint_url="http://localhost:4566",
            environment="dev",
            enable_debug_logging=True
        )

    model_config = ConfigDict(
        validate_assignment=True,
        validate_default=True
    )
