# Base mixins and utilities
from .base import StorageMixin

# Core domain models
from .domain_models import (
    CRON_TRIGGER_TYPE,
    PipelineStrategy,
    Trigger,
)

__all__ = [
    # Base mixins and utilities
    "StorageMixin",

    # Domain models
    "PipelineStrategy",
    "Trigger",
    "CRON_TRIGGER_TYPE",
]
