"""
Domain-Specific Exceptions for the Strategy Store

All exceptions extend StrategyStoreError and fall into three groups:
1. Data Validation Errors
2. Lookup and Uniqueness Errors
3. Backend Availability Errors
"""

from typing import Any, Dict, Optional

from .base import StrategyStoreError

DUPLICATE_NAME_MESSAGE = "A strategy with that name already exists in that application"


# =============================================================================
# Data Validation Errors
# =============================================================================

class ValidationError(StrategyStoreError):
    """Raised when a payload or stored item cannot be turned into a strategy.

    Used for:
    - Pydantic model validation failures on incoming payloads
    - Stored DynamoDB items or S3 objects that no longer parse
    - Missing required fields (name, application)
    """

    def __init__(self, message: str, errors: Optional[Dict[str, Any]] = None, original_error: Optional[Exception] = None):
        """Initialize validation error.

        Args:
            message: Human-readable error message
            errors: Dictionary of field-level validation errors
            original_error: The original exception that caused this error
        """
        self.errors = errors or {}
        context = {}
        if self.errors:
            context['validation_errors'] = self.errors
        super().__init__(message, original_error, context)


# =============================================================================
# Lookup and Uniqueness Errors
# =============================================================================

class NotFoundError(StrategyStoreError):
    """Raised when a strategy lookup finds nothing.

    Used for:
    - find_by_id on an unknown id
    - get_pipeline_id / rename on an unknown (application, name) pair
    - Adapter get() on a missing key
    """

    def __init__(self, message: str, resource_id: Optional[str] = None, original_error: Optional[Exception] = None):
        """Initialize not found error.

        Args:
            message: Human-readable error message
            resource_id: Id or application/name of the missing strategy
            original_error: The original exception that caused this error
        """
        self.resource_id = resource_id
        context = {}
        if resource_id:
            context['resource_id'] = resource_id
        super().__init__(message, original_error, context)


class DuplicateNameError(StrategyStoreError):
    """Raised when a name is already taken by another strategy of the same application.

    The message is always DUPLICATE_NAME_MESSAGE so the handler layer can
    return it to clients verbatim.
    """

    def __init__(self, application: str, name: str, existing_id: Optional[str] = None):
        """Initialize duplicate name error.

        Args:
            application: Application the name collides in
            name: The conflicting strategy name
            existing_id: Id of the strategy already holding the name
        """
        self.application = application
        self.name = name
        self.existing_id = existing_id
        super().__init__(DUPLICATE_NAME_MESSAGE)


# =============================================================================
# Backend Availability Errors
# =============================================================================

class StoreUnavailableError(StrategyStoreError):
    """Raised when the backing store cannot be reached or rejects the request.

    Used for:
    - Network connectivity issues and timeouts
    - Authentication/authorization failures
    - Throttling that outlasted boto3's own retries
    - Missing table or bucket
    - Unknown client error codes
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None, context: Optional[Dict[str, Any]] = None):
        """Initialize store unavailable error.

        Args:
            message: Human-readable error message
            original_error: The original exception that caused this error
            context: Additional context information (e.g., table, bucket, key)
        """
        super().__init__(message, original_error, context)
