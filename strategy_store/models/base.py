"""
Base Model Components and Mixins

Strategies are stored by two very different backends, and each one has its
own idea of what a value may look like:

- DynamoDB (through boto3) refuses Python floats and hands every number back
  as a Decimal.
- S3 stores opaque bytes, so the model is written as a JSON document.

StorageMixin keeps both conversions next to the model so adapters only ever
deal in `PipelineStrategy` instances and plain storage payloads.

## Usage Example

```python
item = strategy.to_dynamodb_item()
gateway.put_item(item)

strategy = PipelineStrategy.from_dynamodb_item(response['Item'])
```
"""

import json
import logging
from decimal import Decimal
from typing import Any, Dict

from pydantic import BaseModel

logger = logging.getLogger(__name__)


def _from_dynamodb_value(obj: Any) -> Any:
    """Recursively convert DynamoDB-returned types back to plain Python types."""
    if isinstance(obj, dict):
        return {k: _from_dynamodb_value(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [_from_dynamodb_value(v) for v in obj]
    elif isinstance(obj, set):
        # String/number sets only appear if someone wrote them outside the store
        return [_from_dynamodb_value(v) for v in sorted(obj, key=str)]
    elif isinstance(obj, Decimal):
        if obj == obj.to_integral_value() and obj.as_tuple().exponent >= 0:
            return int(obj)
        return float(obj)
    else:
        return obj


class StorageMixin(BaseModel):
    """
    Mixin providing storage serialization for both backends.

    Features:
    - DynamoDB item serialization with float -> Decimal conversion
    - DynamoDB item deserialization with Decimal -> int/float conversion
    - JSON document encoding for object storage
    - Field aliases honoured in both directions, extra payload keys preserved
    """

    def to_payload(self) -> Dict[str, Any]:
        """Dump the model as a JSON-compatible dictionary using field aliases."""
        return self.model_dump(mode='json', by_alias=True)

    def to_dynamodb_item(self) -> Dict[str, Any]:
        """
        Convert model to a DynamoDB-compatible item.

        Floats are not accepted by boto3, so the JSON form of the payload is
        re-parsed with Decimal for every non-integer number.

        Returns:
            DynamoDB-compatible dictionary ready for storage
        """
        return json.loads(json.dumps(self.to_payload()), parse_float=Decimal)

    @classmethod
    def from_dynamodb_item(cls, item: Dict[str, Any]):
        """
        Create model instance from a DynamoDB item.

        Args:
            item: DynamoDB item dictionary with DynamoDB-specific types

        Returns:
            Model instance with plain Python number types

        Raises:
            ValidationError: If item data is invalid for the model
        """
        try:
            return cls.model_validate(_from_dynamodb_value(item))
        except Exception as e:
            logger.error(f"Failed to convert DynamoDB item to {cls.__name__}: {e}")
            from ..exceptions import ValidationError
            raise ValidationError(f"Failed to convert DynamoDB item to {cls.__name__}: {e}", original_error=e) from e

    def to_json_bytes(self) -> bytes:
        """Encode the model as a UTF-8 JSON document for object storage."""
        return json.dumps(self.to_payload()).encode('utf-8')

    @classmethod
    def from_json_bytes(cls, data: bytes):
        """
        Create model instance from a stored JSON document.

        Raises:
            ValidationError: If the document is not valid JSON or not a valid model
        """
        try:
            return cls.model_validate_json(data)
        except Exception as e:
            logger.error(f"Failed to decode JSON document as {cls.__name__}: {e}")
            from ..exceptions import ValidationError
            raise ValidationError(f"Failed to decode JSON document as {cls.__name__}: {e}", original_error=e) from e
