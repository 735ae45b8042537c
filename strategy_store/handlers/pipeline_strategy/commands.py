"""
Pipeline Strategy Write API

Entry points used by the request-handling layer:
- save: create-or-replace a strategy payload
- move: rename a strategy within its application
- delete: delete a strategy by application and name

Payloads arrive as dictionaries or JSON text and are validated into
PipelineStrategy models here; the DAO only ever sees models.
"""

import logging
from typing import Any, Dict, Mapping, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from ...dao import PipelineStrategyDAO
from ...exceptions import ValidationError
from ...models import PipelineStrategy

logger = logging.getLogger(__name__)

Payload = Union[str, bytes, Mapping[str, Any]]


class MoveCommand(BaseModel):
    """Rename request: `{application, from, to}`."""

    application: str = Field(..., min_length=1, description="Application owning the strategy")
    from_name: str = Field(..., alias="from", min_length=1, description="Current strategy name")
    to_name: str = Field(..., alias="to", min_length=1, description="New strategy name")

    model_config = ConfigDict(
        populate_by_name=True
    )


def _validate(model_class, payload: Payload):
    try:
        if isinstance(payload, (str, bytes)):
            return model_class.model_validate_json(payload)
        return model_class.model_validate(dict(payload))
    except PydanticValidationError as e:
        errors = {'.'.join(str(p) for p in err['loc']): err['msg'] for err in e.errors()}
        raise ValidationError(f"Invalid {model_class.__name__} payload", errors=errors, original_error=e) from e


def parse_strategy(payload: Payload) -> PipelineStrategy:
    """Validate a request payload into a PipelineStrategy.

    Raises:
        ValidationError: If name or application is missing or the payload is malformed
    """
    return _validate(PipelineStrategy, payload)


class StrategyWriteApi:
    """Write-side entry points over a PipelineStrategyDAO."""

    def __init__(self, dao: PipelineStrategyDAO):
        self.dao = dao

    def save(self, payload: Payload) -> PipelineStrategy:
        """
        Create or replace a strategy.

        A payload carrying an `id` replaces that strategy through the update
        path (trigger ids kept). A payload without one is created, which
        assigns the id, regenerates cron trigger ids and rejects a name already
        used in the application.

        Raises:
            ValidationError: Malformed payload
            DuplicateNameError: Name already used in the application
        """
        strategy = parse_strategy(payload)
        if strategy.id:
            return self.dao.update(strategy.id, strategy)
        return self.dao.create(None, strategy)

    def move(self, command: Union[MoveCommand, Payload]) -> PipelineStrategy:
        """
        Rename a strategy: `{application, from, to}`.

        Raises:
            ValidationError: Malformed command
            NotFoundError: No strategy named `from` in the application
            DuplicateNameError: `to` is already used in the application
        """
        if not isinstance(command, MoveCommand):
            command = _validate(MoveCommand, command)
        return self.dao.rename(command.application, command.from_name, command.to_name)

    def delete(self, application: str, name: str) -> None:
        """Delete a strategy by application and name; deleting a missing one succeeds."""
        self.dao.delete(application, name)

    def batch_update(self, payloads: list) -> Dict[str, PipelineStrategy]:
        """
        Save several strategies, stopping at the first failure.

        Returns:
            Stored strategies keyed by id
        """
        saved = {}
        for payload in payloads:
            strategy = self.save(payload)
            saved[strategy.id] = strategy
        logger.info(f"Batch saved {len(saved)} strategies")
        return saved
