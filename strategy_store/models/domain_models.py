"""
Domain Models for the Strategy Store

A pipeline strategy is an opaque JSON document. The store only interprets a
handful of its fields:

- `id`: assigned once on creation, never changed afterwards
- `name`: unique within an application
- `application`: partition for uniqueness checks and scoped listings
- `triggers[].id` / `triggers[].type`: cron trigger ids are regenerated for
  brand new strategies

Every other key is kept as an extra field and written back verbatim.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .base import StorageMixin

CRON_TRIGGER_TYPE = "cron"


class Trigger(BaseModel):
    """A trigger attached to a strategy; only `id` and `type` are interpreted."""

    id: Optional[str] = Field(None, description="Trigger identifier")
    type: Optional[str] = Field(None, description="Trigger type (e.g. 'cron', 'jenkins')")

    model_config = ConfigDict(
        extra='allow'
    )

    @property
    def is_cron(self) -> bool:
        return self.type == CRON_TRIGGER_TYPE


class PipelineStrategy(StorageMixin, BaseModel):
    """
    Core domain model for a pipeline strategy document.

    Extra keys (stages, parameters, notifications, ...) are accepted and
    preserved so the store never loses payload it does not understand.
    """

    id: Optional[str] = Field(None, description="Unique identifier, assigned by the store on create")
    name: str = Field(..., min_length=1, description="Strategy name, unique within its application")
    application: str = Field(..., min_length=1, description="Owning application")
    triggers: List[Trigger] = Field(default_factory=list, description="Ordered trigger definitions")

    # Stamped by the DAO on every write
    update_ts: Optional[str] = Field(None, alias="updateTs", description="Last write time in epoch milliseconds")

    model_config = ConfigDict(
        extra='allow',
        populate_by_name=True,
        validate_assignment=True
    )

    @field_validator('triggers', mode='before')
    @classmethod
    def default_missing_triggers(cls, v: Any) -> Any:
        """Treat an explicit null trigger list as empty."""
        return [] if v is None else v

    def cron_triggers(self) -> List[Trigger]:
        """Return the cron-type triggers in declaration order."""
        return [trigger for trigger in self.triggers if trigger.is_cron]

    def matches(self, application: str, name: str) -> bool:
        """Whether this strategy is the one named `name` in `application`."""
        return self.application == application and self.name == name
