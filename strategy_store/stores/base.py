from abc import ABC, abstractmethod
from typing import List, Optional

from ..models import PipelineStrategy


class StrategyStore(ABC):
    """Backing store contract shared by the column and object store adapters.

    Writes are last-write-wins with no optimistic locking. Implementations map
    backend failures to StoreUnavailableError.
    """

    #: Whether list_all() is cheap and strongly consistent
    consistent_listing: bool = True

    @abstractmethod
    def put(self, strategy: PipelineStrategy) -> None:
        """Persist a strategy under its id, replacing any previous version."""

    @abstractmethod
    def get(self, strategy_id: str) -> PipelineStrategy:
        """Return the stored strategy.

        Raises:
            NotFoundError: If nothing is stored under strategy_id
        """

    @abstractmethod
    def delete(self, strategy_id: str) -> None:
        """Remove a strategy; deleting a missing id is not an error."""

    @abstractmethod
    def list_all(self) -> List[PipelineStrategy]:
        """Return every stored strategy."""

    def last_modified(self) -> Optional[int]:
        """Epoch-millisecond time of the last write or delete.

        None when the store keeps no such marker, in which case callers must
        list everything to find out what changed.
        """
        return None

    @staticmethod
    def _require_id(strategy: PipelineStrategy) -> str:
        if not strategy.id:
            raise ValueError("Strategy must have an id before it can be stored")
        return strategy.id
