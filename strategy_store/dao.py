"""
Pipeline Strategy DAO

The public data access contract over either backing store. Reads are served
from the StrategyCache snapshot when one is attached, otherwise straight from
the adapter. Writes check name uniqueness against that same view, commit
through the adapter, then update the cache optimistically.

Uniqueness is check-then-write with no lock: two callers racing to claim the
same name in the same application can both pass the check. Neither backend
offers cross-key transactions, so this is a best-effort guarantee.
"""

import logging
from typing import Callable, List, Optional

from .cache import StrategyCache
from .core import IdGenerator
from .exceptions import DuplicateNameError, NotFoundError
from .models import PipelineStrategy
from .stores import StrategyStore
from .utils import current_time_millis

logger = logging.getLogger(__name__)


class PipelineStrategyDAO:
    """
    Create, update, rename, delete and look up pipeline strategies.

    Every strategy handed back is a copy; mutating it never changes what is
    cached or stored.
    """

    def __init__(
        self,
        store: StrategyStore,
        cache: Optional[StrategyCache] = None,
        id_generator: Optional[Callable[[], str]] = None
    ):
        """Initialize the DAO.

        Args:
            store: Backing store adapter
            cache: Optional snapshot cache over the same store (already started
                or started by the caller)
            id_generator: Zero-argument callable returning new unique ids
        """
        self.store = store
        self.cache = cache
        self.id_generator = id_generator or IdGenerator()

    # =========================================================================
    # Reads
    # =========================================================================

    def all(self) -> List[PipelineStrategy]:
        """Return every strategy; order is not significant."""
        return [strategy.model_copy(deep=True) for strategy in self._view()]

    def get_pipelines_by_application(self, application: str) -> List[PipelineStrategy]:
        """Return the strategies owned by `application`."""
        return [
            strategy.model_copy(deep=True)
            for strategy in self._view()
            if strategy.application == application
        ]

    def find_by_id(self, strategy_id: str) -> PipelineStrategy:
        """
        Return the strategy with the given id.

        Raises:
            NotFoundError: If no strategy has that id
        """
        if self.cache is not None:
            strategy = self.cache.snapshot().get(strategy_id)
            if strategy is None:
                raise NotFoundError(f"No strategy found with id {strategy_id}", strategy_id)
            return strategy.model_copy(deep=True)
        return self.store.get(strategy_id)

    def get_pipeline_id(self, application: str, name: str) -> str:
        """
        Resolve the id of the strategy named `name` in `application`.

        Raises:
            NotFoundError: If the application has no strategy with that name
        """
        strategy = self._find_by_name(application, name)
        if strategy is None:
            raise NotFoundError(
                f"No strategy named '{name}' in application '{application}'",
                f"{application}/{name}"
            )
        return strategy.id

    # =========================================================================
    # Writes
    # =========================================================================

    def create(self, existing_id: Optional[str], strategy: PipelineStrategy) -> PipelineStrategy:
        """
        Store a strategy, assigning an id when it has none.

        A strategy whose id is not already stored is new: it receives a fresh
        id if it has none, and every cron trigger gets a fresh id. Passing the
        id of a stored strategy takes the update path and keeps trigger ids as
        they are.

        Args:
            existing_id: Id to store the strategy under, if already known
            strategy: Strategy payload

        Returns:
            The stored strategy with its assigned ids

        Raises:
            DuplicateNameError: If another strategy of the application has the name
        """
        candidate = strategy.model_copy(deep=True)
        strategy_id = existing_id or candidate.id
        is_new = strategy_id is None or not self._exists(strategy_id)

        if strategy_id is None:
            strategy_id = self.id_generator()
        candidate.id = strategy_id

        if is_new:
            for trigger in candidate.cron_triggers():
                trigger.id = self.id_generator()

        self._check_unique_name(candidate.application, candidate.name, strategy_id)
        stored = self._commit(candidate)
        logger.info(
            f"{'Created' if is_new else 'Replaced'} strategy {strategy_id} "
            f"'{stored.name}' in application '{stored.application}'"
        )
        return stored

    def update(self, strategy_id: str, strategy: PipelineStrategy) -> PipelineStrategy:
        """
        Replace the strategy stored under `strategy_id`.

        Trigger ids are kept exactly as supplied.

        Raises:
            DuplicateNameError: If another strategy of the application has the name
        """
        candidate = strategy.model_copy(deep=True)
        candidate.id = strategy_id
        self._check_unique_name(candidate.application, candidate.name, strategy_id)
        stored = self._commit(candidate)
        logger.info(f"Updated strategy {strategy_id} '{stored.name}' in application '{stored.application}'")
        return stored

    def rename(self, application: str, from_name: str, to_name: str) -> PipelineStrategy:
        """
        Rename a strategy within its application; the id is unchanged.

        Raises:
            NotFoundError: If `from_name` does not exist in the application
            DuplicateNameError: If `to_name` belongs to another strategy
        """
        existing = self._find_by_name(application, from_name)
        if existing is None:
            raise NotFoundError(
                f"No strategy named '{from_name}' in application '{application}'",
                f"{application}/{from_name}"
            )

        self._check_unique_name(application, to_name, existing.id)
        renamed = existing.model_copy(deep=True)
        renamed.name = to_name
        stored = self._commit(renamed)
        logger.info(f"Renamed strategy {existing.id} in application '{application}' from '{from_name}' to '{to_name}'")
        return stored

    def delete(self, application: str, name: str) -> None:
        """Delete the strategy named `name` in `application`; a missing one is a no-op."""
        existing = self._find_by_name(application, name)
        if existing is None:
            logger.debug(f"No strategy named '{name}' in application '{application}' to delete")
            return
        self.delete_by_id(existing.id)

    def delete_by_id(self, strategy_id: str) -> None:
        """Delete a strategy by id; deleting a missing id is a no-op."""
        self.store.delete(strategy_id)
        if self.cache is not None:
            self.cache.record_delete(strategy_id)
        logger.info(f"Deleted strategy {strategy_id}")

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def close(self) -> None:
        """Stop the cache refresher, if any."""
        if self.cache is not None:
            self.cache.stop()

    def __enter__(self) -> "PipelineStrategyDAO":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # =========================================================================
    # Helpers
    # =========================================================================

    def _view(self) -> List[PipelineStrategy]:
        if self.cache is not None:
            return self.cache.values()
        return self.store.list_all()

    def _exists(self, strategy_id: str) -> bool:
        if self.cache is not None:
            return strategy_id in self.cache.snapshot()
        try:
            self.store.get(strategy_id)
        except NotFoundError:
            return False
        return True

    def _find_by_name(self, application: str, name: str) -> Optional[PipelineStrategy]:
        for strategy in self._view():
            if strategy.matches(application, name):
                return strategy
        return None

    def _check_unique_name(self, application: str, name: str, strategy_id: Optional[str]) -> None:
        for strategy in self._view():
            if strategy.matches(application, name) and strategy.id != strategy_id:
                raise DuplicateNameError(application, name, strategy.id)

    def _commit(self, strategy: PipelineStrategy) -> PipelineStrategy:
        strategy.update_ts = str(current_time_millis())
        self.store.put(strategy)
        if self.cache is not None:
            self.cache.record_put(strategy)
        return strategy.model_copy(deep=True)
