"""
Test helpers shared across unit tests.
"""

import threading
from typing import Dict, List, Optional

from strategy_store.exceptions import NotFoundError
from strategy_store.models import PipelineStrategy
from strategy_store.stores import StrategyStore


def make_strategy(name: str, application: str = "test", **payload) -> PipelineStrategy:
    """Build a strategy model from keyword payload."""
    return PipelineStrategy.model_validate({"name": name, "application": application, **payload})


class InMemoryStrategyStore(StrategyStore):
    """Dictionary-backed store for cache and DAO tests that do not need AWS.

    `fail_listing` / `fail_writes` make the matching calls raise, and `marker`
    is what last_modified() reports.
    """

    consistent_listing = True

    def __init__(self, strategies: Optional[List[PipelineStrategy]] = None):
        self.items: Dict[str, PipelineStrategy] = {}
        self.list_calls = 0
        self.fail_listing: Optional[Exception] = None
        self.fail_writes: Optional[Exception] = None
        self.marker: Optional[int] = None
        self._lock = threading.Lock()
        for strategy in strategies or []:
            self.put(strategy)

    def put(self, strategy: PipelineStrategy) -> None:
        if self.fail_writes is not None:
            raise self.fail_writes
        with self._lock:
            self.items[self._require_id(strategy)] = strategy.model_copy(deep=True)

    def get(self, strategy_id: str) -> PipelineStrategy:
        with self._lock:
            if strategy_id not in self.items:
                raise NotFoundError(f"No strategy found with id {strategy_id}", strategy_id)
            return self.items[strategy_id].model_copy(deep=True)

    def delete(self, strategy_id: str) -> None:
        if self.fail_writes is not None:
            raise self.fail_writes
        with self._lock:
            self.items.pop(strategy_id, None)

    def list_all(self) -> List[PipelineStrategy]:
        self.list_calls += 1
        if self.fail_listing is not None:
            raise self.fail_listing
        with self._lock:
            return [strategy.model_copy(deep=True) for strategy in self.items.values()]

    def last_modified(self) -> Optional[int]:
        return self.marker
