"""
Snapshot cache for strategy reads.

StrategyCache keeps an immutable id -> strategy mapping of every stored
strategy and replaces it wholesale on each refresh, so readers always see
either the previous complete snapshot or the next one. One daemon thread
refreshes the snapshot on a fixed interval.

State machine:

    UNINITIALIZED --start()--> REFRESHING --ok--> READY
                                          --error--> FAILED (old snapshot kept)
    READY / FAILED --tick--> REFRESHING

Local writes are applied optimistically through record_put() and
record_delete(). A write made while a refresh is in flight is re-applied on
top of that refresh's result, because the listing may have been taken before
the write landed.

Stores that keep a change marker (StrategyStore.last_modified()) let a tick
skip the full listing while the marker is unchanged. A full listing still
runs at least every `full_listing_interval_seconds`, since marker writes are
best-effort.
"""

import logging
import threading
import time
from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from .models import PipelineStrategy
from .stores import StrategyStore

logger = logging.getLogger(__name__)

_EMPTY: Mapping[str, PipelineStrategy] = MappingProxyType({})


class CacheState(str, Enum):
    """Refresh lifecycle of a StrategyCache."""
    UNINITIALIZED = "uninitialized"
    REFRESHING = "refreshing"
    READY = "ready"
    FAILED = "failed"


class StrategyCache:
    """Periodically refreshed, read-only snapshot of a StrategyStore."""

    def __init__(
        self,
        store: StrategyStore,
        refresh_interval_seconds: float = 5.0,
        full_listing_interval_seconds: float = 60.0
    ):
        """Initialize the cache without loading anything.

        Args:
            store: Adapter whose list_all() feeds the snapshot
            refresh_interval_seconds: Seconds between background refreshes;
                0 disables the background thread (refresh() still works)
            full_listing_interval_seconds: Longest time an unchanged change
                marker may stand in for a full listing
        """
        if refresh_interval_seconds < 0:
            raise ValueError("Refresh interval cannot be negative")
        if full_listing_interval_seconds < 0:
            raise ValueError("Full listing interval cannot be negative")
        self.store = store
        self.refresh_interval_seconds = refresh_interval_seconds
        self.full_listing_interval_seconds = full_listing_interval_seconds

        self.state = CacheState.UNINITIALIZED
        self.last_refreshed: Optional[float] = None
        self.last_error: Optional[Exception] = None
        self.refresh_count = 0
        self.skipped_count = 0

        # Change marker seen just before the last successful listing
        self._listed_marker: Optional[int] = None
        self._listed_at: Optional[float] = None

        self._snapshot: Mapping[str, PipelineStrategy] = _EMPTY
        self._publish_lock = threading.Lock()
        self._refresh_lock = threading.Lock()
        self._refreshing = False
        # (strategy_id, strategy or None for deletes) recorded during a refresh
        self._local_writes: List[Tuple[str, Optional[PipelineStrategy]]] = []

        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def start(self) -> None:
        """Load the first snapshot synchronously, then start the refresher thread."""
        if self._thread is not None:
            return
        self.refresh()
        if self.refresh_interval_seconds > 0:
            self._stop_event.clear()
            self._thread = threading.Thread(
                target=self._run,
                name=f"strategy-cache-refresh-{id(self):x}",
                daemon=True,
            )
            self._thread.start()
            logger.info(f"Started strategy cache refresher (every {self.refresh_interval_seconds}s)")

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        """Stop scheduling refreshes; an in-flight refresh is allowed to finish."""
        self._stop_event.set()
        thread = self._thread
        self._thread = None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
            if thread.is_alive():
                logger.warning("Strategy cache refresher did not stop within timeout")
            else:
                logger.info("Stopped strategy cache refresher")

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _run(self) -> None:
        while not self._stop_event.wait(self.refresh_interval_seconds):
            self.refresh()

    # -------------------------------------------------------------------------
    # Refresh
    # -------------------------------------------------------------------------

    def refresh(self) -> bool:
        """
        Run one refresh cycle on the calling thread.

        Returns:
            True if the snapshot is current (newly published, or confirmed
            unchanged by the store's change marker), False if the load failed
        """
        with self._refresh_lock:
            started = time.monotonic()
            with self._publish_lock:
                self._refreshing = True
                self.state = CacheState.REFRESHING

            try:
                # Read before listing so a write racing the listing moves the marker
                marker = self.store.last_modified()
                if self._unchanged_since_listing(marker, started):
                    self._confirm_unchanged()
                    return True
                strategies = self.store.list_all()
            except Exception as e:
                with self._publish_lock:
                    self._refreshing = False
                    self.state = CacheState.FAILED
                    self._local_writes = []
                    self.last_error = e
                logger.warning(f"Strategy cache refresh failed, keeping {len(self._snapshot)} cached strategies: {e}")
                return False

            loaded: Dict[str, PipelineStrategy] = {s.id: s for s in strategies if s.id}
            with self._publish_lock:
                # Writes made while listing may be missing from it
                for strategy_id, strategy in self._local_writes:
                    if strategy is None:
                        loaded.pop(strategy_id, None)
                    else:
                        loaded[strategy_id] = strategy
                self._snapshot = MappingProxyType(loaded)
                self._local_writes = []
                self._refreshing = False
                self.state = CacheState.READY
                self.last_error = None
                self.last_refreshed = time.time()
                self.refresh_count += 1
                self._listed_marker = marker
                self._listed_at = started

            logger.debug(f"Strategy cache refreshed with {len(loaded)} strategies in {time.monotonic() - started:.3f}s")
            return True

    def _unchanged_since_listing(self, marker: Optional[int], now: float) -> bool:
        if marker is None or self._listed_at is None:
            return False
        if now - self._listed_at >= self.full_listing_interval_seconds:
            return False
        return marker == self._listed_marker

    def _confirm_unchanged(self) -> None:
        with self._publish_lock:
            # Local writes are already part of the published snapshot
            self._local_writes = []
            self._refreshing = False
            self.state = CacheState.READY
            self.last_error = None
            self.last_refreshed = time.time()
            self.skipped_count += 1
        logger.debug(f"Strategy store unchanged since marker {self._listed_marker}, skipped listing")

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def snapshot(self) -> Mapping[str, PipelineStrategy]:
        """Return the most recently published snapshot (empty before the first load)."""
        return self._snapshot

    def values(self) -> List[PipelineStrategy]:
        return list(self._snapshot.values())

    # -------------------------------------------------------------------------
    # Optimistic local updates
    # -------------------------------------------------------------------------

    def record_put(self, strategy: PipelineStrategy) -> None:
        """Publish a just-committed write without waiting for a refresh."""
        if not strategy.id:
            raise ValueError("Cannot cache a strategy without an id")
        self._apply_local_write(strategy.id, strategy.model_copy(deep=True))

    def record_delete(self, strategy_id: str) -> None:
        """Publish a just-committed delete without waiting for a refresh."""
        self._apply_local_write(strategy_id, None)

    def _apply_local_write(self, strategy_id: str, strategy: Optional[PipelineStrategy]) -> None:
        with self._publish_lock:
            updated = dict(self._snapshot)
            if strategy is None:
                updated.pop(strategy_id, None)
            else:
                updated[strategy_id] = strategy
            self._snapshot = MappingProxyType(updated)
            if self._refreshing:
                self._local_writes.append((strategy_id, strategy))

    def __enter__(self) -> "StrategyCache":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()
