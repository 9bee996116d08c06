"""
Background sweep that evicts expired cache entries on a fixed interval.
"""
import threading
import logging
from typing import List, Optional

from .store import TTLCacheStore

logger = logging.getLogger("cache.sweeper")

DEFAULT_SWEEP_INTERVAL_SECONDS = 5 * 60


class CacheSweeper:
    """
    Runs cleanup() on each registered store every interval seconds.

    Independent of request traffic, so memory stays bounded even for keys
    that are never read again. Lifecycle is explicit: start() at process
    start, stop() at shutdown.
    """

    def __init__(
        self,
        stores: List[TTLCacheStore],
        interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
    ):
        self._stores = list(stores)
        self._interval = interval_seconds
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def sweep_once(self) -> int:
        """Sweep every store once. Returns total entries removed."""
        removed = 0
        for store in self._stores:
            try:
                removed += store.cleanup()
            except Exception as e:
                logger.warning(f"Cache sweep failed for '{store.name}': {e}")
        if removed:
            logger.info(f"Cache sweep removed {removed} expired entries")
        return removed

    def _run(self) -> None:
        # wait() returns True as soon as stop() is called
        while not self._stop_event.wait(self._interval):
            self.sweep_once()

    def start(self) -> None:
        if self.is_running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run,
            name="cache-sweeper",
            daemon=True,
        )
        self._thread.start()
        logger.info(f"Cache sweeper started (interval={self._interval}s)")

    def stop(self, timeout: float = 5.0) -> None:
        if self._thread is None:
            return
        self._stop_event.set()
        self._thread.join(timeout=timeout)
        self._thread = None
        logger.info("Cache sweeper stopped")
