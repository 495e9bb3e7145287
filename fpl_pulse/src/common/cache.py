"""
In-memory caching for FPL Pulse.

Holds upstream payloads with a time-to-live, an injectable clock and
single-flight loading so concurrent callers missing the same key share one
upstream request.
"""

import threading
import time
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple, Type
from .config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    """A cached value and the clock reading at which it was stored."""
    value: Any
    stored_at: float


class TTLCache:
    """
    Time-to-live cache keyed by endpoint.

    Entries are valid while ``clock() - stored_at < ttl``. Expired entries are
    kept around so callers can fall back to the last known-good value.
    """

    def __init__(self, ttl_seconds: float = 300, clock: Callable[[], float] = time.monotonic):
        """
        Initialize cache.

        Args:
            ttl_seconds: Time to live for every entry
            clock: Zero-argument callable returning seconds; monotonic by default
        """
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._pending: Dict[str, Future] = {}
        self._lock = threading.Lock()

    def _is_fresh(self, entry: CacheEntry) -> bool:
        return self.clock() - entry.stored_at < self.ttl_seconds

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value for ``key`` if it has not expired."""
        with self._lock:
            entry = self._entries.get(key)
        if entry is not None and self._is_fresh(entry):
            logger.debug(f"Cache hit: {key}")
            return entry.value
        return None

    def get_stale(self, key: str) -> Optional[Any]:
        """Return the last stored value for ``key`` regardless of age."""
        with self._lock:
            entry = self._entries.get(key)
        return entry.value if entry is not None else None

    def age(self, key: str) -> Optional[float]:
        """Seconds since ``key`` was stored, or None if never stored."""
        with self._lock:
            entry = self._entries.get(key)
        if entry is None:
            return None
        return self.clock() - entry.stored_at

    def set(self, key: str, value: Any):
        """Store ``value`` under ``key``, replacing any previous entry."""
        with self._lock:
            self._entries[key] = CacheEntry(value, self.clock())
        logger.debug(f"Cache set: {key}")

    def delete(self, key: str):
        """Drop ``key`` from the cache."""
        with self._lock:
            self._entries.pop(key, None)

    def get_or_load(
        self,
        key: str,
        loader: Callable[[], Any],
        timeout: Optional[float] = None,
        retry_on: Tuple[Type[BaseException], ...] = (),
    ) -> Any:
        """
        Return the fresh cached value for ``key`` or load it.

        Only one caller runs ``loader`` for a given key at a time; other callers
        arriving during the load wait for the same result (or exception). The
        value is stored only when ``loader`` returns normally.

        Args:
            key: Cache key
            loader: Zero-argument callable producing the value
            timeout: Longest this caller waits on another caller's load
            retry_on: Exceptions that belong to the loading caller alone
                (its cancellation or deadline); a waiter that sees one runs
                its own ``loader`` instead of re-raising it

        Returns:
            Cached or freshly loaded value

        Raises:
            concurrent.futures.TimeoutError: ``timeout`` passed while waiting
        """
        wait_until = None if timeout is None else self.clock() + timeout

        while True:
            with self._lock:
                entry = self._entries.get(key)
                if entry is not None and self._is_fresh(entry):
                    logger.debug(f"Cache hit: {key}")
                    return entry.value

                future = self._pending.get(key)
                owner = future is None
                if owner:
                    future = Future()
                    self._pending[key] = future

            if owner:
                break

            logger.debug(f"Waiting on in-flight load: {key}")
            remaining = None if wait_until is None else max(0.0, wait_until - self.clock())
            try:
                return future.result(timeout=remaining)
            except retry_on as e:
                logger.debug(f"In-flight load of {key} abandoned by its caller ({e}); loading again")

        try:
            value = loader()
        except BaseException as e:
            with self._lock:
                self._pending.pop(key, None)
            future.set_exception(e)
            raise

        with self._lock:
            self._entries[key] = CacheEntry(value, self.clock())
            self._pending.pop(key, None)
        future.set_result(value)
        logger.debug(f"Cache set: {key}")
        return value
