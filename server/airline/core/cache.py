"""In-process lookaside cache with sliding expiry."""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Protocol

from .observability import metrics_collector

logger = logging.getLogger(__name__)

DEFAULT_SLIDING_EXPIRATION_SECONDS = 300.0


class CacheKeys:
    """Key names shared by the access services."""

    FLIGHTS = "flights"
    USERS = "users"

    @staticmethod
    def flight(flight_id: int) -> str:
        return f"flight_{flight_id}"

    @staticmethod
    def family(key: str) -> str:
        """Collapse per-id keys so metric labels stay bounded."""
        if key.startswith("flight_"):
            return "flight"
        return key


class Cache(Protocol):
    """Interface the access services depend on."""

    def get(self, key: str) -> Optional[Any]: ...

    def set(self, key: str, value: Any) -> None: ...

    def remove(self, key: str) -> None: ...


@dataclass
class _Entry:
    value: Any
    expires_at: float


class LookasideCache:
    """
    Key/value store whose entries expire after a sliding window.

    Every successful ``get`` pushes the entry's expiry forward by the full
    window. Misses are never cached and there is no capacity bound or locking;
    concurrent callers that miss on the same key each load and ``set`` it, and
    the last write wins.
    """

    def __init__(
        self,
        sliding_expiration: float = DEFAULT_SLIDING_EXPIRATION_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        if sliding_expiration <= 0:
            raise ValueError("sliding_expiration must be positive")
        self.sliding_expiration = sliding_expiration
        self._clock = clock
        self._entries: Dict[str, _Entry] = {}

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value or None, sliding the expiry on a hit."""
        entry = self._entries.get(key)
        now = self._clock()

        if entry is None:
            metrics_collector.record_cache_request(CacheKeys.family(key), hit=False)
            return None

        if entry.expires_at <= now:
            self._entries.pop(key, None)
            metrics_collector.record_cache_request(CacheKeys.family(key), hit=False)
            logger.debug("Cache entry expired", extra={"cache_key": key})
            return None

        entry.expires_at = now + self.sliding_expiration
        metrics_collector.record_cache_request(CacheKeys.family(key), hit=True)
        return entry.value

    def set(self, key: str, value: Any) -> None:
        """Store a value with a fresh expiry window."""
        self._entries[key] = _Entry(value=value, expires_at=self._clock() + self.sliding_expiration)

    def remove(self, key: str) -> None:
        """Evict a key. Removing an absent key is a no-op."""
        self._entries.pop(key, None)
        metrics_collector.record_cache_invalidation(CacheKeys.family(key))

    def purge_expired(self) -> int:
        """Drop every expired entry and return how many were dropped."""
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if entry.expires_at <= now]
        for key in expired:
            self._entries.pop(key, None)
        return len(expired)

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: str) -> bool:
        entry = self._entries.get(key)
        return entry is not None and entry.expires_at > self._clock()

    def __len__(self) -> int:
        return len(self._entries)


class NullCache:
    """Cache that stores nothing; every lookup is a miss."""

    def get(self, key: str) -> Optional[Any]:
        return None

    def set(self, key: str, value: Any) -> None:
        pass

    def remove(self, key: str) -> None:
        pass

    def purge_expired(self) -> int:
        return 0

    def clear(self) -> None:
        pass

    def __contains__(self, key: str) -> bool:
        return False

    def __len__(self) -> int:
        return 0


def create_cache(enabled: bool, sliding_expiration: float) -> LookasideCache | NullCache:
    """Build the process cache from configuration."""
    if not enabled:
        logger.info("Lookaside cache disabled; using NullCache")
        return NullCache()
    return LookasideCache(sliding_expiration=sliding_expiration)
