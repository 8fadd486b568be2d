"""Background worker for dropping expired cache entries."""

import logging

from ..core.cache import LookasideCache, NullCache
from ..core.observability import metrics_collector
from .base import BaseWorker

logger = logging.getLogger(__name__)


class CachePurgeWorker(BaseWorker):
    """
    Background worker that purges expired lookaside cache entries.

    Reads already evict expired entries lazily; this only bounds the memory
    held by keys that are never read again, such as deleted flights.
    """

    def __init__(self, cache: LookasideCache | NullCache, interval_seconds: float = 60):
        """
        Initialize the cache purge worker.

        Args:
            cache: Cache to purge
            interval_seconds: How often to purge (default: 60s)
        """
        super().__init__(name="CachePurge", interval_seconds=interval_seconds)
        self.cache = cache

    async def process(self) -> None:
        """Purge expired entries and publish the remaining count."""
        purged = self.cache.purge_expired()
        remaining = len(self.cache)
        metrics_collector.set_cache_entries(remaining)

        if purged > 0:
            logger.info(
                f"Purged {purged} expired cache entries",
                extra={
                    "purged_count": purged,
                    "remaining": remaining,
                    "worker": self.name,
                }
            )
