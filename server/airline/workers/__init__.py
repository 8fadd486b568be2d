"""Background workers for the airline booking API."""

from .base import BaseWorker
from .cache_purge_worker import CachePurgeWorker
from .manager import WorkerManager

__all__ = ["BaseWorker", "CachePurgeWorker", "WorkerManager"]
