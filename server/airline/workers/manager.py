"""Worker manager for coordinating background tasks."""

import asyncio
import logging
from typing import Dict, Iterable

from .base import BaseWorker

logger = logging.getLogger(__name__)


class WorkerManager:
    """
    Manages background workers for the application.

    Coordinates starting, stopping, and monitoring of all background workers.
    """

    def __init__(self, workers: Iterable[BaseWorker] = ()):
        """
        Initialize the worker manager.

        Args:
            workers: Workers to manage, keyed by their name
        """
        self.workers: Dict[str, BaseWorker] = {}
        for worker in workers:
            self.add(worker)

    def add(self, worker: BaseWorker) -> None:
        if worker.name in self.workers:
            raise ValueError(f"Worker {worker.name} is already registered")
        self.workers[worker.name] = worker

    async def start_all(self) -> None:
        """Start all workers."""
        logger.info("Starting all workers")

        for name, worker in self.workers.items():
            try:
                await worker.start()
                logger.info(f"Started worker: {name}")
            except Exception as e:
                logger.error(f"Failed to start worker {name}: {str(e)}", exc_info=True)

        logger.info(f"Started {len(self.workers)} workers")

    async def stop_all(self) -> None:
        """Stop all workers gracefully."""
        logger.info("Stopping all workers")

        names = list(self.workers)
        results = await asyncio.gather(
            *(self.workers[name].stop() for name in names),
            return_exceptions=True,
        )

        for name, result in zip(names, results):
            if isinstance(result, Exception):
                logger.error(f"Error stopping worker {name}: {str(result)}")
            else:
                logger.info(f"Stopped worker: {name}")

        logger.info("All workers stopped")

    def get_worker(self, name: str) -> BaseWorker:
        """
        Get a specific worker by name.

        Raises:
            KeyError: If worker not found
        """
        return self.workers[name]

    def get_worker_status(self) -> Dict[str, bool]:
        """Map worker names to their running status."""
        return {name: worker.running for name, worker in self.workers.items()}
