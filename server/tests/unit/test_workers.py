"""Unit tests for background workers."""

import asyncio

import pytest

from airline.core.cache import LookasideCache
from airline.workers import CachePurgeWorker, WorkerManager


@pytest.mark.asyncio
async def test_purge_worker_drops_expired_entries(clock):
    cache = LookasideCache(sliding_expiration=60, clock=clock)
    cache.set("flight_1", 1)
    cache.set("flight_2", 2)
    clock.advance(30)
    cache.set("flights", [])
    clock.advance(45)

    await CachePurgeWorker(cache).process()

    assert len(cache) == 1
    assert "flights" in cache


@pytest.mark.asyncio
async def test_manager_starts_and_stops_workers(clock):
    cache = LookasideCache(sliding_expiration=60, clock=clock)
    cache.set("flight_1", 1)
    clock.advance(61)
    worker = CachePurgeWorker(cache, interval_seconds=0.01)
    manager = WorkerManager([worker])

    await manager.start_all()
    assert manager.get_worker("CachePurge") is worker
    assert manager.get_worker_status() == {"CachePurge": True}

    for _ in range(50):
        if len(cache) == 0:
            break
        await asyncio.sleep(0.01)

    await manager.stop_all()

    assert len(cache) == 0
    assert manager.get_worker_status() == {"CachePurge": False}


def test_duplicate_worker_names_rejected():
    cache = LookasideCache()
    manager = WorkerManager([CachePurgeWorker(cache)])

    with pytest.raises(ValueError):
        manager.add(CachePurgeWorker(cache))
