"""Metrics endpoint for Prometheus scraping."""

from fastapi import APIRouter, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST

from ..core.observability import get_prometheus_metrics, metrics_collector

router = APIRouter()


@router.get(
    "/metrics",
    summary="Prometheus Metrics",
    description="HTTP, cache and booking metrics for Prometheus",
    response_class=Response,
    tags=["Observability"]
)
async def metrics(request: Request):
    """
    Return Prometheus metrics.

    The cache-size gauge is refreshed on every scrape as well as by the
    purge worker.
    """
    cache = getattr(request.app.state, "cache", None)
    if cache is not None:
        metrics_collector.set_cache_entries(len(cache))

    return Response(
        content=get_prometheus_metrics(),
        media_type=CONTENT_TYPE_LATEST,
    )
