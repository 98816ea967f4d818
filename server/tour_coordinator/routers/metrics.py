"""Prometheus scrape endpoint for coordinator counters."""

from fastapi import APIRouter, Response

from ..core.observability import get_prometheus_metrics

router = APIRouter(tags=["Observability"])

PROMETHEUS_CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"


@router.get(
    "/metrics",
    summary="Prometheus Metrics",
    description="Tour creation, assignment, release and rejection counters",
    response_class=Response,
)
async def metrics() -> Response:
    """Return the coordinator registry in Prometheus text format."""
    return Response(content=get_prometheus_metrics(), media_type=PROMETHEUS_CONTENT_TYPE)
