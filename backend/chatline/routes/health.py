# backend/chatline/routes/health.py
"""Liveness and metrics endpoints."""

from typing import Any, Dict

from fastapi import APIRouter, Depends, Response

from .. import __version__
from ..core.config import settings
from ..dependencies import get_hub
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..services.messaging.hub import ConnectionHub

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(hub: ConnectionHub = Depends(get_hub)) -> Dict[str, Any]:
    return {
        "status": "healthy",
        "version": __version__,
        "environment": settings.environment,
        "realtime": hub.get_stats(),
    }


@router.get("/metrics", include_in_schema=False)
def metrics() -> Response:
    return Response(
        content=prometheus_metrics.get_metrics(),
        media_type=prometheus_metrics.get_content_type(),
        headers={"Cache-Control": "no-store"},
    )
