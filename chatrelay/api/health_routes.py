"""
Health Check API Routes

Greeting, liveness and metrics endpoints.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.responses import PlainTextResponse

from chatrelay.config.constants import GREETING_TEXT, SERVICE_NAME, SERVICE_VERSION
from chatrelay.config.settings import Settings
from chatrelay.core.sessions import SessionStore
from chatrelay.dependencies import get_app_settings, get_metrics, get_session_store
from chatrelay.utils.metrics import RelayMetrics

router = APIRouter(tags=["health"])


@router.get("/", response_class=PlainTextResponse)
async def index() -> str:
    """Index route."""
    return GREETING_TEXT


@router.get("/health")
async def health_check(
        session_store: Annotated[SessionStore, Depends(get_session_store)]
):
    """Basic health check endpoint."""
    return {
        "status": "healthy",
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "sessions": len(session_store),
    }


@router.get("/metrics")
async def prometheus_metrics(
        metrics: Annotated[RelayMetrics, Depends(get_metrics)],
        settings: Annotated[Settings, Depends(get_app_settings)]
):
    """Prometheus metrics endpoint."""
    if not settings.METRICS_ENABLED:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Metrics disabled")

    return Response(metrics.render(), media_type=metrics.content_type)
