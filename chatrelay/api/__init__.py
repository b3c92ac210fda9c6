"""
HTTP API: routers and middleware.
"""

from chatrelay.api.health_routes import router as health_router
from chatrelay.api.webhook_routes import router as webhook_router

__all__ = [
    "health_router",
    "webhook_router",
]
