"""
Dependency injection for services.

The components are built once by ``create_app`` and kept on
``app.state``; these providers hand them to the routes.
"""

from fastapi import Request

from chatrelay.config.settings import Settings
from chatrelay.core.sessions import SessionStore
from chatrelay.services.webhook_service import WebhookService
from chatrelay.utils.metrics import RelayMetrics


def get_webhook_service(request: Request) -> WebhookService:
    return request.app.state.webhook_service


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


def get_metrics(request: Request) -> RelayMetrics:
    return request.app.state.metrics


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings
