"""
Chat Relay - FastAPI Application Entry Point.

This module builds the webhook application: it wires the NLU adapter,
the action registry, the Messenger channel and the session store, and
runs the server under uvicorn.
"""

import sys
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI

from chatrelay.api import health_router, webhook_router
from chatrelay.api.middleware import RequestLoggingMiddleware
from chatrelay.config.constants import SERVICE_DESCRIPTION, SERVICE_NAME, SERVICE_VERSION, RunMode
from chatrelay.config.settings import Settings, get_settings, validate_configuration
from chatrelay.core.actions import ReplyTemplates, create_default_registry
from chatrelay.core.channels import BaseChannel, MessengerChannel
from chatrelay.core.nlu import NLUClient, build_nlu_client
from chatrelay.core.sessions import SessionStore
from chatrelay.exceptions.base_exceptions import ConfigError, setup_exception_handlers
from chatrelay.services import ConversationService, WebhookService
from chatrelay.utils.logger import get_logger, setup_logging
from chatrelay.utils.metrics import RelayMetrics

# Initialize logger
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events."""
    settings: Settings = app.state.settings
    logger.info(
        "Chat Relay starting",
        version=SERVICE_VERSION,
        environment=settings.ENVIRONMENT.value,
        nlu_backend=app.state.nlu_client.name,
        host=settings.HOST,
        port=settings.PORT
    )

    try:
        yield
    finally:
        logger.info("Shutting down Chat Relay...")
        await app.state.nlu_client.close()
        await app.state.channel.close()
        logger.info("Chat Relay shutdown complete")


def create_app(
        settings: Optional[Settings] = None,
        nlu_client: Optional[NLUClient] = None,
        channel: Optional[BaseChannel] = None,
        templates: Optional[ReplyTemplates] = None,
        session_store: Optional[SessionStore] = None,
        metrics: Optional[RelayMetrics] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application instance.

    Components not passed in are built from ``settings``.

    Raises:
        ConfigError: When a setting the server needs is missing
    """
    if settings is None:
        settings = get_settings()
    setup_logging(settings.LOG_LEVEL.value, settings.LOG_FORMAT)

    validate_configuration(settings, RunMode.SERVER)

    if metrics is None:
        metrics = RelayMetrics()
    if templates is None:
        templates = (
            ReplyTemplates.from_file(settings.ACTION_TEMPLATES_FILE)
            if settings.ACTION_TEMPLATES_FILE else ReplyTemplates()
        )

    if nlu_client is None:
        nlu_client = build_nlu_client(settings, settings.WEBHOOK_NLU_BACKEND)
    if channel is None:
        channel = MessengerChannel(
            page_token=settings.FB_PAGE_TOKEN,
            graph_api_base_url=settings.GRAPH_API_BASE_URL,
            graph_api_version=settings.GRAPH_API_VERSION,
            timeout_seconds=settings.HTTP_TIMEOUT_SECONDS,
            metrics=metrics,
        )
    if session_store is None:
        session_store = SessionStore()

    conversation_service = ConversationService(
        nlu_client=nlu_client,
        registry=create_default_registry(templates),
        channel=channel,
        metrics=metrics,
    )

    app = FastAPI(
        title="Chat Relay",
        description=SERVICE_DESCRIPTION,
        version=SERVICE_VERSION,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.metrics = metrics
    app.state.nlu_client = nlu_client
    app.state.channel = channel
    app.state.session_store = session_store
    app.state.webhook_service = WebhookService(
        verify_token=settings.FB_VERIFY_TOKEN,
        session_store=session_store,
        conversation_service=conversation_service,
        metrics=metrics,
    )

    app.add_middleware(RequestLoggingMiddleware)
    setup_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(webhook_router)

    return app


def main() -> None:
    """Main entry point for running the service."""
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL.value, settings.LOG_FORMAT)

    try:
        validate_configuration(settings, RunMode.SERVER)
    except ConfigError as e:
        e.log_error(logger)
        sys.exit(1)

    logger.info(
        "Starting Chat Relay server",
        service=SERVICE_NAME,
        host=settings.HOST,
        port=settings.PORT,
        environment=settings.ENVIRONMENT.value,
        debug=settings.DEBUG
    )

    uvicorn.run(
        "chatrelay.main:create_app",
        factory=True,
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.value.lower(),
        log_config=None,
        server_header=False,
        reload=settings.DEBUG and not settings.is_production(),
    )


if __name__ == "__main__":
    main()
