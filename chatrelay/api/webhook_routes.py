"""
Webhook API Routes

Messenger subscription handshake and inbound event intake.
"""

from typing import Annotated, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Request, Response, status
from fastapi.responses import PlainTextResponse

from chatrelay.dependencies import get_webhook_service
from chatrelay.exceptions.base_exceptions import ValidationError
from chatrelay.services.webhook_service import WebhookService
from chatrelay.utils.logger import get_logger

logger = get_logger(__name__)
router = APIRouter(tags=["webhooks"])


@router.get(
    "/webhook/",
    response_class=PlainTextResponse,
    summary="Messenger webhook verification",
    description="Echo the hub challenge when the verify token matches"
)
async def messenger_webhook_verification(
        webhook_service: Annotated[WebhookService, Depends(get_webhook_service)],
        hub_mode: Optional[str] = Query(default=None, alias="hub.mode"),
        hub_challenge: Optional[str] = Query(default=None, alias="hub.challenge"),
        hub_verify_token: Optional[str] = Query(default=None, alias="hub.verify_token"),
) -> str:
    """
    Handle Facebook Messenger webhook verification

    Returns:
        The ``hub.challenge`` value when verification succeeds

    Raises:
        HTTPException: 403 if verification fails
    """
    try:
        return webhook_service.verify_subscription(hub_mode, hub_verify_token, hub_challenge)
    except ValidationError as e:
        e.log_error(logger, hub_mode=hub_mode)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Webhook verification failed"
        )


@router.post(
    "/api-ai/",
    summary="Messenger webhook handler",
    description="Accept a batch of Messenger events and answer them asynchronously"
)
async def messenger_webhook_handler(
        request: Request,
        background_tasks: BackgroundTasks,
        webhook_service: Annotated[WebhookService, Depends(get_webhook_service)],
) -> Response:
    """
    Handle incoming Facebook Messenger webhook events

    Always acknowledges with an empty 200: the platform expects an answer
    within 20 seconds, so replies are delivered after the response.
    """
    try:
        webhook_data = await request.json()
    except ValueError:
        logger.warning("Webhook body is not JSON")
        return Response(status_code=status.HTTP_200_OK)

    messages = webhook_service.extract_messages(webhook_data)

    logger.info(
        "Messenger webhook received",
        object=webhook_data.get("object") if isinstance(webhook_data, dict) else None,
        messages=len(messages)
    )

    if messages:
        background_tasks.add_task(webhook_service.dispatch_messages, messages)

    return Response(status_code=status.HTTP_200_OK)
