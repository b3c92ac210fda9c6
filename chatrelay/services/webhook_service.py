"""
Webhook Service

Messenger webhook handling: subscription verification, extraction of
user messages from event batches, and dispatch of one conversation turn
per message.
"""

import asyncio
import hmac
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from chatrelay.config.constants import (
    ATTACHMENT_QUERY_TEMPLATE,
    HUB_MODE_SUBSCRIBE,
    MESSENGER_OBJECT_PAGE,
    RECOGNIZED_ATTACHMENT_TYPES,
)
from chatrelay.core.channels.base_channel import DeliveryResult
from chatrelay.core.sessions import SessionStore
from chatrelay.exceptions.base_exceptions import ValidationError
from chatrelay.models.messenger import InboundMessage, MessagingEvent, WebhookPayload
from chatrelay.services.base_service import BaseService
from chatrelay.services.conversation_service import ConversationService
from chatrelay.utils.metrics import RelayMetrics


def query_text_for(message: InboundMessage) -> Optional[str]:
    """
    Text to send to the NLU provider for a message.

    Text wins; otherwise the first recognized attachment type is turned
    into a query such as "image attachment". None means nothing usable.
    """
    if message.text:
        return message.text

    for attachment in message.attachments:
        if attachment.type in RECOGNIZED_ATTACHMENT_TYPES:
            return ATTACHMENT_QUERY_TEMPLATE.format(type=attachment.type)

    return None


class WebhookService(BaseService):
    """Service behind ``GET /webhook/`` and ``POST /api-ai/``."""

    def __init__(
            self,
            verify_token: str,
            session_store: SessionStore,
            conversation_service: ConversationService,
            metrics: Optional[RelayMetrics] = None
    ):
        super().__init__()
        self.verify_token = verify_token
        self.session_store = session_store
        self.conversation_service = conversation_service
        self.metrics = metrics

    def verify_subscription(
            self,
            hub_mode: Optional[str],
            hub_verify_token: Optional[str],
            hub_challenge: Optional[str]
    ) -> str:
        """
        Check a subscription handshake and return the challenge to echo.

        Raises:
            ValidationError: When the mode or the token does not match
        """
        if hub_mode != HUB_MODE_SUBSCRIBE:
            raise ValidationError("Unexpected hub.mode", field="hub.mode")

        if not hub_verify_token or not hmac.compare_digest(
                hub_verify_token.encode(), self.verify_token.encode()
        ):
            raise ValidationError(
                "Failed validation. Make sure the validation tokens match.",
                field="hub.verify_token"
            )

        self.logger.info("Webhook subscription verified")
        return hub_challenge or ""

    def extract_messages(self, data: Any) -> List[InboundMessage]:
        """
        Pull the user messages worth answering out of a webhook body.

        Bodies that are not page subscriptions or whose envelope does not
        parse are logged and yield nothing. Each event is validated on its
        own, so a malformed event only drops itself. Events without a
        message, echoes of the page's own messages and messages with
        neither text nor a recognized attachment are logged and dropped.
        """
        try:
            payload = WebhookPayload.model_validate(data)
        except PydanticValidationError as e:
            self.logger.warning("Malformed webhook body", errors=e.error_count())
            return []

        if payload.object != MESSENGER_OBJECT_PAGE:
            self.logger.warning("Ignoring non-page webhook", object=payload.object)
            return []

        messages = []
        for entry in payload.entry:
            for raw_event in entry.messaging:
                try:
                    event = MessagingEvent.model_validate(raw_event)
                except PydanticValidationError as e:
                    self.logger.info(
                        "Dropping malformed messaging event",
                        page_id=entry.id,
                        event_keys=sorted(raw_event.keys()),
                        errors=e.error_count()
                    )
                    self._record("dropped")
                    continue

                message = self._message_from_event(event, page_id=entry.id)
                if message is not None:
                    messages.append(message)

        return messages

    def _message_from_event(self, event: MessagingEvent, page_id: Optional[str]) -> Optional[InboundMessage]:
        if event.message is None:
            self._drop("Webhook received unknown messaging event", event, page_id)
            return None

        if event.message.is_echo:
            self._drop("Ignoring echo message", event, page_id)
            return None

        message = InboundMessage.from_event(event)
        if query_text_for(message) is None:
            self._drop("Message has neither text nor a recognized attachment", event, page_id)
            return None

        self._record("accepted")
        return message

    def _drop(self, reason: str, event: MessagingEvent, page_id: Optional[str]) -> None:
        self.logger.info(
            reason,
            page_id=page_id,
            sender_id=event.sender.id,
            event_keys=sorted(event.model_dump(exclude_none=True).keys())
        )
        self._record("dropped")

    async def handle_message(self, message: InboundMessage) -> List[DeliveryResult]:
        """Resolve the sender's session and run one turn."""
        text = query_text_for(message)
        if text is None:
            return []

        conversation_id = await self.session_store.get_or_create(message.sender_id)
        return await self.conversation_service.handle_text(
            user_id=message.sender_id,
            conversation_id=conversation_id,
            text=text
        )

    async def dispatch_messages(self, messages: List[InboundMessage]) -> None:
        """Run the turns of a webhook batch concurrently."""
        results = await asyncio.gather(
            *(self.handle_message(message) for message in messages),
            return_exceptions=True
        )

        for message, result in zip(messages, results):
            if isinstance(result, Exception):
                self.logger.error(
                    "Conversation turn failed",
                    sender_id=message.sender_id,
                    error=str(result),
                    error_type=type(result).__name__,
                    exc_info=result
                )

    def _record(self, outcome: str) -> None:
        if self.metrics is not None:
            self.metrics.record_webhook_event(outcome)
