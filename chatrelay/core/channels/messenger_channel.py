"""
Facebook Messenger channel over the Graph API Send API.

Builds the message envelopes for every reply type, posts them one call
per reply and sends typing indicators. Failed calls are logged and
reported, never retried.
"""

import time
from typing import Any, Dict, Optional

import httpx

from chatrelay.config.constants import (
    DEFAULT_GRAPH_API_BASE_URL,
    DEFAULT_GRAPH_API_VERSION,
    DEFAULT_HTTP_TIMEOUT_SECONDS,
    HTTP_USER_AGENT,
    SenderAction,
)
from chatrelay.core.channels.base_channel import BaseChannel, DeliveryResult
from chatrelay.exceptions.base_exceptions import DeliveryError
from chatrelay.models.replies import (
    GenericCardReply,
    ImageReply,
    OutboundReply,
    PayloadReply,
    QuickReplyReply,
    TextReply,
    VideoReply,
)
from chatrelay.models.types import RecipientId
from chatrelay.utils.metrics import RelayMetrics


class MessengerChannel(BaseChannel):
    """Messenger Send API channel."""

    def __init__(
            self,
            page_token: str,
            graph_api_base_url: str = DEFAULT_GRAPH_API_BASE_URL,
            graph_api_version: str = DEFAULT_GRAPH_API_VERSION,
            timeout_seconds: float = DEFAULT_HTTP_TIMEOUT_SECONDS,
            http_client: Optional[httpx.AsyncClient] = None,
            metrics: Optional[RelayMetrics] = None
    ):
        super().__init__(metrics)
        self.page_token = page_token
        self.send_api_url = f"{graph_api_base_url.rstrip('/')}/{graph_api_version}/me/messages"

        self._owns_client = http_client is None
        self.http_client = http_client or httpx.AsyncClient(
            timeout=timeout_seconds,
            headers={"User-Agent": HTTP_USER_AGENT},
        )

        self.logger.info("Messenger channel initialized", send_api_url=self.send_api_url)

    @property
    def channel_name(self) -> str:
        return "messenger"

    def format_message(self, reply: OutboundReply) -> Dict[str, Any]:
        """Build the ``message`` object of a Send API call."""
        if isinstance(reply, TextReply):
            return {"text": reply.text}

        if isinstance(reply, ImageReply):
            return {
                "attachment": {
                    "type": "image",
                    "payload": {"url": reply.url}
                }
            }

        if isinstance(reply, VideoReply):
            return {
                "attachment": {
                    "type": "template",
                    "payload": {
                        "template_type": "media",
                        "elements": [e.model_dump() for e in reply.elements]
                    }
                }
            }

        if isinstance(reply, QuickReplyReply):
            return {
                "text": reply.text,
                "metadata": reply.metadata,
                "quick_replies": [r.model_dump() for r in reply.replies]
            }

        if isinstance(reply, GenericCardReply):
            return {
                "attachment": {
                    "type": "template",
                    "payload": {
                        "template_type": "generic",
                        "elements": [e.model_dump(exclude_none=True) for e in reply.elements]
                    }
                }
            }

        if isinstance(reply, PayloadReply):
            return dict(reply.message)

        raise TypeError(f"Unsupported reply type: {type(reply).__name__}")

    async def send_reply(self, recipient_id: RecipientId, reply: OutboundReply) -> DeliveryResult:
        """Send one reply to a Messenger user."""
        body = {
            "recipient": {"id": recipient_id},
            "message": self.format_message(reply)
        }
        return await self._deliver(recipient_id, body, kind=reply.type)

    async def send_sender_action(
            self,
            recipient_id: RecipientId,
            action: SenderAction
    ) -> DeliveryResult:
        """Send a typing/seen indicator."""
        body = {
            "recipient": {"id": recipient_id},
            "sender_action": action.value
        }
        return await self._deliver(recipient_id, body, kind=action.value)

    async def _deliver(self, recipient_id: RecipientId, body: Dict[str, Any], kind: str) -> DeliveryResult:
        start_time = time.monotonic()

        try:
            data = await self._post(recipient_id, body)
        except DeliveryError as e:
            e.log_error(self.logger, kind=kind)
            return self._create_error_result(
                recipient_id,
                kind=kind,
                error_code=e.error_code,
                error_message=e.message,
                status_code=e.send_api_status_code,
                processing_time_ms=self._calculate_processing_time(start_time)
            )

        message_id = data.get("message_id")
        if message_id:
            self.logger.info(
                "Successfully sent message",
                message_id=message_id,
                recipient_id=data.get("recipient_id", recipient_id)
            )
        else:
            self.logger.debug(
                "Successfully called Send API",
                recipient_id=data.get("recipient_id", recipient_id),
                kind=kind
            )

        return self._create_success_result(
            recipient_id,
            kind=kind,
            message_id=message_id,
            status_code=200,
            processing_time_ms=self._calculate_processing_time(start_time)
        )

    async def _post(self, recipient_id: RecipientId, body: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = await self.http_client.post(
                self.send_api_url,
                params={"access_token": self.page_token},
                json=body,
            )
        except httpx.HTTPError as e:
            raise DeliveryError(
                f"Send API request failed: {e}",
                recipient_id=recipient_id,
                caused_by=e
            ) from e

        if not response.is_success:
            raise DeliveryError(
                f"Send API answered HTTP {response.status_code}",
                recipient_id=recipient_id,
                status_code=response.status_code,
                response_body=_error_body(response)
            )

        try:
            return response.json()
        except ValueError:
            return {}

    async def close(self) -> None:
        if self._owns_client:
            await self.http_client.aclose()


def _error_body(response: httpx.Response) -> Any:
    try:
        return response.json().get("error", response.text[:500])
    except (ValueError, AttributeError):
        return response.text[:500]
