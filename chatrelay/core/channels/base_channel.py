"""
Abstract base class defining the channel interface and common functionality.

A channel delivers outbound replies to one front-end (Messenger, the
console). Delivery failures are reported through ``DeliveryResult``;
channels never raise them to the caller.
"""

import time
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from chatrelay.config.constants import SenderAction
from chatrelay.models.replies import OutboundReply
from chatrelay.models.types import RecipientId
from chatrelay.utils.logger import get_logger
from chatrelay.utils.metrics import RelayMetrics


class DeliveryResult(BaseModel):
    """Outcome of one delivery attempt."""

    success: bool
    channel: str
    recipient_id: RecipientId
    kind: str
    status_code: Optional[int] = None
    message_id: Optional[str] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    # Error information
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    processing_time_ms: Optional[int] = None


class BaseChannel(ABC):
    """Abstract base class for all channel implementations."""

    def __init__(self, metrics: Optional[RelayMetrics] = None):
        self.logger = get_logger(self.__class__.__name__)
        self.metrics = metrics

    @property
    @abstractmethod
    def channel_name(self) -> str:
        """Return the channel name used in logs and results."""

    @abstractmethod
    def format_message(self, reply: OutboundReply) -> Dict[str, Any]:
        """
        Format a reply for the channel.

        Args:
            reply: Reply to format

        Returns:
            Channel-specific message body
        """

    @abstractmethod
    async def send_reply(self, recipient_id: RecipientId, reply: OutboundReply) -> DeliveryResult:
        """
        Deliver one reply.

        Args:
            recipient_id: Channel-specific recipient identifier
            reply: Reply to deliver

        Returns:
            DeliveryResult, also for failed deliveries
        """

    async def send_sender_action(
            self,
            recipient_id: RecipientId,
            action: SenderAction
    ) -> DeliveryResult:
        """Show a typing indicator; channels without one report success."""
        return self._create_success_result(recipient_id, kind=action.value)

    async def send_replies(
            self,
            recipient_id: RecipientId,
            replies: List[OutboundReply]
    ) -> List[DeliveryResult]:
        """Deliver replies one by one, in order."""
        results = []
        for reply in replies:
            results.append(await self.send_reply(recipient_id, reply))
        return results

    def _record(self, kind: str, success: bool) -> None:
        if self.metrics is not None:
            self.metrics.record_send(kind, success)

    def _create_error_result(
            self,
            recipient_id: RecipientId,
            kind: str,
            error_code: str,
            error_message: str,
            status_code: Optional[int] = None,
            processing_time_ms: Optional[int] = None
    ) -> DeliveryResult:
        """Create standardized error result."""
        self._record(kind, False)
        return DeliveryResult(
            success=False,
            channel=self.channel_name,
            recipient_id=recipient_id,
            kind=kind,
            status_code=status_code,
            error_code=error_code,
            error_message=error_message,
            processing_time_ms=processing_time_ms,
        )

    def _create_success_result(
            self,
            recipient_id: RecipientId,
            kind: str,
            message_id: Optional[str] = None,
            status_code: Optional[int] = None,
            processing_time_ms: Optional[int] = None
    ) -> DeliveryResult:
        """Create standardized success result."""
        self._record(kind, True)
        return DeliveryResult(
            success=True,
            channel=self.channel_name,
            recipient_id=recipient_id,
            kind=kind,
            message_id=message_id,
            status_code=status_code,
            processing_time_ms=processing_time_ms,
        )

    @staticmethod
    def _calculate_processing_time(start_time: float) -> int:
        """Milliseconds elapsed since a ``time.monotonic()`` reading."""
        return int((time.monotonic() - start_time) * 1000)

    async def close(self) -> None:
        """Release network resources held by the channel."""

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(channel={self.channel_name})"
