"""
Conversation Service

One conversational turn: NLU round trip, reply resolution and delivery
through the configured channel.
"""

from typing import List, Optional

from chatrelay.config.constants import PROVIDER_FALLBACK_TEXT, SenderAction
from chatrelay.core.actions.registry import ActionRegistry
from chatrelay.core.actions.resolver import resolve_replies
from chatrelay.core.channels.base_channel import BaseChannel, DeliveryResult
from chatrelay.core.nlu.base import NLUClient
from chatrelay.exceptions.base_exceptions import ProviderError
from chatrelay.models.replies import OutboundReply, TextReply
from chatrelay.models.types import ConversationId, UserId
from chatrelay.services.base_service import BaseService
from chatrelay.utils.metrics import RelayMetrics


class ConversationService(BaseService):
    """Runs turns against one NLU client and one channel."""

    def __init__(
            self,
            nlu_client: NLUClient,
            registry: ActionRegistry,
            channel: BaseChannel,
            metrics: Optional[RelayMetrics] = None
    ):
        super().__init__()
        self.nlu_client = nlu_client
        self.registry = registry
        self.channel = channel
        self.metrics = metrics

    async def answer(self, conversation_id: ConversationId, text: str) -> List[OutboundReply]:
        """
        Ask the NLU provider and resolve the replies.

        Raises:
            ProviderError: When the provider call fails
        """
        try:
            result = await self.nlu_client.query(conversation_id, text)
        except ProviderError:
            self._record_query(False)
            raise

        self._record_query(True)
        return resolve_replies(result, self.registry)

    async def handle_text(
            self,
            user_id: UserId,
            conversation_id: ConversationId,
            text: str
    ) -> List[DeliveryResult]:
        """
        Run a full turn for a Messenger user.

        Typing indicators are sent as best-effort background tasks: the
        NLU call does not wait for them and their failures are only
        logged. A provider failure turns into the generic fallback text.
        """
        indicators = [
            self.start_best_effort(
                self.channel.send_sender_action(user_id, SenderAction.TYPING_ON),
                label=SenderAction.TYPING_ON.value,
                user_id=user_id
            )
        ]

        try:
            try:
                replies = await self.answer(conversation_id, text)
            except ProviderError as e:
                e.log_error(self.logger, user_id=user_id, conversation_id=conversation_id)
                replies = [TextReply(text=PROVIDER_FALLBACK_TEXT)]
            finally:
                indicators.append(
                    self.start_best_effort(
                        self.channel.send_sender_action(user_id, SenderAction.TYPING_OFF),
                        label=SenderAction.TYPING_OFF.value,
                        user_id=user_id
                    )
                )

            results = await self.channel.send_replies(user_id, replies)
        finally:
            await self.drain_best_effort(indicators)

        self.log_operation(
            "handle_text",
            user_id=user_id,
            conversation_id=conversation_id,
            replies=[r.type for r in replies],
            delivered=sum(1 for r in results if r.success)
        )
        return results

    def _record_query(self, success: bool) -> None:
        if self.metrics is not None:
            self.metrics.record_nlu_query(self.nlu_client.name, success)
