"""
Turn an NLU result into the replies to deliver.
"""

from typing import List

from chatrelay.config.constants import CLARIFICATION_TEXT
from chatrelay.core.actions.registry import ActionRegistry
from chatrelay.models.nlu import NLUResult
from chatrelay.models.replies import OutboundReply, PayloadReply, TextReply
from chatrelay.utils.logger import get_logger

logger = get_logger(__name__)


def _facebook_payload_replies(facebook) -> List[OutboundReply]:
    items = facebook if isinstance(facebook, list) else [facebook]
    replies: List[OutboundReply] = []
    for item in items:
        if isinstance(item, dict):
            replies.append(PayloadReply(message=item))
        elif isinstance(item, str) and item:
            replies.append(TextReply(text=item))
    return replies


def resolve_replies(result: NLUResult, registry: ActionRegistry) -> List[OutboundReply]:
    """
    Pick the replies for one NLU result.

    Order of precedence: clarification when the provider produced neither
    text nor action, then the action handler, then a Facebook payload
    carried in the fulfillment data, then the plain fulfillment text.
    The result is never empty and never holds an empty text.
    """
    if not result.fulfillment_text and not result.has_action:
        logger.info("Unknown query", resolved_query=result.resolved_query)
        return [TextReply(text=CLARIFICATION_TEXT)]

    if result.has_action:
        replies = registry.dispatch(result.action, result)
        if replies:
            return replies

    data = result.fulfillment_data or {}
    if data.get("facebook"):
        replies = _facebook_payload_replies(data["facebook"])
        if replies:
            return replies

    return [TextReply(text=result.fulfillment_text or CLARIFICATION_TEXT)]
