"""
Built-in action handlers and the default registry.
"""

from typing import List, Optional

from chatrelay.core.actions.registry import ActionRegistry
from chatrelay.core.actions.templates import (
    ReplyTemplates,
    build_card_elements,
    cards_from_messages,
)
from chatrelay.models.nlu import NLUResult
from chatrelay.models.replies import (
    GenericCardReply,
    ImageReply,
    OutboundReply,
    QuickReplyReply,
    TextReply,
    VideoReply,
)


def send_text(result: NLUResult, templates: ReplyTemplates) -> List[OutboundReply]:
    return [TextReply(text=templates.text)]


def send_image(result: NLUResult, templates: ReplyTemplates) -> List[OutboundReply]:
    return [ImageReply(url=templates.image_url)]


def send_video(result: NLUResult, templates: ReplyTemplates) -> List[OutboundReply]:
    return [VideoReply(elements=list(templates.video_elements))]


def send_quick_reply(result: NLUResult, templates: ReplyTemplates) -> List[OutboundReply]:
    return [
        QuickReplyReply(
            text=templates.quick_reply_text,
            replies=list(templates.quick_replies),
        )
    ]


def send_carousel(result: NLUResult, templates: ReplyTemplates) -> List[OutboundReply]:
    """Cards sent by the provider win over the template carousel."""
    cards = cards_from_messages(result.fulfillment_messages) or templates.carousel
    return [GenericCardReply(elements=build_card_elements(cards))]


DEFAULT_ACTIONS = {
    "send-text": send_text,
    "fb-send-image": send_image,
    "send-video": send_video,
    "send-quick-reply": send_quick_reply,
    "send-carousel": send_carousel,
}


def create_default_registry(templates: Optional[ReplyTemplates] = None) -> ActionRegistry:
    """Registry preloaded with the built-in actions."""
    registry = ActionRegistry(templates)
    for action, handler in DEFAULT_ACTIONS.items():
        registry.register(action, handler)
    return registry
