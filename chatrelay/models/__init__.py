"""
Models package: inbound webhook schemas, NLU results and outbound replies.
"""

from chatrelay.models.messenger import (
    Attachment,
    InboundMessage,
    MessagingEvent,
    PageEntry,
    WebhookPayload,
)
from chatrelay.models.nlu import NLUResult
from chatrelay.models.replies import (
    Button,
    CardElement,
    GenericCardReply,
    ImageReply,
    MediaElement,
    OutboundReply,
    PayloadReply,
    PostbackButton,
    QuickReplyOption,
    QuickReplyReply,
    TextReply,
    VideoReply,
    WebUrlButton,
)

__all__ = [
    "Attachment",
    "InboundMessage",
    "MessagingEvent",
    "PageEntry",
    "WebhookPayload",
    "NLUResult",
    "Button",
    "CardElement",
    "GenericCardReply",
    "ImageReply",
    "MediaElement",
    "OutboundReply",
    "PayloadReply",
    "PostbackButton",
    "QuickReplyOption",
    "QuickReplyReply",
    "TextReply",
    "VideoReply",
    "WebUrlButton",
]
