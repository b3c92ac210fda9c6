"""
Inbound Messenger webhook schemas.

Only the fields the relay reads are declared; anything else the
platform sends is ignored.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from chatrelay.models.types import UserId


class _WebhookModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class MessengerUser(_WebhookModel):
    """Page-scoped participant reference."""
    id: str


class Attachment(_WebhookModel):
    """Attachment sent by the user (image, audio, location...)."""
    type: str
    payload: Optional[Dict[str, Any]] = None
    title: Optional[str] = None
    url: Optional[str] = None


class QuickReplyTap(_WebhookModel):
    payload: str


class MessagePayload(_WebhookModel):
    """The ``message`` object of a messaging event."""
    mid: Optional[str] = None
    text: Optional[str] = None
    attachments: List[Attachment] = Field(default_factory=list)
    quick_reply: Optional[QuickReplyTap] = None
    is_echo: bool = False
    app_id: Optional[int] = None
    metadata: Optional[str] = None


class MessagingEvent(_WebhookModel):
    """One entry of ``entry[].messaging``."""
    sender: MessengerUser
    recipient: MessengerUser
    timestamp: Optional[int] = None
    message: Optional[MessagePayload] = None
    postback: Optional[Dict[str, Any]] = None


class PageEntry(_WebhookModel):
    """One entry of a webhook body; its events are validated one by one."""
    id: Optional[str] = None
    time: Optional[int] = None
    messaging: List[Dict[str, Any]] = Field(default_factory=list)


class WebhookPayload(_WebhookModel):
    """Body of ``POST /api-ai/``."""
    object: Optional[str] = None
    entry: List[PageEntry] = Field(default_factory=list)


class InboundMessage(BaseModel):
    """A user message flattened out of its webhook envelope."""
    sender_id: UserId
    recipient_id: str
    timestamp: Optional[int] = None
    text: Optional[str] = None
    attachments: List[Attachment] = Field(default_factory=list)

    @classmethod
    def from_event(cls, event: MessagingEvent) -> Optional["InboundMessage"]:
        """Build from a messaging event, or None when it carries no message."""
        if event.message is None:
            return None

        return cls(
            sender_id=event.sender.id,
            recipient_id=event.recipient.id,
            timestamp=event.timestamp,
            text=event.message.text,
            attachments=event.message.attachments,
        )
