"""
Outbound reply models.

Each reply variant carries exactly what the Messenger envelope for it
needs; the ``type`` field discriminates the union.
"""

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field


class WebUrlButton(BaseModel):
    """Button opening a URL."""
    type: Literal["web_url"] = "web_url"
    title: str
    url: str


class PostbackButton(BaseModel):
    """Button sending an opaque payload back to the webhook."""
    type: Literal["postback"] = "postback"
    title: str
    payload: str


Button = Annotated[Union[WebUrlButton, PostbackButton], Field(discriminator="type")]


class CardElement(BaseModel):
    """One card of a generic template carousel."""
    title: str
    subtitle: Optional[str] = None
    image_url: Optional[str] = None
    buttons: List[Button] = Field(default_factory=list)


class MediaElement(BaseModel):
    """Element of a media template."""
    media_type: Literal["image", "video"] = "video"
    url: str
    buttons: List[Button] = Field(default_factory=list)


class QuickReplyOption(BaseModel):
    content_type: str = "text"
    title: str
    payload: str


class TextReply(BaseModel):
    type: Literal["text"] = "text"
    text: str


class ImageReply(BaseModel):
    type: Literal["image"] = "image"
    url: str


class VideoReply(BaseModel):
    type: Literal["video"] = "video"
    elements: List[MediaElement]


class QuickReplyReply(BaseModel):
    type: Literal["quick_reply"] = "quick_reply"
    text: str
    replies: List[QuickReplyOption]
    metadata: str = ""


class GenericCardReply(BaseModel):
    type: Literal["generic"] = "generic"
    elements: List[CardElement]


class PayloadReply(BaseModel):
    """Provider-authored Messenger message, forwarded verbatim."""
    type: Literal["payload"] = "payload"
    message: Dict[str, Any]


OutboundReply = Annotated[
    Union[TextReply, ImageReply, VideoReply, QuickReplyReply, GenericCardReply, PayloadReply],
    Field(discriminator="type"),
]
