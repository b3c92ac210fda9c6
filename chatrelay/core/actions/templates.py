"""
Canned reply content for the built-in actions.

The defaults are demo content; deployments override them with a JSON
file named by ``ACTION_TEMPLATES_FILE``. Carousel cards are authored in
the API.ai card shape (``{text, postback}`` buttons) so that cards coming
from the provider and cards coming from templates go through the same
conversion.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from chatrelay.config.constants import LINK_TARGET_PREFIX
from chatrelay.exceptions.base_exceptions import ConfigError
from chatrelay.models.replies import (
    Button,
    CardElement,
    MediaElement,
    PostbackButton,
    QuickReplyOption,
    WebUrlButton,
)

DEMO_IMAGE_URL = (
    "https://mir-s3-cdn-cf.behance.net/project_modules/max_1200/881e6651881085.58fd911b65d88.png"
)
DEMO_CARD_IMAGE_URL = (
    "https://www.stepforwardmichigan.org/wp-content/uploads/2017/03/step-foward-fb-1200x628-house.jpg"
)
DEMO_WEBSITE_URL = "https://example.com"


class CardButtonTemplate(BaseModel):
    """
    Card button as authored in API.ai cards.

    ``type`` is optional; when it is missing the target decides: anything
    starting with "http" becomes a link, the rest a postback.
    """
    model_config = ConfigDict(extra="ignore")

    text: str
    postback: str = ""
    type: Optional[Literal["web_url", "postback"]] = None


class CardTemplate(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    title: str
    subtitle: Optional[str] = None
    image_url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("image_url", "imageUrl", "image_uri"),
    )
    buttons: List[CardButtonTemplate] = Field(default_factory=list)


def _demo_card() -> CardTemplate:
    return CardTemplate(
        title="Welcome!",
        subtitle="We have the right hat for everyone.",
        image_url=DEMO_CARD_IMAGE_URL,
        buttons=[
            CardButtonTemplate(text="View Website", postback=DEMO_WEBSITE_URL),
            CardButtonTemplate(text="Start Chatting", postback="PAYLOAD EXAMPLE"),
        ],
    )


class ReplyTemplates(BaseModel):
    """Content used by the built-in action handlers."""
    model_config = ConfigDict(extra="forbid")

    text: str = "This is example of Text message."
    image_url: str = DEMO_IMAGE_URL
    video_elements: List[MediaElement] = Field(default_factory=lambda: [
        MediaElement(
            media_type="video",
            url="https://www.facebook.com/FacebookIndia/videos/1772075119516020/",
            buttons=[WebUrlButton(title="View Website", url=DEMO_WEBSITE_URL)],
        )
    ])
    quick_reply_text: str = "Choose the options"
    quick_replies: List[QuickReplyOption] = Field(default_factory=lambda: [
        QuickReplyOption(title=f"Example {i}", payload=f"Example {i}") for i in (1, 2, 3)
    ])
    carousel: List[CardTemplate] = Field(default_factory=lambda: [_demo_card() for _ in range(3)])

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "ReplyTemplates":
        """
        Load templates from a JSON file; missing keys keep their defaults.

        Raises:
            ConfigError: When the file is unreadable or does not validate
        """
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
            return cls.model_validate(data)
        except (OSError, ValueError, PydanticValidationError) as e:
            raise ConfigError(
                f"Invalid action templates file {path}: {e}",
                details={"path": str(path)},
                caused_by=e
            ) from e


def classify_button(button: CardButtonTemplate) -> Button:
    """Turn an authored card button into a Messenger button."""
    kind = button.type
    if kind is None:
        kind = "web_url" if button.postback.startswith(LINK_TARGET_PREFIX) else "postback"

    if kind == "web_url":
        return WebUrlButton(title=button.text, url=button.postback)
    return PostbackButton(title=button.text, payload=button.postback)


def build_card_elements(cards: List[CardTemplate]) -> List[CardElement]:
    """Convert authored cards into generic template elements."""
    return [
        CardElement(
            title=card.title,
            subtitle=card.subtitle,
            image_url=card.image_url,
            buttons=[classify_button(button) for button in card.buttons],
        )
        for card in cards
    ]


def _is_apiai_card(message: Dict[str, Any]) -> bool:
    # API.ai v1 marks cards with type 1
    return str(message.get("type")) == "1"


def cards_from_messages(messages: List[Dict[str, Any]]) -> List[CardTemplate]:
    """Collect the card messages (API.ai v1 or Dialogflow v2) of a fulfillment."""
    cards = []
    for message in messages:
        if _is_apiai_card(message):
            cards.append(CardTemplate.model_validate(message))
        elif isinstance(message.get("card"), dict):
            cards.append(CardTemplate.model_validate(message["card"]))
    return cards
