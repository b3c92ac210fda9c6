import json

import pytest

from chatrelay.config.constants import CLARIFICATION_TEXT
from chatrelay.core.actions import ReplyTemplates, create_default_registry
from chatrelay.core.actions.templates import (
    CardButtonTemplate,
    CardTemplate,
    build_card_elements,
    cards_from_messages,
    classify_button,
)
from chatrelay.exceptions.base_exceptions import ConfigError
from chatrelay.models.nlu import NLUResult
from chatrelay.models.replies import (
    GenericCardReply,
    ImageReply,
    PostbackButton,
    QuickReplyReply,
    TextReply,
    VideoReply,
    WebUrlButton,
)


@pytest.fixture
def registry():
    return create_default_registry()


def test_default_registry_knows_builtin_actions(registry):
    assert registry.actions == [
        "fb-send-image",
        "send-carousel",
        "send-quick-reply",
        "send-text",
        "send-video",
    ]


def test_send_text_uses_template_text(registry):
    replies = registry.dispatch("send-text", NLUResult(action="send-text"))

    assert replies == [TextReply(text="This is example of Text message.")]


def test_send_image_video_and_quick_reply(registry):
    image, = registry.dispatch("fb-send-image", NLUResult(action="fb-send-image"))
    video, = registry.dispatch("send-video", NLUResult(action="send-video"))
    quick, = registry.dispatch("send-quick-reply", NLUResult(action="send-quick-reply"))

    assert isinstance(image, ImageReply)
    assert image.url.startswith("https://")

    assert isinstance(video, VideoReply)
    assert video.elements[0].media_type == "video"
    assert video.elements[0].buttons[0].type == "web_url"

    assert isinstance(quick, QuickReplyReply)
    assert quick.text == "Choose the options"
    assert [r.title for r in quick.replies] == ["Example 1", "Example 2", "Example 3"]


def test_template_carousel_classifies_link_and_postback_buttons(registry):
    reply, = registry.dispatch("send-carousel", NLUResult(action="send-carousel"))

    assert isinstance(reply, GenericCardReply)
    assert len(reply.elements) == 3
    link, postback = reply.elements[0].buttons
    assert link == WebUrlButton(title="View Website", url="https://example.com")
    assert postback == PostbackButton(title="Start Chatting", payload="PAYLOAD EXAMPLE")


def test_provider_cards_take_precedence_over_templates(registry):
    result = NLUResult(
        action="send-carousel",
        fulfillment_messages=[
            {"type": 0, "speech": "Here you go"},
            {
                "type": 1,
                "title": "Red hat",
                "subtitle": "Warm",
                "imageUrl": "https://img.example.com/red.png",
                "buttons": [{"text": "Buy", "postback": "BUY_RED"}],
            },
        ],
    )

    reply, = registry.dispatch("send-carousel", result)

    assert len(reply.elements) == 1
    element = reply.elements[0]
    assert element.title == "Red hat"
    assert element.image_url == "https://img.example.com/red.png"
    assert element.buttons == [PostbackButton(title="Buy", payload="BUY_RED")]


def test_dialogflow_card_messages_are_collected():
    cards = cards_from_messages([
        {"card": {"title": "Blue hat", "image_uri": "https://img.example.com/blue.png",
                  "buttons": [{"text": "Site", "postback": "https://shop.example.com"}]}},
        {"text": {"text": ["ignored"]}},
    ])

    elements = build_card_elements(cards)

    assert [e.title for e in elements] == ["Blue hat"]
    assert elements[0].image_url == "https://img.example.com/blue.png"
    assert elements[0].buttons == [WebUrlButton(title="Site", url="https://shop.example.com")]


def test_explicit_button_type_wins_over_prefix():
    button = CardButtonTemplate(text="Token", postback="https://not-a-link", type="postback")

    assert classify_button(button) == PostbackButton(title="Token", payload="https://not-a-link")


def test_legacy_postback_starting_with_http_becomes_a_link():
    # Known limitation of prefix classification for untyped buttons
    button = CardButtonTemplate(text="Token", postback="httpbin-token")

    assert classify_button(button) == WebUrlButton(title="Token", url="httpbin-token")


def test_unknown_action_echoes_text_or_asks_for_clarification(registry):
    assert registry.dispatch("input.unknown", NLUResult(fulfillment_text="Sure")) == [TextReply(text="Sure")]
    assert registry.dispatch("input.unknown", NLUResult()) == [TextReply(text=CLARIFICATION_TEXT)]


def test_registry_accepts_new_actions_as_decorator(registry):
    @registry.register("send-map")
    def send_map(result, templates):
        return [TextReply(text=f"map of {result.parameters['city']}")]

    replies = registry.dispatch("send-map", NLUResult(action="send-map", parameters={"city": "Oslo"}))

    assert "send-map" in registry
    assert registry.get("send-map") is send_map
    assert replies == [TextReply(text="map of Oslo")]


def test_templates_from_file_override_defaults(tmp_path):
    path = tmp_path / "templates.json"
    path.write_text(json.dumps({
        "text": "Custom text",
        "carousel": [{"title": "Only card", "buttons": [{"text": "Go", "postback": "GO"}]}],
    }))

    templates = ReplyTemplates.from_file(path)
    registry = create_default_registry(templates)

    assert registry.dispatch("send-text", NLUResult()) == [TextReply(text="Custom text")]
    assert templates.quick_reply_text == "Choose the options"
    reply, = registry.dispatch("send-carousel", NLUResult())
    assert [e.title for e in reply.elements] == ["Only card"]


def test_templates_from_file_rejects_unknown_keys(tmp_path):
    path = tmp_path / "templates.json"
    path.write_text(json.dumps({"txet": "typo"}))

    with pytest.raises(ConfigError):
        ReplyTemplates.from_file(path)


def test_templates_from_missing_file(tmp_path):
    with pytest.raises(ConfigError) as exc_info:
        ReplyTemplates.from_file(tmp_path / "missing.json")

    assert exc_info.value.details["path"].endswith("missing.json")


def test_card_template_accepts_camel_case_image_url():
    card = CardTemplate.model_validate({"title": "T", "imageUrl": "https://img.example.com/t.png"})

    assert card.image_url == "https://img.example.com/t.png"


@pytest.mark.parametrize("target, button_type", [
    ("https://example.com", WebUrlButton),
    ("PAYLOAD_X", PostbackButton),
])
def test_every_provider_card_button_is_classified(registry, target, button_type):
    cards = [
        {"type": 1, "title": f"Card {i}", "buttons": [{"text": "Open", "postback": target}]}
        for i in range(4)
    ]

    reply, = registry.dispatch("send-carousel", NLUResult(action="send-carousel", fulfillment_messages=cards))

    buttons = [b for element in reply.elements for b in element.buttons]
    assert len(buttons) == 4
    assert all(isinstance(b, button_type) for b in buttons)
