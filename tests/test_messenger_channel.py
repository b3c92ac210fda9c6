import asyncio

import pytest

from chatrelay.config.constants import SenderAction
from chatrelay.models.replies import (
    CardElement,
    GenericCardReply,
    ImageReply,
    MediaElement,
    PayloadReply,
    PostbackButton,
    QuickReplyOption,
    QuickReplyReply,
    TextReply,
    VideoReply,
    WebUrlButton,
)


def test_text_reply_envelope(messenger_channel, send_api):
    result = asyncio.run(messenger_channel.send_reply("user-1", TextReply(text="Hi there!")))

    assert result.success
    assert result.message_id == "mid.1"
    assert result.kind == "text"

    request, = send_api.requests
    assert request.url.path == "/v3.0/me/messages"
    assert request.url.params["access_token"] == "page-token"
    assert send_api.bodies == [{"recipient": {"id": "user-1"}, "message": {"text": "Hi there!"}}]


def test_sender_action_envelope(messenger_channel, send_api):
    result = asyncio.run(messenger_channel.send_sender_action("user-1", SenderAction.TYPING_ON))

    assert result.success
    assert send_api.bodies == [{"recipient": {"id": "user-1"}, "sender_action": "typing_on"}]


@pytest.mark.parametrize("reply, message", [
    (
        ImageReply(url="https://img.example.com/a.png"),
        {"attachment": {"type": "image", "payload": {"url": "https://img.example.com/a.png"}}},
    ),
    (
        VideoReply(elements=[MediaElement(url="https://video.example.com/1")]),
        {"attachment": {"type": "template", "payload": {
            "template_type": "media",
            "elements": [{"media_type": "video", "url": "https://video.example.com/1", "buttons": []}],
        }}},
    ),
    (
        QuickReplyReply(text="Pick", replies=[QuickReplyOption(title="A", payload="A")]),
        {"text": "Pick", "metadata": "", "quick_replies": [
            {"content_type": "text", "title": "A", "payload": "A"},
        ]},
    ),
    (
        PayloadReply(message={"text": "verbatim", "metadata": "x"}),
        {"text": "verbatim", "metadata": "x"},
    ),
])
def test_message_formats(messenger_channel, reply, message):
    assert messenger_channel.format_message(reply) == message


def test_generic_template_omits_missing_fields(messenger_channel):
    reply = GenericCardReply(elements=[
        CardElement(
            title="Welcome!",
            buttons=[
                WebUrlButton(title="View Website", url="https://example.com"),
                PostbackButton(title="Start Chatting", payload="PAYLOAD EXAMPLE"),
            ],
        )
    ])

    message = messenger_channel.format_message(reply)

    assert message == {"attachment": {"type": "template", "payload": {
        "template_type": "generic",
        "elements": [{
            "title": "Welcome!",
            "buttons": [
                {"type": "web_url", "title": "View Website", "url": "https://example.com"},
                {"type": "postback", "title": "Start Chatting", "payload": "PAYLOAD EXAMPLE"},
            ],
        }],
    }}}


def test_send_api_error_is_reported_not_raised_or_retried(messenger_channel, send_api, metrics):
    send_api.status_code = 400

    result = asyncio.run(messenger_channel.send_reply("user-1", TextReply(text="Hi")))

    assert not result.success
    assert result.status_code == 400
    assert result.error_code == "DELIVERY_ERROR"
    assert len(send_api.requests) == 1
    assert b'chat_relay_send_api_calls_total{kind="text",outcome="failure"} 1.0' in metrics.render()


def test_send_replies_keeps_order(messenger_channel, send_api):
    replies = [TextReply(text="one"), TextReply(text="two")]

    results = asyncio.run(messenger_channel.send_replies("user-1", replies))

    assert [r.success for r in results] == [True, True]
    assert [b["message"]["text"] for b in send_api.message_bodies] == ["one", "two"]
