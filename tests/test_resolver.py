from chatrelay.config.constants import CLARIFICATION_TEXT
from chatrelay.core.actions import create_default_registry, resolve_replies
from chatrelay.models.nlu import NLUResult
from chatrelay.models.replies import GenericCardReply, PayloadReply, TextReply


def resolve(result):
    return resolve_replies(result, create_default_registry())


def test_no_text_and_no_action_asks_for_clarification():
    assert resolve(NLUResult()) == [TextReply(text=CLARIFICATION_TEXT)]


def test_blank_action_counts_as_no_action():
    result = NLUResult(action="  ", fulfillment_text="")

    assert result.action is None
    assert resolve(result) == [TextReply(text=CLARIFICATION_TEXT)]


def test_plain_fulfillment_text_is_echoed():
    assert resolve(NLUResult(fulfillment_text="Hi there!")) == [TextReply(text="Hi there!")]


def test_known_action_is_dispatched():
    replies = resolve(NLUResult(action="send-carousel", fulfillment_text="ignored"))

    assert len(replies) == 1
    assert isinstance(replies[0], GenericCardReply)


def test_unknown_action_without_text_never_sends_empty_text():
    replies = resolve(NLUResult(action="smalltalk.greetings"))

    assert replies == [TextReply(text=CLARIFICATION_TEXT)]


def test_facebook_payload_is_forwarded():
    message = {"attachment": {"type": "template", "payload": {"template_type": "button"}}}
    result = NLUResult(fulfillment_text="fallback", fulfillment_data={"facebook": message})

    assert resolve(result) == [PayloadReply(message=message)]


def test_facebook_string_payload_becomes_text():
    result = NLUResult(fulfillment_text="fallback", fulfillment_data={"facebook": "From data"})

    assert resolve(result) == [TextReply(text="From data")]


def test_facebook_payload_list_yields_one_reply_each():
    result = NLUResult(
        fulfillment_text="fallback",
        fulfillment_data={"facebook": [{"text": "one"}, {"text": "two"}]},
    )

    assert resolve(result) == [PayloadReply(message={"text": "one"}), PayloadReply(message={"text": "two"})]


def test_other_fulfillment_data_is_ignored():
    result = NLUResult(fulfillment_text="Hello", fulfillment_data={"slack": {"text": "x"}})

    assert resolve(result) == [TextReply(text="Hello")]
