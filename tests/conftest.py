import json
from typing import List

import httpx
import pytest

from chatrelay.config.settings import Settings
from chatrelay.core.channels.base_channel import BaseChannel, DeliveryResult
from chatrelay.core.channels.messenger_channel import MessengerChannel
from chatrelay.core.nlu.base import NLUClient
from chatrelay.exceptions.base_exceptions import ProviderError
from chatrelay.models.nlu import NLUResult
from chatrelay.utils.metrics import RelayMetrics


class FakeNLUClient(NLUClient):
    """Answers every query with a fixed result, or raises a fixed error."""

    name = "fake"

    def __init__(self, result=None, error=None):
        super().__init__()
        self.result = result or NLUResult(fulfillment_text="Hi there!")
        self.error = error
        self.calls = []

    async def query(self, conversation_id, text):
        self.calls.append((conversation_id, text))
        if self.error is not None:
            raise self.error
        return self.result


class RecordingChannel(BaseChannel):
    """Keeps every reply and sender action instead of sending them."""

    def __init__(self):
        super().__init__()
        self.replies = []
        self.actions = []

    @property
    def channel_name(self):
        return "recording"

    def format_message(self, reply):
        return reply.model_dump()

    async def send_reply(self, recipient_id, reply) -> DeliveryResult:
        self.replies.append((recipient_id, reply))
        return self._create_success_result(recipient_id, kind=reply.type)

    async def send_sender_action(self, recipient_id, action) -> DeliveryResult:
        self.actions.append((recipient_id, action.value))
        return self._create_success_result(recipient_id, kind=action.value)


class SendApiRecorder:
    """httpx MockTransport handler standing in for the Graph Send API."""

    def __init__(self, status_code: int = 200):
        self.status_code = status_code
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code >= 400:
            return httpx.Response(
                self.status_code,
                json={"error": {"message": "Invalid OAuth access token.", "code": 190}}
            )
        body = json.loads(request.content)
        return httpx.Response(
            200,
            json={"recipient_id": body["recipient"]["id"], "message_id": "mid.1"}
        )

    @property
    def bodies(self):
        return [json.loads(r.content) for r in self.requests]

    @property
    def message_bodies(self):
        return [b for b in self.bodies if "message" in b]


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        FB_VERIFY_TOKEN="verify-me",
        FB_PAGE_TOKEN="page-token",
        API_AI_CLIENT_ACCESS_TOKEN="apiai-token",
        APIAI_PROJECT_ID="demo-project",
        APIAI_SESSION_ID="console-session",
        ACTION_TEMPLATES_FILE=None,
    )


@pytest.fixture
def fake_nlu():
    return FakeNLUClient()


@pytest.fixture
def failing_nlu():
    return FakeNLUClient(error=ProviderError("API.ai answered HTTP 500", provider="fake", status_code=500))


@pytest.fixture
def recording_channel():
    return RecordingChannel()


@pytest.fixture
def send_api():
    return SendApiRecorder()


@pytest.fixture
def metrics():
    return RelayMetrics()


@pytest.fixture
def messenger_channel(send_api, metrics):
    return MessengerChannel(
        page_token="page-token",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(send_api)),
        metrics=metrics,
    )
