import pytest
from fastapi.testclient import TestClient

from chatrelay.config.constants import GREETING_TEXT, PROVIDER_FALLBACK_TEXT
from chatrelay.core.sessions import SessionStore
from chatrelay.main import create_app
from chatrelay.models.nlu import NLUResult


def messaging_event(sender="user-1", **message):
    return {
        "sender": {"id": sender},
        "recipient": {"id": "page-1"},
        "timestamp": 1527847200000,
        "message": {"mid": "mid.in", **message},
    }


def webhook_body(*events, object="page"):
    return {"object": object, "entry": [{"id": "page-1", "time": 1527847200000, "messaging": list(events)}]}


@pytest.fixture
def session_store():
    return SessionStore()


@pytest.fixture
def app(settings, fake_nlu, messenger_channel, session_store, metrics):
    return create_app(
        settings=settings,
        nlu_client=fake_nlu,
        channel=messenger_channel,
        session_store=session_store,
        metrics=metrics,
    )


@pytest.fixture
def client(app):
    return TestClient(app)


def test_injected_components_are_used(app, session_store, fake_nlu, messenger_channel, metrics):
    assert len(session_store) == 0
    assert app.state.session_store is session_store
    assert app.state.nlu_client is fake_nlu
    assert app.state.channel is messenger_channel
    assert app.state.metrics is metrics


def test_index_greets(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.text == GREETING_TEXT


def test_verification_echoes_challenge(client):
    response = client.get("/webhook/", params={
        "hub.mode": "subscribe",
        "hub.verify_token": "verify-me",
        "hub.challenge": "challenge-123",
    })

    assert response.status_code == 200
    assert response.text == "challenge-123"


def test_verification_rejects_wrong_token(client):
    response = client.get("/webhook/", params={
        "hub.mode": "subscribe",
        "hub.verify_token": "wrong",
        "hub.challenge": "challenge-123",
    })

    assert response.status_code == 403


def test_verification_rejects_missing_params(client):
    assert client.get("/webhook/").status_code == 403


def test_text_message_gets_answered(client, fake_nlu, send_api, session_store):
    response = client.post("/api-ai/", json=webhook_body(messaging_event(text="hello")))

    assert response.status_code == 200
    assert response.content == b""
    assert fake_nlu.calls == [(session_store.get("user-1"), "hello")]
    assert send_api.message_bodies == [{"recipient": {"id": "user-1"}, "message": {"text": "Hi there!"}}]


def test_same_user_keeps_session(client, fake_nlu):
    client.post("/api-ai/", json=webhook_body(messaging_event(text="one")))
    client.post("/api-ai/", json=webhook_body(messaging_event(text="two")))

    (first, _), (second, _) = fake_nlu.calls
    assert first == second


def test_batch_answers_every_message(client, fake_nlu, send_api):
    body = webhook_body(
        messaging_event(sender="user-1", text="hi"),
        messaging_event(sender="user-2", text="hey"),
    )

    client.post("/api-ai/", json=body)

    assert sorted(text for _, text in fake_nlu.calls) == ["hey", "hi"]
    assert sorted(b["recipient"]["id"] for b in send_api.message_bodies) == ["user-1", "user-2"]


def test_attachment_message_queries_by_type(client, fake_nlu):
    event = messaging_event(attachments=[{"type": "image", "payload": {"url": "https://img.example.com/x.png"}}])

    client.post("/api-ai/", json=webhook_body(event))

    assert [text for _, text in fake_nlu.calls] == ["image attachment"]


def test_non_page_object_is_acknowledged_and_ignored(client, fake_nlu, send_api):
    response = client.post("/api-ai/", json=webhook_body(messaging_event(text="hello"), object="user"))

    assert response.status_code == 200
    assert fake_nlu.calls == []
    assert send_api.requests == []


def test_echo_and_non_message_events_are_dropped(client, fake_nlu, metrics):
    delivery = {"sender": {"id": "user-1"}, "recipient": {"id": "page-1"}, "delivery": {"mids": ["mid.1"]}}
    echo = messaging_event(text="sent by page", is_echo=True, app_id=1)

    response = client.post("/api-ai/", json=webhook_body(delivery, echo))

    assert response.status_code == 200
    assert fake_nlu.calls == []
    assert b'chat_relay_webhook_events_total{outcome="dropped"} 2.0' in metrics.render()


def test_malformed_body_is_acknowledged(client, fake_nlu):
    response = client.post("/api-ai/", content=b"not json", headers={"Content-Type": "application/json"})

    assert response.status_code == 200
    assert fake_nlu.calls == []


def test_provider_failure_sends_fallback(settings, failing_nlu, messenger_channel, send_api):
    client = TestClient(create_app(settings=settings, nlu_client=failing_nlu, channel=messenger_channel))

    response = client.post("/api-ai/", json=webhook_body(messaging_event(text="hello")))

    assert response.status_code == 200
    assert [b["message"]["text"] for b in send_api.message_bodies] == [PROVIDER_FALLBACK_TEXT]


def test_action_reply_is_sent_as_template(client, fake_nlu, send_api):
    fake_nlu.result = NLUResult(action="send-carousel")

    client.post("/api-ai/", json=webhook_body(messaging_event(text="hats")))

    message, = [b["message"] for b in send_api.message_bodies]
    assert message["attachment"]["payload"]["template_type"] == "generic"


def test_health_reports_sessions(client):
    client.post("/api-ai/", json=webhook_body(messaging_event(text="hello")))

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "service": "chat-relay", "version": "1.0.0", "sessions": 1}


def test_metrics_endpoint(client):
    client.post("/api-ai/", json=webhook_body(messaging_event(text="hello")))

    response = client.get("/metrics")

    assert response.status_code == 200
    assert "chat_relay_webhook_events_total" in response.text
    assert 'chat_relay_nlu_queries_total{backend="fake",outcome="success"} 1.0' in response.text


def test_metrics_can_be_disabled(settings, fake_nlu, messenger_channel):
    settings.METRICS_ENABLED = False
    client = TestClient(create_app(settings=settings, nlu_client=fake_nlu, channel=messenger_channel))

    assert client.get("/metrics").status_code == 404


def test_request_id_is_returned(client):
    response = client.get("/", headers={"X-Request-ID": "req-42"})

    assert response.headers["X-Request-ID"] == "req-42"


def test_malformed_event_does_not_drop_the_rest_of_the_batch(client, fake_nlu, send_api, metrics):
    optin = {"recipient": {"id": "page-1"}, "timestamp": 1527847200000, "optin": {"ref": "checkbox"}}

    response = client.post("/api-ai/", json=webhook_body(optin, messaging_event(text="hello")))

    assert response.status_code == 200
    assert [text for _, text in fake_nlu.calls] == ["hello"]
    assert [b["message"]["text"] for b in send_api.message_bodies] == ["Hi there!"]
    assert b'chat_relay_webhook_events_total{outcome="dropped"} 1.0' in metrics.render()
    assert b'chat_relay_webhook_events_total{outcome="accepted"} 1.0' in metrics.render()
