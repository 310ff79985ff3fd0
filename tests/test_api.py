import pytest
from fastapi.testclient import TestClient

from conftest import FakeCompletionProvider, FakeSpeechProvider, FixedRandom, SleepRecorder
from intakebrain.api.dependencies import ServiceContainer
from intakebrain.api.main import create_app
from intakebrain.cache import InMemoryCache
from intakebrain.extraction import ExtractionPolicy, build_orchestrator
from intakebrain.services.chat_service import GREETING, IntakeAssistant
from intakebrain.services.llm_client import OpenAICompletionProvider
from intakebrain.services.session import SessionStore
from intakebrain.services.speech import SpeechService

DESIGNER = {
    "role": "Product Designer",
    "location": "Austin",
    "skills": ["Figma"],
    "qualities": ["works closely with engineers."],
}


def make_services(settings, provider, speech_provider=None):
    cache = InMemoryCache()
    policy = ExtractionPolicy(jitter_min_ms=0, jitter_max_ms=0)
    orchestrator = build_orchestrator(provider, cache, policy, sleep=SleepRecorder(), rng=FixedRandom())
    return ServiceContainer(
        settings=settings,
        cache=cache,
        provider=provider,
        orchestrator=orchestrator,
        assistant=IntakeAssistant(provider),
        speech=SpeechService(speech_provider or FakeSpeechProvider(), settings),
        sessions=SessionStore(orchestrator, debounce_seconds=0),
    )


@pytest.fixture
def provider():
    return FakeCompletionProvider(
        json_responses=[DESIGNER],
        text_responses=["Great. Where will this person be based?"],
    )


@pytest.fixture
def client(settings, provider):
    app = create_app(make_services(settings, provider))
    with TestClient(app) as c:
        yield c


def test_root_and_health(client):
    assert client.get("/").json()["status"] == "running"
    health = client.get("/health").json()
    assert health["status"] == "healthy"
    assert health["cache"] == "InMemoryCache"


# ==========================================
# Chat
# ==========================================

def test_chat_reply(client):
    resp = client.post("/api/v1/chat", json={"messages": [{"role": "user", "content": "A designer"}]})
    assert resp.status_code == 200
    assert resp.json() == {"message": "Great. Where will this person be based?", "preview_ready": False}


def test_chat_stream(client):
    resp = client.post(
        "/api/v1/chat",
        json={"messages": [{"role": "user", "content": "A designer"}], "stream": True},
    )
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/plain")
    assert resp.text.strip() == "Great. Where will this person be based?"


@pytest.mark.parametrize("stream", [False, True])
def test_chat_without_api_key_is_503(settings, stream):
    app = create_app(make_services(settings, OpenAICompletionProvider(None, settings)))
    with TestClient(app) as c:
        resp = c.post("/api/v1/chat", json={"messages": [{"role": "user", "content": "hi"}], "stream": stream})
    assert resp.status_code == 503
    assert resp.json()["error"] == "Service unavailable"


def test_unhandled_error_is_500(settings):
    provider = FakeCompletionProvider(text_responses=[RuntimeError("kaboom")])
    app = create_app(make_services(settings, provider))
    with TestClient(app, raise_server_exceptions=False) as c:
        resp = c.post("/api/v1/chat", json={"messages": [{"role": "user", "content": "hi"}]})
    assert resp.status_code == 500
    assert resp.json()["error"] == "Internal server error"


# ==========================================
# Requirements
# ==========================================

def test_extract_requirements(client):
    resp = client.post(
        "/api/v1/extract-requirements",
        json={
            "messages": [
                {"role": "assistant", "content": GREETING},
                {"role": "user", "content": "A product designer in Austin who knows python"},
            ],
            "existing_requirements": {"industry": ["fintech"]},
        },
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["ai_skipped"] is False
    req = body["extracted_requirements"]
    assert req["role"] == "Product Designer"
    assert req["skills"] == ["Figma", "python"]
    assert req["industry"] == ["fintech"]
    assert req["qualities"] == ["Works closely with engineers."]
    assert req["companies"] is None


def test_extract_requirements_degrades_when_ai_fails(settings):
    provider = FakeCompletionProvider(json_responses=[RuntimeError("upstream 500")])
    app = create_app(make_services(settings, provider))
    with TestClient(app) as c:
        resp = c.post(
            "/api/v1/extract-requirements",
            json={"messages": [{"role": "user", "content": "Remote developer, 4 years of react"}]},
        )
    assert resp.status_code == 200
    req = resp.json()["extracted_requirements"]
    assert req["role"] == "developer"
    assert req["location"] == "remote"
    assert req["skills"] == ["react"]
    assert req["experience"] == ["4 years"]


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"messages": "not a list"},
        {"messages": [{"role": "robot", "content": "hi"}]},
    ],
)
def test_invalid_extraction_payload_is_400(client, payload):
    resp = client.post("/api/v1/extract-requirements", json=payload)
    assert resp.status_code == 400
    body = resp.json()
    assert body["error"] == "Invalid request"
    assert body["details"]


def test_normalize_requirements(client):
    resp = client.post(
        "/api/v1/normalize-requirements",
        json={"raw_requirements": {"role": "product designer", "qualities": ["- **Calm** under pressure."]}},
    )
    assert resp.status_code == 200
    normalized = resp.json()["normalized_requirements"]
    assert normalized["role"] == "Product Designer"
    assert normalized["qualities"] == ["Calm under pressure."]


def test_estimate_compensation(settings):
    provider = FakeCompletionProvider(text_responses=["185K"])
    app = create_app(make_services(settings, provider))
    with TestClient(app) as c:
        ok = c.post("/api/v1/estimate-compensation", json={"role": "Designer", "location": "Austin"})
        missing = c.post("/api/v1/estimate-compensation", json={"role": "Designer"})

    assert ok.json() == {"compensation": "185K"}
    assert missing.status_code == 400


# ==========================================
# Speech
# ==========================================

def test_speech_to_text(client):
    resp = client.post("/api/v1/speech-to-text", files={"audio": ("clip.webm", b"webm-bytes", "audio/webm")})
    assert resp.status_code == 200
    assert resp.json() == {"text": "We need a designer in Austin"}


def test_speech_to_text_empty_upload_is_400(client):
    resp = client.post("/api/v1/speech-to-text", files={"audio": ("clip.webm", b"", "audio/webm")})
    assert resp.status_code == 400


def test_speech_to_text_reads_at_most_one_byte_past_the_limit(settings, provider):
    small = settings.model_copy(update={"max_audio_bytes": 4})
    speech_provider = FakeSpeechProvider()
    app = create_app(make_services(small, provider, speech_provider))
    with TestClient(app) as c:
        too_big = c.post("/api/v1/speech-to-text", files={"audio": ("clip.webm", b"123456789", "audio/webm")})
        at_limit = c.post("/api/v1/speech-to-text", files={"audio": ("clip.webm", b"1234", "audio/webm")})

    assert too_big.status_code == 400
    assert "5 bytes" in too_big.json()["detail"]
    assert at_limit.status_code == 200
    assert speech_provider.calls == [("transcribe", "clip.webm", 4)]


def test_text_to_speech(client):
    resp = client.post("/api/v1/text-to-speech", json={"text": "Where is the role based?"})
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "audio/mpeg"
    assert resp.content == b"ID3fake-mp3"


def test_text_to_speech_unknown_voice_is_400(client):
    resp = client.post("/api/v1/text-to-speech", json={"text": "hello", "voice": "robot"})
    assert resp.status_code == 400


def test_text_to_speech_upstream_failure_is_502(settings, provider):
    app = create_app(make_services(settings, provider, FakeSpeechProvider(error=RuntimeError("boom"))))
    with TestClient(app) as c:
        resp = c.post("/api/v1/text-to-speech", json={"text": "hello"})
    assert resp.status_code == 502


# ==========================================
# Sessions
# ==========================================

def test_session_lifecycle(client):
    created = client.post("/api/v1/sessions")
    assert created.status_code == 201
    session = created.json()
    session_id = session["session_id"]
    assert session["messages"] == [{"role": "assistant", "content": GREETING}]

    reply = client.post(
        f"/api/v1/sessions/{session_id}/messages",
        json={"content": "We need a product designer in Austin"},
    )
    assert reply.status_code == 200
    assert reply.json()["reply"] == "Great. Where will this person be based?"

    # background extraction has run by the time TestClient returns
    state = client.get(f"/api/v1/sessions/{session_id}").json()
    assert state["requirements"]["role"] == "Product Designer"
    assert len(state["messages"]) == 3

    assert client.delete(f"/api/v1/sessions/{session_id}").status_code == 200
    assert client.get(f"/api/v1/sessions/{session_id}").status_code == 404


def test_failed_reply_leaves_session_unchanged(settings):
    provider = FakeCompletionProvider(json_responses=[DESIGNER], text_responses=[RuntimeError("upstream down")])
    app = create_app(make_services(settings, provider))
    with TestClient(app, raise_server_exceptions=False) as c:
        session_id = c.post("/api/v1/sessions").json()["session_id"]
        for _ in range(2):
            resp = c.post(f"/api/v1/sessions/{session_id}/messages", json={"content": "A product designer"})
            assert resp.status_code == 500
        state = c.get(f"/api/v1/sessions/{session_id}").json()

    assert [m["role"] for m in state["messages"]] == ["assistant"]
    assert state["requirements"]["role"] is None
    assert provider.json_calls == []


def test_session_message_without_api_key_is_503_and_not_recorded(settings):
    app = create_app(make_services(settings, OpenAICompletionProvider(None, settings)))
    with TestClient(app) as c:
        session_id = c.post("/api/v1/sessions").json()["session_id"]
        resp = c.post(f"/api/v1/sessions/{session_id}/messages", json={"content": "A product designer"})
        state = c.get(f"/api/v1/sessions/{session_id}").json()

    assert resp.status_code == 503
    assert state["messages"] == [{"role": "assistant", "content": GREETING}]


def test_reply_sees_the_new_user_turn(client, provider):
    session_id = client.post("/api/v1/sessions").json()["session_id"]
    client.post(f"/api/v1/sessions/{session_id}/messages", json={"content": "A product designer"})

    _, sent = provider.text_calls[0]
    assert sent == [
        {"role": "assistant", "content": GREETING},
        {"role": "user", "content": "A product designer"},
    ]


def test_unknown_session_is_404(client):
    resp = client.post("/api/v1/sessions/nope/messages", json={"content": "hello"})
    assert resp.status_code == 404


def test_empty_session_message_is_400(client):
    session_id = client.post("/api/v1/sessions").json()["session_id"]
    resp = client.post(f"/api/v1/sessions/{session_id}/messages", json={"content": ""})
    assert resp.status_code == 400
