import asyncio
from types import SimpleNamespace
from unittest import mock

import pytest

from conftest import FakeCompletionProvider, FakeSpeechProvider
from intakebrain.exceptions import EmptyCompletionError, ProviderUnavailableError, SpeechServiceError
from intakebrain.models import ConversationTurn
from intakebrain.services.chat_service import GREETING, SYSTEM_PROMPT, IntakeAssistant, preview_ready
from intakebrain.services.compensation import build_compensation_prompt, estimate_compensation
from intakebrain.services.llm_client import OpenAICompletionProvider
from intakebrain.services.speech import OpenAISpeechProvider, SpeechService


def turns(*texts):
    return [ConversationTurn(role="user", content=text) for text in texts]


# ==========================================
# Intake assistant
# ==========================================

def test_reply_sends_system_prompt_and_history():
    provider = FakeCompletionProvider(text_responses=["Great. Where will they be based?"])
    reply = asyncio.run(IntakeAssistant(provider).reply(turns("A product designer")))

    assert reply == "Great. Where will they be based?"
    system, messages = provider.text_calls[0]
    assert system == SYSTEM_PROMPT
    assert messages == [{"role": "user", "content": "A product designer"}]


def test_empty_history_gets_greeting_without_model_call():
    provider = FakeCompletionProvider()
    assert asyncio.run(IntakeAssistant(provider).reply([])) == GREETING
    assert provider.text_calls == []


def test_stream_reply_yields_chunks():
    provider = FakeCompletionProvider(text_responses=["Where is the role based?"])

    async def collect():
        return [chunk async for chunk in IntakeAssistant(provider).stream_reply(turns("designer"))]

    assert "".join(asyncio.run(collect())).strip() == "Where is the role based?"


def test_preview_after_five_user_messages():
    assert not preview_ready(turns("a", "b", "c", "d"))
    assert preview_ready(turns("a", "b", "c", "d", "e"))


# ==========================================
# Compensation
# ==========================================

def test_compensation_requires_role_and_location():
    with pytest.raises(ValueError):
        asyncio.run(estimate_compensation(FakeCompletionProvider(), "Designer", None))
    with pytest.raises(ValueError):
        asyncio.run(estimate_compensation(FakeCompletionProvider(), "  ", "Austin"))


def test_compensation_estimate():
    provider = FakeCompletionProvider(text_responses=["'185K'"])
    estimate = asyncio.run(estimate_compensation(provider, "Designer", "Austin", ["5+ years"], ["Figma"]))

    assert estimate == "185K"
    prompt = provider.text_calls[0][1][0]["content"]
    assert "'Designer' position in 'Austin'" in prompt
    assert "Experience requirements: 5+ years" in prompt


def test_compensation_prompt_marks_missing_factors():
    prompt = build_compensation_prompt("Designer", "Austin")
    assert "Experience requirements: N/A" in prompt
    assert "Required skills: N/A" in prompt


# ==========================================
# OpenAI provider
# ==========================================

def test_openai_provider_without_client_is_unavailable(settings):
    provider = OpenAICompletionProvider(None, settings)
    with pytest.raises(ProviderUnavailableError):
        asyncio.run(provider.complete_json("system", "prompt"))


def _completion(content):
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        usage=SimpleNamespace(prompt_tokens=10, completion_tokens=5),
    )


def test_openai_provider_requests_json_object(settings):
    client = mock.Mock()
    client.chat.completions.create = mock.AsyncMock(return_value=_completion('{"role": "Designer"}'))

    content = asyncio.run(OpenAICompletionProvider(client, settings).complete_json("system", "prompt"))

    assert content == '{"role": "Designer"}'
    kwargs = client.chat.completions.create.call_args.kwargs
    assert kwargs["response_format"] == {"type": "json_object"}
    assert kwargs["model"] == settings.openai_model


def test_openai_provider_empty_content(settings):
    client = mock.Mock()
    client.chat.completions.create = mock.AsyncMock(return_value=_completion(""))
    with pytest.raises(EmptyCompletionError):
        asyncio.run(OpenAICompletionProvider(client, settings).complete_json("system", "prompt"))


# ==========================================
# Speech
# ==========================================

def test_transcribe(settings):
    speech = SpeechService(FakeSpeechProvider(transcript="  We need a designer  "), settings)
    assert asyncio.run(speech.transcribe(b"webm-bytes", "clip.webm")) == "We need a designer"


def test_transcribe_rejects_empty_and_oversized_audio(settings):
    speech = SpeechService(FakeSpeechProvider(), settings.model_copy(update={"max_audio_bytes": 4}))
    with pytest.raises(ValueError):
        asyncio.run(speech.transcribe(b""))
    with pytest.raises(ValueError):
        asyncio.run(speech.transcribe(b"12345"))


def test_synthesize_defaults_to_configured_voice(settings):
    provider = FakeSpeechProvider()
    audio = asyncio.run(SpeechService(provider, settings).synthesize("Where is the role based?"))

    assert audio == b"ID3fake-mp3"
    assert provider.calls == [("synthesize", "Where is the role based?", "nova")]


def test_synthesize_validation(settings):
    speech = SpeechService(FakeSpeechProvider(), settings)
    with pytest.raises(ValueError):
        asyncio.run(speech.synthesize("   "))
    with pytest.raises(ValueError):
        asyncio.run(speech.synthesize("hello", voice="robot"))


def test_upstream_speech_errors_are_wrapped(settings):
    speech = SpeechService(FakeSpeechProvider(error=RuntimeError("429")), settings)
    with pytest.raises(SpeechServiceError):
        asyncio.run(speech.transcribe(b"bytes"))
    with pytest.raises(SpeechServiceError):
        asyncio.run(speech.synthesize("hello"))


def test_missing_key_is_not_wrapped(settings):
    speech = SpeechService(OpenAISpeechProvider(None, settings), settings)
    with pytest.raises(ProviderUnavailableError):
        asyncio.run(speech.transcribe(b"bytes"))
