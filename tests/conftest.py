import json

import pytest

from intakebrain.cache import InMemoryCache
from intakebrain.config import Settings
from intakebrain.extraction import ExtractionPolicy, build_orchestrator
from intakebrain.services.llm_client import CompletionProvider
from intakebrain.services.speech import SpeechProvider


class FakeCompletionProvider(CompletionProvider):
    """
    Scripted provider: each call pops the next scripted response.

    A scripted Exception is raised instead of returned. When the script runs
    out the last entry is repeated.
    """

    def __init__(self, json_responses=(), text_responses=()):
        self.json_responses = list(json_responses)
        self.text_responses = list(text_responses)
        self.json_calls = []
        self.text_calls = []

    @staticmethod
    def _next(script):
        if not script:
            raise AssertionError("FakeCompletionProvider has no scripted response")
        response = script.pop(0) if len(script) > 1 else script[0]
        if isinstance(response, BaseException):
            raise response
        if isinstance(response, dict):
            return json.dumps(response)
        return response

    async def complete_json(self, system, prompt):
        self.json_calls.append((system, prompt))
        return self._next(self.json_responses)

    async def complete_text(self, system, messages):
        self.text_calls.append((system, messages))
        return self._next(self.text_responses)

    async def stream_text(self, system, messages):
        self.text_calls.append((system, messages))
        text = self._next(self.text_responses)
        for word in text.split(" "):
            yield word + " "


class FakeSpeechProvider(SpeechProvider):
    def __init__(self, transcript="We need a designer in Austin", audio=b"ID3fake-mp3", error=None):
        self.transcript = transcript
        self.audio = audio
        self.error = error
        self.calls = []

    async def transcribe(self, audio_bytes, filename):
        self.calls.append(("transcribe", filename, len(audio_bytes)))
        if self.error:
            raise self.error
        return self.transcript

    async def synthesize(self, text, voice):
        self.calls.append(("synthesize", text, voice))
        if self.error:
            raise self.error
        return self.audio


class SleepRecorder:
    """Stand-in for asyncio.sleep that records delays instead of waiting."""

    def __init__(self):
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(seconds)


class FixedRandom:
    """random.Random stand-in: ``random()`` returns a fixed value, ``uniform`` the lower bound."""

    def __init__(self, value=0.99):
        self.value = value

    def random(self):
        return self.value

    def uniform(self, low, high):
        return low


class FakeClock:
    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        openai_api_key=None,
        redis_url=None,
        extraction_debounce_seconds=0.0,
        debug=True,
    )


@pytest.fixture
def policy():
    return ExtractionPolicy()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return InMemoryCache(max_size=100, clock=clock)


@pytest.fixture
def sleep():
    return SleepRecorder()


@pytest.fixture
def provider():
    return FakeCompletionProvider()


@pytest.fixture
def orchestrator(provider, cache, policy, sleep):
    return build_orchestrator(provider, cache, policy, sleep=sleep, rng=FixedRandom())
