"""Speech-to-text (Whisper) and text-to-speech for the voice intake mode."""
import logging
from typing import Optional

from openai import AsyncOpenAI

from intakebrain.config import Settings
from intakebrain.exceptions import ProviderUnavailableError, SpeechServiceError

logger = logging.getLogger(__name__)

VOICES = ("alloy", "echo", "fable", "onyx", "nova", "shimmer")


class SpeechProvider:
    """Abstract speech backend."""

    async def transcribe(self, audio_bytes: bytes, filename: str) -> str:
        raise NotImplementedError

    async def synthesize(self, text: str, voice: str) -> bytes:
        raise NotImplementedError


class OpenAISpeechProvider(SpeechProvider):
    """Whisper transcription and tts-1 synthesis through the OpenAI audio API."""

    def __init__(self, client: Optional[AsyncOpenAI], settings: Settings):
        self.client = client
        self.settings = settings

    def _require_client(self) -> AsyncOpenAI:
        if self.client is None:
            raise ProviderUnavailableError("OpenAI client not available. Set OPENAI_API_KEY.")
        return self.client

    async def transcribe(self, audio_bytes: bytes, filename: str) -> str:
        client = self._require_client()
        transcript = await client.audio.transcriptions.create(
            model=self.settings.stt_model,
            file=(filename, audio_bytes),
        )
        return transcript.text

    async def synthesize(self, text: str, voice: str) -> bytes:
        client = self._require_client()
        response = await client.audio.speech.create(
            model=self.settings.tts_model,
            input=text,
            voice=voice,
            response_format="mp3",
            speed=self.settings.tts_speed,
        )
        return response.content


class SpeechService:
    """
    Validates speech requests and wraps upstream failures.

    - Bad input raises ValueError
    - Upstream errors raise SpeechServiceError
    - A missing provider key raises ProviderUnavailableError unchanged
    """

    def __init__(self, provider: SpeechProvider, settings: Settings):
        self.provider = provider
        self.settings = settings

    async def transcribe(self, audio_bytes: bytes, filename: str = "audio.webm") -> str:
        if not audio_bytes:
            raise ValueError("Audio file is required")
        if len(audio_bytes) > self.settings.max_audio_bytes:
            raise ValueError(
                f"Audio file too large ({len(audio_bytes)} bytes, max {self.settings.max_audio_bytes})"
            )

        logger.info(f"Transcribing audio file: {filename} ({len(audio_bytes)} bytes)")
        try:
            text = await self.provider.transcribe(audio_bytes, filename or "audio.webm")
        except ProviderUnavailableError:
            raise
        except Exception as e:
            logger.exception("Whisper transcription failed")
            raise SpeechServiceError(f"Failed to transcribe audio: {e}") from e

        text = (text or "").strip()
        logger.info(f"✅ Transcription: {text}")
        return text

    async def synthesize(self, text: str, voice: Optional[str] = None) -> bytes:
        if not text or not text.strip():
            raise ValueError("Text is required")
        voice = voice or self.settings.tts_default_voice
        if voice not in VOICES:
            raise ValueError(f"Unknown voice '{voice}'. Options: {', '.join(VOICES)}")

        logger.info(f"TTS: converting text ({len(text)} chars) using voice: {voice}")
        try:
            audio = await self.provider.synthesize(text, voice)
        except ProviderUnavailableError:
            raise
        except Exception as e:
            logger.exception("Speech synthesis failed")
            raise SpeechServiceError(f"Speech synthesis failed: {e}") from e

        logger.info(f"✅ Generated audio ({len(audio)} bytes)")
        return audio
