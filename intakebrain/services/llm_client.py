"""Text-completion providers: the OpenAI implementation and the interface fakes implement."""
import logging
from functools import lru_cache
from typing import AsyncIterator, Dict, List, Optional

from openai import AsyncOpenAI

from intakebrain.config import Settings, get_settings
from intakebrain.exceptions import EmptyCompletionError, ProviderUnavailableError

logger = logging.getLogger(__name__)

Message = Dict[str, str]


class CompletionProvider:
    """Abstract text-completion interface."""

    async def complete_json(self, system: str, prompt: str) -> str:
        """Single completion constrained to a JSON object; returns the raw text."""
        raise NotImplementedError

    async def complete_text(self, system: str, messages: List[Message]) -> str:
        """Free-text completion for a chat history."""
        raise NotImplementedError

    async def stream_text(self, system: str, messages: List[Message]) -> AsyncIterator[str]:
        """Stream a free-text completion chunk by chunk."""
        raise NotImplementedError
        yield  # pragma: no cover


@lru_cache(maxsize=1)
def get_openai_client() -> Optional[AsyncOpenAI]:
    """Get async OpenAI client if an API key is configured."""
    settings = get_settings()
    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY not set")
        return None
    return AsyncOpenAI(api_key=settings.openai_api_key, timeout=settings.openai_timeout_seconds)


class OpenAICompletionProvider(CompletionProvider):
    """Completion provider backed by the OpenAI chat completions API."""

    def __init__(self, client: Optional[AsyncOpenAI], settings: Settings):
        self.client = client
        self.settings = settings

    def _require_client(self) -> AsyncOpenAI:
        if self.client is None:
            raise ProviderUnavailableError("OpenAI client not available. Set OPENAI_API_KEY.")
        return self.client

    async def complete_json(self, system: str, prompt: str) -> str:
        client = self._require_client()
        response = await client.chat.completions.create(
            model=self.settings.openai_model,
            temperature=self.settings.openai_extraction_temperature,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
            response_format={"type": "json_object"},
        )

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise EmptyCompletionError("No content received from OpenAI")

        usage = getattr(response, "usage", None)
        if usage:
            logger.debug(
                f"[openai] model={self.settings.openai_model} "
                f"prompt_tokens={usage.prompt_tokens} completion_tokens={usage.completion_tokens}"
            )
        return content

    async def complete_text(self, system: str, messages: List[Message]) -> str:
        client = self._require_client()
        response = await client.chat.completions.create(
            model=self.settings.openai_chat_model,
            temperature=self.settings.openai_chat_temperature,
            max_tokens=self.settings.openai_chat_max_tokens,
            messages=[{"role": "system", "content": system}, *messages],
        )
        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise EmptyCompletionError("No content received from OpenAI")
        return content.strip()

    async def stream_text(self, system: str, messages: List[Message]) -> AsyncIterator[str]:
        client = self._require_client()
        stream = await client.chat.completions.create(
            model=self.settings.openai_chat_model,
            temperature=self.settings.openai_chat_temperature,
            max_tokens=self.settings.openai_chat_max_tokens,
            messages=[{"role": "system", "content": system}, *messages],
            stream=True,
        )
        async for chunk in stream:
            if not chunk.choices:
                continue
            delta = chunk.choices[0].delta.content
            if delta:
                yield delta
