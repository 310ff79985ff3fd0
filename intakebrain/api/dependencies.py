"""
Service wiring
Builds the shared objects the routes depend on and exposes them to FastAPI
"""

import logging
from dataclasses import dataclass

from fastapi import Request

from intakebrain.cache import CacheBackend, build_cache
from intakebrain.config import Settings
from intakebrain.extraction import ExtractionOrchestrator, ExtractionPolicy, build_orchestrator
from intakebrain.services.chat_service import IntakeAssistant
from intakebrain.services.llm_client import (
    CompletionProvider,
    OpenAICompletionProvider,
    get_openai_client,
)
from intakebrain.services.session import SessionStore
from intakebrain.services.speech import OpenAISpeechProvider, SpeechService

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    settings: Settings
    cache: CacheBackend
    provider: CompletionProvider
    orchestrator: ExtractionOrchestrator
    assistant: IntakeAssistant
    speech: SpeechService
    sessions: SessionStore


def build_services(settings: Settings) -> ServiceContainer:
    """Wire the production services (OpenAI + Redis/in-memory cache)."""
    client = get_openai_client()
    if client is None:
        logger.warning("⚠️  OpenAI not configured; chat, AI extraction and speech will be unavailable")

    cache = build_cache(settings.redis_url, max_size=settings.cache_max_size)
    provider = OpenAICompletionProvider(client, settings)
    orchestrator = build_orchestrator(provider, cache, ExtractionPolicy.from_settings(settings))

    return ServiceContainer(
        settings=settings,
        cache=cache,
        provider=provider,
        orchestrator=orchestrator,
        assistant=IntakeAssistant(provider),
        speech=SpeechService(OpenAISpeechProvider(client, settings), settings),
        sessions=SessionStore(orchestrator, debounce_seconds=settings.extraction_debounce_seconds),
    )


def get_services(request: Request) -> ServiceContainer:
    return request.app.state.services
