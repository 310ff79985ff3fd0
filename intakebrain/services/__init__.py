from .llm_client import CompletionProvider, OpenAICompletionProvider, get_openai_client
from .chat_service import IntakeAssistant
from .compensation import estimate_compensation
from .speech import OpenAISpeechProvider, SpeechProvider, SpeechService

__all__ = [
    "CompletionProvider",
    "IntakeAssistant",
    "OpenAICompletionProvider",
    "OpenAISpeechProvider",
    "SpeechProvider",
    "SpeechService",
    "estimate_compensation",
    "get_openai_client",
]
