from .outcome import Outcome
from .requirements import (
    LIST_FIELDS,
    SCALAR_FIELDS,
    ConversationTurn,
    Requirements,
    as_sentence,
    dedupe_case_insensitive,
)
from .api import (
    ChatRequest,
    ChatResponse,
    CompensationRequest,
    CompensationResponse,
    ExtractRequirementsRequest,
    ExtractRequirementsResponse,
    NormalizeRequirementsRequest,
    NormalizeRequirementsResponse,
    SessionMessageRequest,
    SessionReply,
    SessionState,
    TextToSpeechRequest,
    TranscriptionResponse,
)

__all__ = [
    "LIST_FIELDS",
    "SCALAR_FIELDS",
    "ChatRequest",
    "ChatResponse",
    "CompensationRequest",
    "CompensationResponse",
    "ConversationTurn",
    "ExtractRequirementsRequest",
    "ExtractRequirementsResponse",
    "NormalizeRequirementsRequest",
    "NormalizeRequirementsResponse",
    "Outcome",
    "Requirements",
    "SessionMessageRequest",
    "SessionReply",
    "SessionState",
    "TextToSpeechRequest",
    "TranscriptionResponse",
    "as_sentence",
    "dedupe_case_insensitive",
]
