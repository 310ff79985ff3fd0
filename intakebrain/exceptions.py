"""Exceptions raised inside intakebrain."""


class IntakeBrainError(Exception):
    """Base class for intakebrain errors."""


class ProviderUnavailableError(IntakeBrainError):
    """Raised when no model provider is configured (e.g. OPENAI_API_KEY missing)."""


class EmptyCompletionError(IntakeBrainError):
    """Raised when the model returns no content."""


class JSONSalvageError(IntakeBrainError, ValueError):
    """Raised when no JSON object can be recovered from a model response."""

    def __init__(self, text: str):
        self.text = text
        snippet = text.strip().replace("\n", " ")
        snippet = (snippet[:200] + "...") if len(snippet) > 200 else snippet
        super().__init__(f"No JSON object found in response. Snippet: {snippet}")


class SpeechServiceError(IntakeBrainError):
    """Raised when transcription or speech synthesis fails upstream."""
