"""LLM extraction of requirements from the conversation, with caching and retries."""
import asyncio
import logging
from typing import Any, Dict, List, Optional, Sequence

from intakebrain.cache import CacheBackend, generate_cache_key
from intakebrain.extraction.json_salvage import salvage_json_object
from intakebrain.extraction.policy import ExtractionPolicy
from intakebrain.models import Outcome, Requirements
from intakebrain.retry import Sleep, retry_with_backoff
from intakebrain.services.llm_client import CompletionProvider

logger = logging.getLogger(__name__)

EXTRACTION_SYSTEM_PROMPT = (
    "You are an expert at extracting job requirements from hiring conversations. "
    "Always return valid JSON with the exact structure requested."
)

EXTRACTION_PROMPT = """Extract job requirements from this conversation and return a JSON object with these keys:
{{
  "role": "job title or null",
  "location": "location or null",
  "experience": ["experience requirement 1", "experience requirement 2"] or [],
  "skills": ["skill 1", "skill 2", "skill 3"] or [],
  "companies": ["company 1", "company 2"] or [],
  "industry": ["industry 1", "industry 2"] or [],
  "qualities": ["quality 1", "quality 2", "quality 3"] or []
}}

For qualities, extract soft skills, personality traits, work style preferences, and cultural fit requirements. Write each quality as a complete sentence.
{existing_qualities}
Conversation: "{conversation}"

Return ONLY valid JSON with no additional text."""


def _format_existing(existing_qualities: Sequence[str]) -> str:
    if not existing_qualities:
        return ""
    numbered = "\n".join(f"{i}. {q}" for i, q in enumerate(existing_qualities, 1))
    return f"\nExisting qualities already identified:\n{numbered}\n"


def build_extraction_prompt(conversation_text: str, existing_qualities: Sequence[str] = ()) -> str:
    return EXTRACTION_PROMPT.format(
        existing_qualities=_format_existing(existing_qualities),
        conversation=conversation_text,
    )


def _as_text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _as_list(value: Any) -> List[str]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


def coerce_extraction(data: Dict[str, Any]) -> Requirements:
    """
    Coerce a parsed model response into a Requirements record.

    - Scalars must be non-blank strings, else null
    - Lists keep only non-blank strings; missing lists default to []
    """
    return Requirements(
        role=_as_text(data.get("role")),
        location=_as_text(data.get("location")),
        experience=_as_list(data.get("experience")),
        skills=_as_list(data.get("skills")),
        companies=_as_list(data.get("companies")),
        industry=_as_list(data.get("industry")),
        qualities=_as_list(data.get("qualities")),
    )


class AIExtractor:
    """
    Extracts a partial Requirements record through a completion provider.

    ``extract`` never raises: failures come back as an Outcome carrying the
    blank record and the reason.
    """

    def __init__(
        self,
        provider: CompletionProvider,
        cache: CacheBackend,
        policy: Optional[ExtractionPolicy] = None,
        sleep: Sleep = asyncio.sleep,
    ):
        self.provider = provider
        self.cache = cache
        self.policy = policy or ExtractionPolicy()
        self._sleep = sleep

    def cache_key(self, conversation_text: str, existing_qualities: Sequence[str]) -> str:
        prefix = conversation_text[: self.policy.cache_key_prefix_chars]
        return generate_cache_key("extraction", prefix, ",".join(existing_qualities))

    async def extract(
        self, conversation_text: str, existing_qualities: Sequence[str] = ()
    ) -> Outcome[Requirements]:
        existing_qualities = list(existing_qualities or [])
        key = self.cache_key(conversation_text, existing_qualities)

        cached = self.cache.get(key)
        if cached is not None:
            logger.info("✅ Using cached extraction result")
            return Outcome.success(Requirements.model_validate(cached))

        prompt = build_extraction_prompt(conversation_text, existing_qualities)

        try:
            content = await retry_with_backoff(
                lambda: self.provider.complete_json(EXTRACTION_SYSTEM_PROMPT, prompt),
                max_attempts=self.policy.max_attempts,
                base_delay_ms=self.policy.base_delay_ms,
                rate_limit_buffer_ms=self.policy.rate_limit_buffer_ms,
                sleep=self._sleep,
            )
        except Exception as e:
            logger.error(f"❌ AI extraction failed after retries: {e}")
            return Outcome.failure(Requirements.blank(), f"request failed: {e}")

        try:
            result = coerce_extraction(salvage_json_object(content))
        except ValueError as e:
            logger.error(f"❌ Failed to parse extraction response: {e}")
            return Outcome.failure(Requirements.blank(), f"unparseable response: {e}")

        self.cache.set(key, result.model_dump(), ttl=self.policy.cache_ttl_seconds)

        logger.info(
            "✅ AI extracted: role=%s, location=%s, %d skills, %d qualities",
            result.role,
            result.location,
            len(result.skills),
            len(result.qualities),
        )
        return Outcome.success(result)
