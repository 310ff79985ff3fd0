"""Merge accumulated quality sentences with newly extracted ones."""
import asyncio
import logging
from typing import List, Optional, Sequence

from intakebrain.cache import CacheBackend, generate_cache_key
from intakebrain.extraction.json_salvage import salvage_json_object
from intakebrain.extraction.policy import ExtractionPolicy
from intakebrain.models import Outcome
from intakebrain.retry import Sleep, retry_with_backoff
from intakebrain.services.llm_client import CompletionProvider

logger = logging.getLogger(__name__)

MERGE_SYSTEM_PROMPT = (
    "You are an expert at managing candidate qualities for job postings. Always return valid JSON."
)

MERGE_PROMPT = """Merge these two lists of candidate qualities into one comprehensive list.
Keep every EXISTING quality word for word. Add a NEW quality only if it is not already covered by an existing one.

EXISTING QUALITIES:
{existing}

NEW QUALITIES TO CONSIDER:
{new}

Return a JSON object with this format:
{{
  "qualities": ["quality 1", "quality 2", "quality 3"]
}}

Each quality should be a complete, professional sentence."""


def _key(text: str) -> str:
    return text.strip().lower()


def _numbered(items: Sequence[str]) -> str:
    return "\n".join(f"{i}. {item}" for i, item in enumerate(items, 1))


def union_unique(*lists: Sequence[str]) -> List[str]:
    """Concatenate, trim, drop empties, de-duplicate by exact string."""
    out: List[str] = []
    for items in lists:
        for item in items:
            cleaned = item.strip() if isinstance(item, str) else ""
            if cleaned and cleaned not in out:
                out.append(cleaned)
    return out


def keep_existing(existing: Sequence[str], merged: Sequence[str]) -> List[str]:
    """Existing sentences first (never dropped), then merged sentences not already present."""
    out = [q for q in existing if q.strip()]
    seen = {_key(q) for q in out}
    for quality in merged:
        if isinstance(quality, str) and quality.strip() and _key(quality) not in seen:
            seen.add(_key(quality))
            out.append(quality.strip())
    return out


class QualityMerger:
    """De-duplicates quality sentences semantically through the model, syntactically on failure."""

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

    async def merge(self, existing: Sequence[str], new: Sequence[str]) -> Outcome[List[str]]:
        existing = list(existing or [])
        new = list(new or [])

        if not new:
            return Outcome.success(existing)
        if not existing:
            return Outcome.success(new)

        existing_keys = {_key(q) for q in existing}
        if all(_key(q) in existing_keys for q in new):
            logger.info("No new qualities to merge, returning existing")
            return Outcome.success(existing)

        key = generate_cache_key("merge", "|".join(existing), "|".join(new))
        cached = self.cache.get(key)
        if cached is not None:
            logger.info("✅ Using cached quality merge result")
            return Outcome.success(list(cached))

        prompt = MERGE_PROMPT.format(existing=_numbered(existing), new=_numbered(new))

        try:
            content = await retry_with_backoff(
                lambda: self.provider.complete_json(MERGE_SYSTEM_PROMPT, prompt),
                max_attempts=self.policy.max_attempts,
                base_delay_ms=self.policy.base_delay_ms,
                rate_limit_buffer_ms=self.policy.rate_limit_buffer_ms,
                sleep=self._sleep,
            )
            data = salvage_json_object(content)
        except Exception as e:
            logger.error(f"❌ Quality merge failed, using simple union: {e}")
            return Outcome.failure(union_unique(existing, new), f"merge failed: {e}")

        merged = data.get("qualities")
        if not isinstance(merged, list) or not merged:
            merged = []

        final = keep_existing(existing, merged)
        self.cache.set(key, final, ttl=self.policy.cache_ttl_seconds)

        logger.info(f"✅ Merged qualities: {len(existing)} existing + {len(new)} new -> {len(final)}")
        return Outcome.success(final)
