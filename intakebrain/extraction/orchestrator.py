"""
Extraction orchestrator.

Combines the regex extractor, the AI extractor and the quality merger into
one Requirements record per conversation update. Always returns a record:
AI failures degrade to regex + previous values.
"""
import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Sequence, Union

from intakebrain.cache import CacheBackend
from intakebrain.extraction.ai_extractor import AIExtractor
from intakebrain.extraction.policy import ExtractionPolicy
from intakebrain.extraction.quality_merger import QualityMerger
from intakebrain.extraction.regex_extractor import extract_with_regex
from intakebrain.models import ConversationTurn, Requirements, dedupe_case_insensitive
from intakebrain.retry import Sleep

logger = logging.getLogger(__name__)

Turn = Union[ConversationTurn, Mapping[str, Any]]


@dataclass
class ExtractionRun:
    """Result of one orchestrator invocation plus how it degraded."""
    requirements: Requirements
    ai_skipped: bool = False
    ai_error: Optional[str] = None
    merge_error: Optional[str] = None


def user_contents(messages: Sequence[Turn]) -> List[str]:
    """Contents of the user-authored turns, in order."""
    contents: List[str] = []
    for message in messages:
        if isinstance(message, ConversationTurn):
            role, content = message.role, message.content
        else:
            role, content = message.get("role"), message.get("content")
        if role == "user" and isinstance(content, str):
            contents.append(content)
    return contents


def should_skip_ai_extraction(
    user_messages: Sequence[str],
    previous: Optional[Requirements],
    policy: Optional[ExtractionPolicy] = None,
) -> bool:
    """Decide whether the latest user turn is unlikely to add anything worth an AI call."""
    policy = policy or ExtractionPolicy()

    # Always run AI for the first few messages
    if len(user_messages) <= policy.never_skip_up_to_turns:
        return False

    last_message = (user_messages[-1] or "").strip()

    # Very short message, likely an acknowledgment
    if len(last_message) < policy.short_message_chars:
        logger.info("Skipping AI extraction for very short message")
        return True

    previous = previous or Requirements()
    comprehensive = previous.is_comprehensive(
        min_skills=policy.comprehensive_min_skills,
        min_qualities=policy.comprehensive_min_qualities,
    )
    if comprehensive and len(last_message) < policy.comprehensive_message_chars:
        logger.info("Skipping AI extraction - comprehensive data exists and message is short")
        return True

    return False


def merge_and_deduplicate(*lists: Optional[Sequence[str]]) -> Optional[List[str]]:
    """Union of the given lists, de-duplicated case-insensitively; None if empty."""
    combined: List[str] = []
    for items in lists:
        if items:
            combined.extend(items)
    unique = dedupe_case_insensitive(combined)
    return unique or None


class ExtractionOrchestrator:
    """Runs regex + AI extraction and reconciles them with the previous record."""

    def __init__(
        self,
        ai_extractor: AIExtractor,
        quality_merger: QualityMerger,
        cache: CacheBackend,
        policy: Optional[ExtractionPolicy] = None,
        *,
        sleep: Sleep = asyncio.sleep,
        rng: Optional[random.Random] = None,
    ):
        self.ai_extractor = ai_extractor
        self.quality_merger = quality_merger
        self.cache = cache
        self.policy = policy or ExtractionPolicy()
        self._sleep = sleep
        self._rng = rng or random.Random()

    async def extract(self, messages: Sequence[Turn], previous: Optional[Requirements] = None) -> Requirements:
        run = await self.run(messages, previous)
        return run.requirements

    async def run(self, messages: Sequence[Turn], previous: Optional[Requirements] = None) -> ExtractionRun:
        previous = previous or Requirements()

        user_messages = user_contents(messages)
        if not user_messages:
            return ExtractionRun(requirements=Requirements(), ai_skipped=True)

        conversation_text = "\n".join(user_messages)
        existing_qualities = list(previous.qualities or [])
        logger.info(
            f"Extracting requirements: {len(user_messages)} user turns, "
            f"{len(conversation_text)} chars, {len(existing_qualities)} existing qualities"
        )

        regex_result = extract_with_regex(conversation_text)

        ai_result = Requirements()
        merged_qualities = existing_qualities
        run = ExtractionRun(requirements=previous)
        run.ai_skipped = should_skip_ai_extraction(user_messages, previous, self.policy)

        if not run.ai_skipped:
            try:
                await self._jitter()
                outcome = await self.ai_extractor.extract(conversation_text, existing_qualities)
                ai_result = outcome.value
                run.ai_error = outcome.error

                if ai_result.qualities:
                    merge = await self.quality_merger.merge(existing_qualities, ai_result.qualities)
                    merged_qualities = merge.value
                    run.merge_error = merge.error
            except Exception as e:
                logger.exception("AI extraction failed, using regex-only approach")
                ai_result = Requirements()
                run.ai_error = str(e) or type(e).__name__

            if run.ai_error:
                logger.warning(f"⚠️  AI extraction degraded: {run.ai_error}")
        else:
            logger.info("Skipped AI extraction")

        run.requirements = self._combine(ai_result, regex_result, previous, merged_qualities)
        self._maybe_sweep_cache()
        return run

    async def _jitter(self):
        low, high = self.policy.jitter_min_ms, self.policy.jitter_max_ms
        if high <= 0:
            return
        delay_ms = self._rng.uniform(low, high)
        logger.debug(f"Adding delay of {delay_ms:.0f}ms before AI extraction")
        await self._sleep(delay_ms / 1000)

    @staticmethod
    def _combine(
        ai: Requirements,
        regex: Requirements,
        previous: Requirements,
        merged_qualities: Sequence[str],
    ) -> Requirements:
        """AI takes precedence, regex fills the gaps, previous values are never lost."""
        combined = Requirements(
            role=ai.role or regex.role or previous.role or None,
            location=ai.location or regex.location or previous.location or None,
            experience=merge_and_deduplicate(ai.experience, regex.experience, previous.experience),
            skills=merge_and_deduplicate(ai.skills, regex.skills, previous.skills),
            companies=merge_and_deduplicate(ai.companies, regex.companies, previous.companies),
            industry=merge_and_deduplicate(ai.industry, regex.industry, previous.industry),
            qualities=list(merged_qualities) if merged_qualities else (previous.qualities or None),
        )
        return combined.normalized()

    def _maybe_sweep_cache(self):
        if self._rng.random() < self.policy.cache_sweep_probability:
            removed = self.cache.evict_expired(self.policy.cache_ttl_seconds * 2)
            if removed:
                logger.info(f"Cache sweep removed {removed} stale entries")


def build_orchestrator(
    provider,
    cache: CacheBackend,
    policy: Optional[ExtractionPolicy] = None,
    *,
    sleep: Sleep = asyncio.sleep,
    rng: Optional[random.Random] = None,
) -> ExtractionOrchestrator:
    """Wire an orchestrator whose extractor and merger share one provider and cache."""
    policy = policy or ExtractionPolicy()
    return ExtractionOrchestrator(
        AIExtractor(provider, cache, policy, sleep=sleep),
        QualityMerger(provider, cache, policy, sleep=sleep),
        cache,
        policy,
        sleep=sleep,
        rng=rng,
    )
