"""Tuning constants for the extraction pipeline."""
from dataclasses import dataclass

from intakebrain.config import Settings


@dataclass(frozen=True)
class ExtractionPolicy:
    # cache
    cache_ttl_seconds: float = 30.0
    cache_key_prefix_chars: int = 100
    cache_sweep_probability: float = 0.1

    # retry
    max_attempts: int = 3
    base_delay_ms: int = 1000
    rate_limit_buffer_ms: int = 100

    # skip heuristic
    never_skip_up_to_turns: int = 2
    short_message_chars: int = 10
    comprehensive_message_chars: int = 50
    comprehensive_min_skills: int = 2
    comprehensive_min_qualities: int = 2

    # load-spreading delay before the AI call
    jitter_min_ms: int = 200
    jitter_max_ms: int = 700

    @classmethod
    def from_settings(cls, settings: Settings) -> "ExtractionPolicy":
        return cls(
            cache_ttl_seconds=settings.extraction_cache_ttl_seconds,
            cache_key_prefix_chars=settings.cache_key_prefix_chars,
            cache_sweep_probability=settings.cache_sweep_probability,
            max_attempts=settings.retry_max_attempts,
            base_delay_ms=settings.retry_base_delay_ms,
            rate_limit_buffer_ms=settings.rate_limit_buffer_ms,
            never_skip_up_to_turns=settings.skip_never_up_to_user_turns,
            short_message_chars=settings.skip_short_message_chars,
            comprehensive_message_chars=settings.skip_comprehensive_message_chars,
            comprehensive_min_skills=settings.comprehensive_min_skills,
            comprehensive_min_qualities=settings.comprehensive_min_qualities,
            jitter_min_ms=settings.jitter_min_ms,
            jitter_max_ms=settings.jitter_max_ms,
        )
