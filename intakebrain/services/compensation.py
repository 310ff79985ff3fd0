"""Market compensation estimate for the role being defined."""
import logging
from typing import Optional, Sequence

from intakebrain.services.llm_client import CompletionProvider

logger = logging.getLogger(__name__)

COMPENSATION_SYSTEM_PROMPT = "You are a compensation analyst for technical recruiting."

COMPENSATION_PROMPT = (
    "Estimate the market compensation for a '{role}' position in '{location}'. "
    "Consider the following factors if available: "
    "Experience requirements: {experience}. Required skills: {skills}. "
    "Provide the estimated annual salary as a single, concise value in thousands, like '250K'. "
    "Do not add any other text or explanation."
)


def build_compensation_prompt(
    role: str,
    location: str,
    experience: Optional[Sequence[str]] = None,
    skills: Optional[Sequence[str]] = None,
) -> str:
    return COMPENSATION_PROMPT.format(
        role=role,
        location=location,
        experience=", ".join(experience or []) or "N/A",
        skills=", ".join(skills or []) or "N/A",
    )


async def estimate_compensation(
    provider: CompletionProvider,
    role: Optional[str],
    location: Optional[str],
    experience: Optional[Sequence[str]] = None,
    skills: Optional[Sequence[str]] = None,
) -> str:
    """Ask the model for a single annual salary figure such as '250K'."""
    if not (role and role.strip()) or not (location and location.strip()):
        raise ValueError("Role and location are required.")

    prompt = build_compensation_prompt(role.strip(), location.strip(), experience, skills)
    text = await provider.complete_text(
        COMPENSATION_SYSTEM_PROMPT, [{"role": "user", "content": prompt}]
    )
    estimate = text.strip().strip("'\"")
    logger.info(f"✅ Compensation estimate for {role} in {location}: {estimate}")
    return estimate
