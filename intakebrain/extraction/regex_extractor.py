"""Keyword / pattern extraction of requirements - no API calls, always available."""
import logging
import re
from typing import List, Optional, Pattern, Sequence

from intakebrain.models import Requirements

logger = logging.getLogger(__name__)

# Vocabulary order is priority order: the first hit wins for single-value fields
# and list fields are reported in this order (not conversation order).
ROLE_KEYWORDS = [
    "software engineer",
    "developer",
    "designer",
    "product manager",
    "data scientist",
    "frontend developer",
    "backend developer",
    "full stack",
    "devops",
    "qa engineer",
    "engineering manager",
    "tech lead",
    "senior developer",
    "junior developer",
]

LOCATION_KEYWORDS = [
    "san francisco",
    "new york",
    "remote",
    "california",
    "ca",
    "ny",
    "seattle",
    "austin",
    "boston",
    "chicago",
    "denver",
    "portland",
    "los angeles",
    "miami",
]

SKILL_KEYWORDS = [
    "javascript",
    "python",
    "react",
    "node.js",
    "aws",
    "figma",
    "sql",
    "typescript",
    "java",
    "go",
    "rust",
    "docker",
    "kubernetes",
    "mongodb",
    "postgresql",
    "redis",
    "graphql",
    "rest api",
    "microservices",
    "machine learning",
    "ai",
]

COMPANY_KEYWORDS = [
    "google",
    "meta",
    "startup",
    "amazon",
    "microsoft",
    "apple",
    "netflix",
    "uber",
    "airbnb",
    "stripe",
    "spotify",
    "twitter",
    "linkedin",
    "salesforce",
]

INDUSTRY_KEYWORDS = [
    "fintech",
    "healthcare",
    "saas",
    "e-commerce",
    "social media",
    "gaming",
    "education",
    "travel",
    "food tech",
    "real estate",
    "logistics",
]

EXPERIENCE_PATTERNS: List[Pattern] = [
    re.compile(r"(\d+)\+?\s*years?", re.IGNORECASE),
    re.compile(r"senior", re.IGNORECASE),
    re.compile(r"junior", re.IGNORECASE),
    re.compile(r"lead", re.IGNORECASE),
    re.compile(r"staff", re.IGNORECASE),
    re.compile(r"principal", re.IGNORECASE),
]


def _contains(text_lower: str, keyword: str) -> bool:
    # Plain substring: "javascript" also yields "java", "chicago" yields "ca"
    return keyword in text_lower


def _first_match(text_lower: str, keywords: Sequence[str]) -> Optional[str]:
    return next((kw for kw in keywords if _contains(text_lower, kw)), None)


def _all_matches(text_lower: str, keywords: Sequence[str]) -> Optional[List[str]]:
    found = [kw for kw in keywords if _contains(text_lower, kw)]
    return found or None


def _experience(text: str) -> Optional[List[str]]:
    for pattern in EXPERIENCE_PATTERNS:
        match = pattern.search(text)
        if match:
            return [match.group(0)]
    return None


def extract_with_regex(text: str) -> Requirements:
    """
    Extract requirements with keyword vocabularies and experience patterns.

    Pure and deterministic. Fields without a match are left null, so an
    empty conversation gives an empty record.
    """
    if not text or not text.strip():
        return Requirements()

    text_lower = text.lower()

    result = Requirements(
        role=_first_match(text_lower, ROLE_KEYWORDS),
        location=_first_match(text_lower, LOCATION_KEYWORDS),
        experience=_experience(text),
        skills=_all_matches(text_lower, SKILL_KEYWORDS),
        companies=_all_matches(text_lower, COMPANY_KEYWORDS),
        industry=_all_matches(text_lower, INDUSTRY_KEYWORDS),
    )

    logger.debug(
        "Regex extraction: role=%s location=%s skills=%d",
        result.role,
        result.location,
        len(result.skills or []),
    )
    return result
