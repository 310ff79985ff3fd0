"""
Data Models
Pydantic models for the requirements record and conversation turns
"""

from typing import Iterable, List, Literal, Optional

from pydantic import BaseModel, Field

SCALAR_FIELDS = ("role", "location")
LIST_FIELDS = ("experience", "skills", "companies", "industry", "qualities")


def dedupe_case_insensitive(items: Iterable[str]) -> List[str]:
    """Trim, drop empties and de-duplicate ignoring case (first spelling wins)."""
    seen = set()
    out: List[str] = []
    for item in items:
        if not isinstance(item, str):
            continue
        cleaned = item.strip()
        key = cleaned.lower()
        if cleaned and key not in seen:
            seen.add(key)
            out.append(cleaned)
    return out


def as_sentence(text: str) -> str:
    """Capitalize the first letter of a quality sentence."""
    text = text.strip()
    return text[:1].upper() + text[1:] if text else text


# ==========================================
# Conversation Models
# ==========================================

class ConversationTurn(BaseModel):
    """One message of the intake conversation"""
    role: Literal["user", "assistant"]
    content: str = Field(..., max_length=20000)


# ==========================================
# Requirements Record
# ==========================================

class Requirements(BaseModel):
    """Structured job requirements accumulated over an intake session"""
    role: Optional[str] = Field(None, description="Job title, e.g. 'Software Engineer'")
    location: Optional[str] = Field(None, description="City or 'remote'")
    experience: Optional[List[str]] = Field(None, description="e.g. ['4+ years', 'Senior level']")
    skills: Optional[List[str]] = Field(None, description="Hard skills and tools")
    companies: Optional[List[str]] = Field(None, description="Companies of interest")
    industry: Optional[List[str]] = Field(None, description="Industry / domain tags")
    qualities: Optional[List[str]] = Field(
        None, description="Soft requirements, each a complete sentence"
    )

    @classmethod
    def blank(cls) -> "Requirements":
        """All-null scalars and all-empty lists (the AI extraction default)."""
        return cls(role=None, location=None, experience=[], skills=[], companies=[], industry=[], qualities=[])

    def is_comprehensive(self, min_skills: int = 2, min_qualities: int = 2) -> bool:
        """Role, location, more than ``min_skills`` skills and ``min_qualities`` qualities."""
        return bool(
            self.role
            and self.location
            and len(self.skills or []) > min_skills
            and len(self.qualities or []) > min_qualities
        )

    def normalized(self) -> "Requirements":
        """
        Output-boundary form of the record.

        - Blank strings become null
        - List fields are trimmed and de-duplicated case-insensitively
        - Qualities start with a capital letter
        - Empty lists become null
        """
        data = {}
        for name in SCALAR_FIELDS:
            value = getattr(self, name)
            data[name] = value.strip() if isinstance(value, str) and value.strip() else None

        for name in LIST_FIELDS:
            values = getattr(self, name) or []
            if name == "qualities":
                values = [as_sentence(v) for v in values if isinstance(v, str)]
            deduped = dedupe_case_insensitive(values)
            data[name] = deduped or None

        return Requirements(**data)
