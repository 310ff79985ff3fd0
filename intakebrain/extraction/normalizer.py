"""
Requirements normalizer.

Cleans a requirements record for display without calling the model:
markdown bold and bullet markers are stripped, short fields are
title-cased and quality sentences keep their original casing.
"""
import re
from typing import Any, List, Mapping, Optional, Union

from intakebrain.models import LIST_FIELDS, Requirements

BOLD = re.compile(r"\*\*")
LEADING_BULLET = re.compile(r"^\s*(?:[•*\-]\s*)+")

TITLE_CASED_LISTS = tuple(name for name in LIST_FIELDS if name != "qualities")


def strip_markup(text: str) -> str:
    text = BOLD.sub("", text)
    text = LEADING_BULLET.sub("", text)
    return text.strip()


def capitalize_words(text: str) -> str:
    """'senior BACKEND engineer' -> 'Senior Backend Engineer'"""
    words = strip_markup(text).split()
    return " ".join(word[:1].upper() + word[1:].lower() for word in words)


def _clean_scalar(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    return capitalize_words(value) or None


def _clean_list(values: Any, title_case: bool) -> Optional[List[str]]:
    if isinstance(values, str):
        values = [values]
    if not isinstance(values, list):
        return None
    cleaned = []
    for value in values:
        if not isinstance(value, str):
            continue
        value = capitalize_words(value) if title_case else strip_markup(value)
        if value:
            cleaned.append(value)
    return cleaned or None


def normalize_requirements(raw: Union[Requirements, Mapping[str, Any], None]) -> Requirements:
    if raw is None:
        return Requirements()
    if isinstance(raw, Requirements):
        raw = raw.model_dump()

    data = {
        "role": _clean_scalar(raw.get("role")),
        "location": _clean_scalar(raw.get("location")),
        "qualities": _clean_list(raw.get("qualities"), title_case=False),
    }
    for name in TITLE_CASED_LISTS:
        data[name] = _clean_list(raw.get(name), title_case=True)

    return Requirements(**data)
