"""Recover a JSON object from model output that is not strictly valid JSON."""
from __future__ import annotations

import json
import re
from typing import Any, Optional

from intakebrain.exceptions import JSONSalvageError

_GREEDY_OBJECT = re.compile(r"\{[\s\S]*\}")


def _try_parse(text: str) -> Optional[Any]:
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return None


def _scan_lines(text: str) -> Optional[Any]:
    """Accumulate lines from the first one starting with '{', parsing at each line ending with '}'."""
    buffer: Optional[str] = None
    for line in text.split("\n"):
        stripped = line.strip()
        if buffer is None:
            if not stripped.startswith("{"):
                continue
            buffer = line
        else:
            buffer += line
        if stripped.endswith("}"):
            parsed = _try_parse(buffer)
            if parsed is not None:
                return parsed
    return None


def salvage_json(text: str) -> Any:
    """
    Parse JSON out of an LLM response.

    Strategies, in order:
    1. The whole text
    2. Greedy match from the first '{' to the last '}'
    3. Line scan (see ``_scan_lines``)

    Raises JSONSalvageError if nothing parses.
    """
    if not text:
        raise JSONSalvageError(text or "")

    parsed = _try_parse(text)
    if parsed is not None:
        return parsed

    match = _GREEDY_OBJECT.search(text)
    if match:
        parsed = _try_parse(match.group(0))
        if parsed is not None:
            return parsed

    parsed = _scan_lines(text)
    if parsed is not None:
        return parsed

    raise JSONSalvageError(text)


def salvage_json_object(text: str) -> dict:
    """Like ``salvage_json`` but the result must be a JSON object."""
    parsed = salvage_json(text)
    if not isinstance(parsed, dict):
        raise JSONSalvageError(text)
    return parsed
