"""Explicit success / failure result used by the extraction layers."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """
    Result of a best-effort step.

    ``value`` is always usable: on failure it holds the degraded fallback
    value and ``error`` says why the step failed.
    """
    value: T
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "Outcome[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, fallback: T, reason: str) -> "Outcome[T]":
        return cls(value=fallback, error=reason or "unknown error")
