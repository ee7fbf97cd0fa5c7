"""Shared result types for verification checks."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence


@dataclass
class VerificationResult:
    """Every mismatch found by a check; valid only when there are none."""

    errors: List[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    @classmethod
    def from_errors(cls, errors: Sequence[str]) -> "VerificationResult":
        return cls(errors=list(errors))
