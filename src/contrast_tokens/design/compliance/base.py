"""Shared compliance types.

Engines are plain objects satisfying :class:`ComplianceEngine`; there is no
base class to inherit from. ``preferred_direction`` is optional and callers
must probe for it with ``getattr``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional, Protocol, runtime_checkable

Target = Literal["text", "ui-component", "decorative"]
Level = Literal["AA", "AAA"]
Polarity = Literal["dark-on-light", "light-on-dark"]
Direction = Literal["lighter", "darker", "either"]

__all__ = [
    "Target",
    "Level",
    "Polarity",
    "Direction",
    "ComplianceContext",
    "ComplianceEvaluation",
    "ComplianceEngine",
    "exempt_evaluation",
]


@dataclass(frozen=True)
class ComplianceContext:
    font_size_px: int
    font_weight: int = 400
    target: Target = "text"
    level: Level = "AA"


@dataclass(frozen=True)
class ComplianceEvaluation:
    passed: bool
    metric: str
    value: float
    required: Optional[float] = None
    polarity: Optional[Polarity] = None

    def to_dict(self) -> dict:
        data: dict = {"pass": self.passed, "metric": self.metric, "value": self.value}
        if self.required is not None:
            data["required"] = self.required
        if self.polarity is not None:
            data["polarity"] = self.polarity
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "ComplianceEvaluation":
        return cls(
            passed=bool(data["pass"]),
            metric=str(data["metric"]),
            value=float(data["value"]),
            required=data.get("required"),
            polarity=data.get("polarity"),
        )


@runtime_checkable
class ComplianceEngine(Protocol):
    id: str

    def evaluate(
        self, fg_hex: str, bg_hex: str, context: ComplianceContext
    ) -> ComplianceEvaluation: ...


def exempt_evaluation() -> ComplianceEvaluation:
    """Automatic pass used for decorative targets."""
    return ComplianceEvaluation(passed=True, metric="wcag-exempt", value=0.0, required=0.0)
