"""WCAG 2.1 contrast engine.

Implements the SC 1.4.3 / 1.4.6 (text) and SC 1.4.11 (non-text) contrast ratio
checks.

Public API:
- contrast_ratio(fg: str, bg: str) -> float
- Wcag21Engine / wcag21 (module singleton)

Large text is >= 24px; bold-text thresholds are not modelled (weight is fixed
at 400).
"""

from __future__ import annotations

from ...config.settings import LARGE_TEXT_PX
from ..color_space import relative_luminance
from .base import ComplianceContext, ComplianceEvaluation, Direction, exempt_evaluation

__all__ = ["contrast_ratio", "luminance_ratio", "Wcag21Engine", "wcag21"]


def luminance_ratio(l1: float, l2: float) -> float:
    lighter = max(l1, l2)
    darker = min(l1, l2)
    return (lighter + 0.05) / (darker + 0.05)


def contrast_ratio(fg: str, bg: str) -> float:
    return luminance_ratio(relative_luminance(fg), relative_luminance(bg))


def _required_ratio(context: ComplianceContext) -> float:
    if context.target == "ui-component":
        return 4.5 if context.level == "AAA" else 3.0
    large = context.font_size_px >= LARGE_TEXT_PX
    if context.level == "AAA":
        return 4.5 if large else 7.0
    return 3.0 if large else 4.5


class Wcag21Engine:
    id = "wcag21"

    def evaluate(
        self, fg_hex: str, bg_hex: str, context: ComplianceContext
    ) -> ComplianceEvaluation:
        if context.target == "decorative":
            return exempt_evaluation()
        fg_l = relative_luminance(fg_hex)
        bg_l = relative_luminance(bg_hex)
        ratio = luminance_ratio(fg_l, bg_l)
        required = _required_ratio(context)
        return ComplianceEvaluation(
            passed=ratio >= required,
            metric="wcag21-ratio",
            value=ratio,
            required=required,
            polarity="dark-on-light" if fg_l < bg_l else "light-on-dark",
        )

    def preferred_direction(self, bg_hex: str) -> Direction:
        return "darker" if relative_luminance(bg_hex) > 0.5 else "lighter"

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return "Wcag21Engine()"


wcag21 = Wcag21Engine()
