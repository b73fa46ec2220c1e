"""APCA (Accessible Perceptual Contrast Algorithm) engine.

Follows the 0.0.98G-4g constants. Lc values run roughly 0..106 for dark text
on light backgrounds and 0..108 for the reverse polarity; the engine reports
the absolute value so thresholds are polarity independent.
"""

from __future__ import annotations

from ..color_space import relative_luminance
from .base import ComplianceContext, ComplianceEvaluation, Direction, exempt_evaluation

__all__ = ["soft_clamp", "apca_lc", "ApcaEngine", "apca"]

_Y_THRESHOLD = 0.022
_Y_CLAMP_EXP = 1.414
_SCALE = 1.14
_LOW_CLIP = 0.027
_DEAD_ZONE = 0.001

# (font size upper bound px, AA, AAA); the last bucket is open ended
_TEXT_THRESHOLDS = ((14, 75.0, 90.0), (24, 60.0, 75.0), (None, 45.0, 60.0))
_NON_TEXT_THRESHOLDS = {"AA": 30.0, "AAA": 45.0}


def soft_clamp(y: float) -> float:
    """Soft clamp near black so very dark colors do not over-report contrast."""
    return y if y >= _Y_THRESHOLD else y + (_Y_THRESHOLD - y) ** _Y_CLAMP_EXP


def apca_lc(fg_hex: str, bg_hex: str) -> tuple[float, str]:
    """Return the signed Lc value and polarity for text on background."""
    txt_y = soft_clamp(relative_luminance(fg_hex))
    bg_y = soft_clamp(relative_luminance(bg_hex))
    if bg_y > txt_y:
        sapc = (bg_y**0.56 - txt_y**0.57) * _SCALE
        if abs(sapc) < _DEAD_ZONE:
            sapc = 0.0
        lc = (sapc - _LOW_CLIP) * 100 if sapc > _LOW_CLIP else 0.0
        return lc, "dark-on-light"
    sapc = (bg_y**0.65 - txt_y**0.62) * _SCALE
    if abs(sapc) < _DEAD_ZONE:
        sapc = 0.0
    lc = (sapc + _LOW_CLIP) * 100 if sapc < -_LOW_CLIP else 0.0
    return lc, "light-on-dark"


def _required_lc(context: ComplianceContext) -> float:
    if context.target == "ui-component":
        return _NON_TEXT_THRESHOLDS[context.level]
    for bound, aa, aaa in _TEXT_THRESHOLDS:
        if bound is None or context.font_size_px < bound:
            return aaa if context.level == "AAA" else aa
    raise AssertionError("unreachable")  # pragma: no cover


class ApcaEngine:
    id = "apca"

    def evaluate(
        self, fg_hex: str, bg_hex: str, context: ComplianceContext
    ) -> ComplianceEvaluation:
        if context.target == "decorative":
            return exempt_evaluation()
        lc, polarity = apca_lc(fg_hex, bg_hex)
        value = abs(lc)
        required = _required_lc(context)
        return ComplianceEvaluation(
            passed=value >= required,
            metric="apca-lc",
            value=value,
            required=required,
            polarity=polarity,  # type: ignore[arg-type]
        )

    def preferred_direction(self, bg_hex: str) -> Direction:
        return "darker" if relative_luminance(bg_hex) > 0.5 else "lighter"


apca = ApcaEngine()
