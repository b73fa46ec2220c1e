"""Global configuration and constants for token compilation."""

from __future__ import annotations

import os
from types import MappingProxyType
from typing import Final, Mapping, Tuple

DEFAULT_WCAG_TARGET: Final = "AA"
DEFAULT_COMPLIANCE_ENGINE: Final = os.environ.get("CONTRAST_TOKENS_ENGINE", "wcag21")
DEFAULT_STEP_STRATEGY: Final = "closest"
DEFAULT_ON_UNRESOLVED_OVERRIDE: Final = "warn"
LOG_LEVEL: Final = os.environ.get("CONTRAST_TOKENS_LOG_LEVEL", "WARNING")

# Font weight is fixed at 400; bold-text thresholds are not modelled.
DEFAULT_FONT_WEIGHT: Final = 400
LARGE_TEXT_PX: Final = 24

ALL_FONT_SIZES: Final[Tuple[str, ...]] = ("12px", "14px", "16px", "20px", "24px", "32px")
ALL_VISION_MODES: Final[Tuple[str, ...]] = (
    "default",
    "deuteranopia",
    "protanopia",
    "tritanopia",
    "achromatopsia",
)
CVD_TYPES: Final[Tuple[str, ...]] = ALL_VISION_MODES[1:]

# Elevation offsets applied when the input declares no stacks of its own.
DEFAULT_STACK_OFFSETS: Final[Mapping[str, int]] = MappingProxyType(
    {"root": 0, "card": 1, "popover": 2, "tooltip": 2, "modal": 2, "overlay": 3}
)

# Resolver relaxation order, nearest level first.
STACK_FALLBACK: Final[Mapping[str, Tuple[str, ...]]] = MappingProxyType(
    {
        "overlay": ("modal", "tooltip", "popover", "card", "root"),
        "modal": ("tooltip", "popover", "card", "root"),
        "tooltip": ("popover", "card", "root"),
        "popover": ("card", "root"),
        "card": ("root",),
        "root": (),
    }
)

# CVD auto-correction
CVD_CONFUSION_THRESHOLD: Final = 5.0
CVD_DISTINGUISHABLE_THRESHOLD: Final = 8.0
CVD_SEPARATION_WEIGHT: Final = 0.7
CVD_DRIFT_WEIGHT: Final = 0.3
CVD_MIN_IMPROVEMENT: Final = 0.5

REGISTRY_FORMAT_VERSION: Final = 2
