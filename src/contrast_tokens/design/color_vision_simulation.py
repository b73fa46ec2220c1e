"""Color Vision Deficiency Simulation Utilities.

Matrix-based approximations for simulating how a color is perceived under the
four supported deficiency types. These are not clinically perfect but are
stable and deterministic, which is what the auto-correction pass needs.

Approach (protanopia / deuteranopia / tritanopia):
 - Parse hex -> linear sRGB -> XYZ (D65)
 - Project into LMS cone space with the Hunt-Pointer-Estevez matrix
 - Collapse the missing cone response with a Brettel/Viénot 3x3 matrix
 - Project back LMS -> XYZ -> linear sRGB, clamp to gamut, re-apply gamma

Achromatopsia zeroes OKLab chroma while keeping OKLab lightness.

Public API:
 - simulate_hex(color: str, mode: str | None) -> str
 - transform_palette(palette: Mapping[str, str], mode: str | None) -> dict[str,str]
 - oklab_delta_e(a: str, b: str) -> float   (Euclidean OKLab distance x 100)
"""

from __future__ import annotations

import math
from functools import lru_cache
from typing import Dict, Mapping

from .color_space import (
    _dot3,
    hex_to_linear_rgb,
    hex_to_oklab,
    linear_rgb_to_hex,
    normalize_hex,
    oklab_to_hex,
)

__all__ = [
    "CVD_TYPES",
    "simulate_hex",
    "transform_palette",
    "oklab_delta_e",
]

CVD_TYPES = ("protanopia", "deuteranopia", "tritanopia", "achromatopsia")

_SRGB_TO_XYZ = (
    (0.4124564, 0.3575761, 0.1804375),
    (0.2126729, 0.7151522, 0.0721750),
    (0.0193339, 0.1191920, 0.9503041),
)
# Hunt-Pointer-Estevez XYZ (D65) -> LMS and inverse
_XYZ_TO_LMS = (
    (0.4002, 0.7076, -0.0808),
    (-0.2263, 1.1653, 0.0457),
    (0.0, 0.0, 0.9182),
)
_LMS_TO_XYZ = (
    (1.8600, -1.1295, 0.2199),
    (0.3612, 0.6388, -0.0001),
    (0.0, 0.0, 1.0891),
)
_XYZ_TO_SRGB = (
    (3.2404542, -1.5371385, -0.4985314),
    (-0.9692660, 1.8760108, 0.0415560),
    (0.0556434, -0.2040259, 1.0572252),
)

_MATRICES = {
    "protanopia": (
        (0.0, 1.05118, -0.05116),
        (0.0, 1.0, 0.0),
        (0.0, 0.0, 1.0),
    ),
    "deuteranopia": (
        (1.0, 0.0, 0.0),
        (0.9513, 0.0, 0.0487),
        (0.0, 0.0, 1.0),
    ),
    "tritanopia": (
        (1.0, 0.0, 0.0),
        (0.0, 1.0, 0.0),
        (-0.8674, 1.8673, 0.0),
    ),
}


@lru_cache(maxsize=4096)
def _simulate(color: str, mode: str) -> str:
    if mode == "achromatopsia":
        L, _a, _b = hex_to_oklab(color)
        return oklab_to_hex(L, 0.0, 0.0)
    xyz = _dot3(_SRGB_TO_XYZ, hex_to_linear_rgb(color))
    lms = _dot3(_XYZ_TO_LMS, xyz)
    lms_cvd = _dot3(_MATRICES[mode], lms)
    xyz_cvd = _dot3(_LMS_TO_XYZ, lms_cvd)
    return linear_rgb_to_hex(*_dot3(_XYZ_TO_SRGB, xyz_cvd))


def simulate_hex(color: str, mode: str | None) -> str:
    """Return simulated color; passthrough if mode is None or not a deficiency."""
    if mode not in CVD_TYPES:
        return color
    return _simulate(normalize_hex(color), mode)


def transform_palette(palette: Mapping[str, str], mode: str | None) -> Dict[str, str]:
    if not mode:
        return dict(palette)
    return {k: simulate_hex(v, mode) for k, v in palette.items()}


@lru_cache(maxsize=8192)
def oklab_delta_e(a: str, b: str) -> float:
    """Perceptual distance between two hex colors.

    Scaled x100 so that thresholds in the 1-20 range are meaningful.
    """
    la, aa, ba = hex_to_oklab(a)
    lb, ab, bb = hex_to_oklab(b)
    return 100 * math.sqrt((la - lb) ** 2 + (aa - ab) ** 2 + (ba - bb) ** 2)
