"""Color space conversion utilities.

Everything the compiler knows about color is expressed as canonical sRGB hex
(``#rrggbb``, lowercase). This module converts the supported input
representations into that form and derives the perceptual measurements used
downstream.

Public API:
- normalize_hex(value) -> str
- hex_to_rgb(hex) -> (r, g, b) floats in 0..1
- rgb_to_hex(r, g, b) -> str (gamut clamped)
- linearize(c) / delinearize(c)
- relative_luminance(hex) -> float (WCAG weighting)
- hex_to_oklab(hex) / hex_to_oklch(hex)
- oklab_to_hex(l, a, b)
- color_value_to_hex(value) -> str for plain hex or a structured value tagged
  with one of ``COLOR_SPACES``

Conversions never raise for out-of-gamut input; results are clamped to sRGB.
Malformed hex strings or unknown color spaces raise ``ValueError``.
"""

from __future__ import annotations

import math
import re
from typing import Any, Mapping, NamedTuple, Sequence, Tuple

Vec3 = Tuple[float, float, float]

_HEX_RE = re.compile(r"^#([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")
_HEX_ERR = "Color must be a #RGB or #RRGGBB hex string: {value}"

COLOR_SPACES: Tuple[str, ...] = (
    "srgb",
    "srgb-linear",
    "hsl",
    "hwb",
    "lab",
    "lch",
    "oklab",
    "oklch",
    "display-p3",
    "a98-rgb",
    "prophoto-rgb",
    "rec2020",
    "xyz-d65",
    "xyz-d50",
)


class OKLCH(NamedTuple):
    l: float  # noqa: E741 - conventional component name
    c: float
    h: float


# --- Matrices ---------------------------------------------------------------

_SRGB_TO_XYZ_D65 = (
    (0.4124, 0.3576, 0.1805),
    (0.2126, 0.7152, 0.0722),
    (0.0193, 0.1192, 0.9505),
)
_XYZ_D65_TO_SRGB = (
    (3.2404542, -1.5371385, -0.4985314),
    (-0.9692660, 1.8760108, 0.0415560),
    (0.0556434, -0.2040259, 1.0572252),
)
_XYZ_TO_OKLMS = (
    (0.8189330101, 0.3618667424, -0.1288597137),
    (0.0329845436, 0.9293118715, 0.0361456387),
    (0.0482003018, 0.2643662691, 0.6338517070),
)
_OKLMS_TO_OKLAB = (
    (0.2104542553, 0.7936177850, -0.0040720468),
    (1.9779984951, -2.4285922050, 0.4505937099),
    (0.0259040371, 0.7827717662, -0.8086757660),
)
_OKLAB_TO_OKLMS = (
    (1.0, 0.3963377774, 0.2158037573),
    (1.0, -0.1055613458, -0.0638541728),
    (1.0, -0.0894841775, -1.2914855480),
)
_OKLMS_TO_SRGB = (
    (4.0767416621, -3.3077115913, 0.2309699292),
    (-1.2684380046, 2.6097574011, -0.3413193965),
    (-0.0041960863, -0.7034186147, 1.7076147010),
)
_P3_TO_XYZ_D65 = (
    (0.4865709, 0.2656677, 0.1982173),
    (0.2289746, 0.6917385, 0.0792869),
    (0.0, 0.0451134, 1.0439444),
)
_A98_TO_XYZ_D65 = (
    (0.5766690429101305, 0.1855582379065463, 0.1882286462349947),
    (0.29734497525053605, 0.6273635662554661, 0.07529145849399788),
    (0.02703136138641234, 0.07068885253582723, 0.9913375368376388),
)
_REC2020_TO_XYZ_D65 = (
    (0.6369580483012914, 0.14461690358620832, 0.1688809751641721),
    (0.2627002120112671, 0.6779980715188708, 0.05930171646986196),
    (0.0, 0.028072693049087428, 1.060985057710791),
)
_PROPHOTO_TO_XYZ_D50 = (
    (0.7977604896723027, 0.13518583717574031, 0.0313493495815248),
    (0.2880711282292934, 0.7118432178101014, 0.00008565396060525902),
    (0.0, 0.0, 0.8251046025104601),
)
# Bradford chromatic adaptation D50 -> D65
_D50_TO_D65 = (
    (0.9555766, -0.0230393, 0.0631636),
    (-0.0282895, 1.0099416, 0.0210077),
    (0.0122982, -0.0204830, 1.3299098),
)
_D50_WHITE = (0.9642, 1.0, 0.8251)


def _dot3(m: Sequence[Sequence[float]], v: Sequence[float]) -> Vec3:
    return (
        m[0][0] * v[0] + m[0][1] * v[1] + m[0][2] * v[2],
        m[1][0] * v[0] + m[1][1] * v[1] + m[1][2] * v[2],
        m[2][0] * v[0] + m[2][1] * v[1] + m[2][2] * v[2],
    )


def _clamp(v: float, lo: float = 0.0, hi: float = 1.0) -> float:
    return max(lo, min(hi, v))


def _cbrt(v: float) -> float:
    return math.copysign(abs(v) ** (1 / 3), v)


# --- Hex handling -----------------------------------------------------------


def normalize_hex(value: str) -> str:
    """Return ``value`` as lowercase ``#rrggbb``; ``#rgb`` is expanded."""
    if not isinstance(value, str) or not _HEX_RE.match(value.strip()):
        raise ValueError(_HEX_ERR.format(value=value))
    core = value.strip()[1:]
    if len(core) == 3:
        core = "".join(ch * 2 for ch in core)
    return "#" + core.lower()


def hex_to_rgb(color: str) -> Vec3:
    core = normalize_hex(color)[1:]
    return (
        int(core[0:2], 16) / 255.0,
        int(core[2:4], 16) / 255.0,
        int(core[4:6], 16) / 255.0,
    )


def rgb_to_hex(r: float, g: float, b: float) -> str:
    return "#" + "".join(f"{int(round(_clamp(c) * 255)):02x}" for c in (r, g, b))


def linearize(c: float) -> float:
    return c / 12.92 if c <= 0.04045 else ((c + 0.055) / 1.055) ** 2.4


def delinearize(c: float) -> float:
    if c <= 0.0031308:
        return 12.92 * c
    return 1.055 * (c ** (1 / 2.4)) - 0.055


def linear_rgb_to_hex(r: float, g: float, b: float) -> str:
    """Gamut-clamp linear sRGB and encode it as hex."""
    return rgb_to_hex(*(delinearize(_clamp(c)) for c in (r, g, b)))


def hex_to_linear_rgb(color: str) -> Vec3:
    r, g, b = hex_to_rgb(color)
    return linearize(r), linearize(g), linearize(b)


def relative_luminance(color: str) -> float:
    r_l, g_l, b_l = hex_to_linear_rgb(color)
    # Rec. 709 coefficients used by WCAG
    return 0.2126 * r_l + 0.7152 * g_l + 0.0722 * b_l


# --- OKLab / OKLCH ------------------------------------------------------------


def hex_to_oklab(color: str) -> Vec3:
    xyz = _dot3(_SRGB_TO_XYZ_D65, hex_to_linear_rgb(color))
    lms = _dot3(_XYZ_TO_OKLMS, xyz)
    return _dot3(_OKLMS_TO_OKLAB, tuple(_cbrt(v) for v in lms))


def hex_to_oklch(color: str) -> OKLCH:
    L, a, b = hex_to_oklab(color)
    c = math.hypot(a, b)
    h = math.degrees(math.atan2(b, a))
    if h < 0:
        h += 360.0
    return OKLCH(L, c, h)


def oklab_to_linear_rgb(L: float, a: float, b: float) -> Vec3:
    lms_ = _dot3(_OKLAB_TO_OKLMS, (L, a, b))
    lms = tuple(v**3 for v in lms_)
    return _dot3(_OKLMS_TO_SRGB, lms)


def oklab_to_hex(L: float, a: float, b: float) -> str:
    return linear_rgb_to_hex(*oklab_to_linear_rgb(L, a, b))


# --- Structured color values -------------------------------------------------


def _component(value: Any) -> float:
    if value == "none" or value is None:
        return 0.0
    return float(value)


def _hue_to_rgb(h: float) -> Vec3:
    hp = (h % 360.0) / 60.0
    x = 1 - abs(hp % 2 - 1)
    if hp < 1:
        return 1.0, x, 0.0
    if hp < 2:
        return x, 1.0, 0.0
    if hp < 3:
        return 0.0, 1.0, x
    if hp < 4:
        return 0.0, x, 1.0
    if hp < 5:
        return x, 0.0, 1.0
    return 1.0, 0.0, x


def _hsl_to_rgb(h: float, s: float, l: float) -> Vec3:  # noqa: E741
    chroma = (1 - abs(2 * l - 1)) * s
    base = _hue_to_rgb(h)
    m = l - chroma / 2
    return tuple(c * chroma + m for c in base)  # type: ignore[return-value]


def _hwb_to_rgb(h: float, w: float, bk: float) -> Vec3:
    total = w + bk
    if total > 1:
        w, bk = w / total, bk / total
    base = _hue_to_rgb(h)
    return tuple(c * (1 - w - bk) + w for c in base)  # type: ignore[return-value]


def _lab_to_xyz_d50(L: float, a: float, b: float) -> Vec3:
    fy = (L + 16) / 116
    fx = a / 500 + fy
    fz = fy - b / 200
    eps = 216 / 24389
    kappa = 24389 / 27
    xr = fx**3 if fx**3 > eps else (116 * fx - 16) / kappa
    yr = ((L + 16) / 116) ** 3 if L > kappa * eps else L / kappa
    zr = fz**3 if fz**3 > eps else (116 * fz - 16) / kappa
    return xr * _D50_WHITE[0], yr * _D50_WHITE[1], zr * _D50_WHITE[2]


def _polar(c: float, h: float) -> Tuple[float, float]:
    rad = math.radians(h)
    return c * math.cos(rad), c * math.sin(rad)


def _signed_pow(v: float, exp: float) -> float:
    return math.copysign(abs(v) ** exp, v)


def _a98_linear(v: float) -> float:
    return _signed_pow(v, 563 / 256)


def _prophoto_linear(v: float) -> float:
    return v / 16 if abs(v) <= 16 / 512 else _signed_pow(v, 1.8)


def _rec2020_linear(v: float) -> float:
    alpha = 1.09929682680944
    beta = 0.018053968510807
    if abs(v) < beta * 4.5:
        return v / 4.5
    return math.copysign(((abs(v) + alpha - 1) / alpha) ** (1 / 0.45), v)


def _xyz_d65_to_hex(xyz: Vec3) -> str:
    return linear_rgb_to_hex(*_dot3(_XYZ_D65_TO_SRGB, xyz))


def _xyz_d50_to_hex(xyz: Vec3) -> str:
    return _xyz_d65_to_hex(_dot3(_D50_TO_D65, xyz))


def color_value_to_hex(value: str | Mapping[str, Any]) -> str:
    """Convert a plain hex string or a structured color value to canonical hex.

    Structured values look like ``{"colorSpace": "oklch", "components": [l, c, h]}``.
    An explicit ``hex`` member wins over the components. HSL/HWB saturation,
    lightness, whiteness and blackness are percentages (0-100); every other
    space uses its native component ranges.
    """
    if isinstance(value, str):
        return normalize_hex(value)
    if not isinstance(value, Mapping):
        raise ValueError(f"Unsupported color value: {value!r}")
    if value.get("hex"):
        return normalize_hex(value["hex"])
    space = value.get("colorSpace")
    comps = value.get("components")
    if space not in COLOR_SPACES:
        raise ValueError(f"Unknown color space: {space!r}")
    if not isinstance(comps, Sequence) or len(comps) != 3:
        raise ValueError(f"Color value components must be a 3-item list: {comps!r}")
    a, b, c = (_component(v) for v in comps)

    if space == "srgb":
        return rgb_to_hex(a, b, c)
    if space == "srgb-linear":
        return linear_rgb_to_hex(a, b, c)
    if space == "hsl":
        return rgb_to_hex(*_hsl_to_rgb(a, b / 100, c / 100))
    if space == "hwb":
        return rgb_to_hex(*_hwb_to_rgb(a, b / 100, c / 100))
    if space == "oklab":
        return oklab_to_hex(a, b, c)
    if space == "oklch":
        return oklab_to_hex(a, *_polar(b, c))
    if space == "lab":
        return _xyz_d50_to_hex(_lab_to_xyz_d50(a, b, c))
    if space == "lch":
        return _xyz_d50_to_hex(_lab_to_xyz_d50(a, *_polar(b, c)))
    if space == "display-p3":
        lin = (linearize(a), linearize(b), linearize(c))
        return _xyz_d65_to_hex(_dot3(_P3_TO_XYZ_D65, lin))
    if space == "a98-rgb":
        lin = (_a98_linear(a), _a98_linear(b), _a98_linear(c))
        return _xyz_d65_to_hex(_dot3(_A98_TO_XYZ_D65, lin))
    if space == "prophoto-rgb":
        lin = (_prophoto_linear(a), _prophoto_linear(b), _prophoto_linear(c))
        return _xyz_d50_to_hex(_dot3(_PROPHOTO_TO_XYZ_D50, lin))
    if space == "rec2020":
        lin = (_rec2020_linear(a), _rec2020_linear(b), _rec2020_linear(c))
        return _xyz_d65_to_hex(_dot3(_REC2020_TO_XYZ_D65, lin))
    if space == "xyz-d65":
        return _xyz_d65_to_hex((a, b, c))
    return _xyz_d50_to_hex((a, b, c))


def hex_to_color_value(color: str) -> dict:
    """Wrap a hex string as an ``srgb`` structured color value."""
    r, g, b = hex_to_rgb(color)
    return {
        "colorSpace": "srgb",
        "components": [round(r, 3), round(g, 3), round(b, 3)],
        "hex": normalize_hex(color),
    }


__all__ = [
    "COLOR_SPACES",
    "OKLCH",
    "normalize_hex",
    "hex_to_rgb",
    "rgb_to_hex",
    "linearize",
    "delinearize",
    "linear_rgb_to_hex",
    "hex_to_linear_rgb",
    "relative_luminance",
    "hex_to_oklab",
    "hex_to_oklch",
    "oklab_to_linear_rgb",
    "oklab_to_hex",
    "color_value_to_hex",
    "hex_to_color_value",
]
