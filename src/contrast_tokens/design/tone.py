"""Tone profile overlays.

Themes and semantic tokens may declare named tone variants (e.g. ``muted`` or
``vivid``). Applying a tone returns a fresh copy of the raw specification in
which each participating theme / token has its fields replaced by the tone's
values; anything the tone omits is inherited. Token tone overrides are
appended after the token's own overrides so they win specificity ties.

Public API:
    apply_tone_mode(raw, tone) -> dict
    available_tones(raw) -> tuple[str, ...]
"""

from __future__ import annotations

import copy
from typing import Any, Dict, Mapping, Tuple

from .schema import SEMANTIC_SECTIONS

__all__ = ["apply_tone_mode", "available_tones"]

_THEME_FIELDS = ("ramp", "step", "fallback", "aliases")


def _merge_theme(theme: Dict[str, Any], tone: Mapping[str, Any]) -> Dict[str, Any]:
    merged = dict(theme)
    for key in _THEME_FIELDS:
        if key in tone:
            merged[key] = copy.deepcopy(tone[key])
    return merged


def _merge_semantic(sem: Dict[str, Any], tone: Mapping[str, Any]) -> Dict[str, Any]:
    merged = dict(sem)
    if "ramp" in tone:
        merged["ramp"] = tone["ramp"]
    if "defaultStep" in tone:
        merged["defaultStep"] = tone["defaultStep"]
    merged["overrides"] = list(sem.get("overrides") or []) + copy.deepcopy(
        list(tone.get("overrides") or [])
    )
    return merged


def apply_tone_mode(raw: Mapping[str, Any], tone: str | None) -> Dict[str, Any]:
    result: Dict[str, Any] = copy.deepcopy(dict(raw))
    if not tone or tone == "default":
        return result

    for name, theme in (result.get("themes") or {}).items():
        overlay = (theme.get("tone") or {}).get(tone)
        if overlay:
            result["themes"][name] = _merge_theme(theme, overlay)

    for section in SEMANTIC_SECTIONS:
        block = result.get(section) or {}
        for name, sem in block.items():
            overlay = (sem.get("tone") or {}).get(tone)
            if overlay:
                block[name] = _merge_semantic(sem, overlay)
    return result


def available_tones(raw: Mapping[str, Any]) -> Tuple[str, ...]:
    """Tone names declared anywhere in the specification, in first-seen order."""
    seen: Dict[str, None] = {}
    for theme in (raw.get("themes") or {}).values():
        for name in theme.get("tone") or {}:
            seen.setdefault(name)
    for section in SEMANTIC_SECTIONS:
        for sem in (raw.get(section) or {}).values():
            for name in sem.get("tone") or {}:
                seen.setdefault(name)
    return tuple(seen)
