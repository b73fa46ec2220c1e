"""Structural validation of raw token specifications.

This is the input gate in front of the compiler. It never raises; it
collects flat, path-qualified error strings such as::

    themes.white.step 9 is out of bounds for ramp "neutral" (length 3)

so the caller can report every problem at once. The compiler trusts this gate
and only re-checks cross references it cannot delegate.

Public API:
- validate_schema(raw) -> SchemaValidationResult
- TokenValidationError (raised by ``ensure_valid``)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Mapping, Sequence

from ..config.settings import ALL_FONT_SIZES
from .color_space import COLOR_SPACES, normalize_hex

__all__ = [
    "SchemaValidationResult",
    "TokenValidationError",
    "validate_schema",
    "ensure_valid",
    "SEMANTIC_SECTIONS",
]

SEMANTIC_SECTIONS = ("foreground", "nonText")
_STRATEGIES = ("closest", "mirror-closest")
_TARGETS = ("AA", "AAA")
_ENGINES = ("wcag21", "apca")
_UNRESOLVED_POLICIES = ("error", "warn")


class TokenValidationError(RuntimeError):
    """Raised when a raw specification fails structural validation."""

    def __init__(self, errors: Sequence[str]):
        self.errors = list(errors)
        super().__init__("Invalid token input:\n" + "\n".join(self.errors))


@dataclass
class SchemaValidationResult:
    errors: List[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors


def _is_mapping(value: Any) -> bool:
    return isinstance(value, Mapping)


def _is_step(value: Any, length: int) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value < length


def _is_str_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(v, str) for v in value)


def _check_color(value: Any, path: str, errors: List[str]) -> None:
    if isinstance(value, str):
        try:
            normalize_hex(value)
        except ValueError:
            errors.append(f"{path} must be a valid hex color (got {value})")
        return
    if not _is_mapping(value):
        errors.append(f"{path} must be a hex string or color value object")
        return
    if value.get("hex") is not None:
        _check_color(value["hex"], f"{path}.hex", errors)
        return
    if value.get("colorSpace") not in COLOR_SPACES:
        errors.append(f"{path}.colorSpace {value.get('colorSpace')!r} is not a supported color space")
    comps = value.get("components")
    if not isinstance(comps, list) or len(comps) != 3:
        errors.append(f"{path}.components must be a list of 3 numbers")
    elif any(not (c == "none" or (isinstance(c, (int, float)) and not isinstance(c, bool))) for c in comps):
        errors.append(f"{path}.components must contain numbers or 'none'")


def _check_override(
    ov: Any, path: str, ramp_length: int, themes: Mapping[str, Any], errors: List[str]
) -> None:
    if not _is_mapping(ov):
        errors.append(f"{path} must be an object")
        return
    if not _is_step(ov.get("step"), ramp_length):
        errors.append(f"{path}.step {ov.get('step')} is out of bounds (ramp length {ramp_length})")
    for key in ("bg", "fontSize", "stack"):
        if key not in ov:
            continue
        raw = ov[key]
        values = raw if isinstance(raw, list) else [raw]
        if not values or not all(isinstance(v, str) for v in values):
            errors.append(f"{path}.{key} must be a string or a non-empty list of strings")
            continue
        if key == "bg":
            for bg in values:
                if bg not in themes:
                    errors.append(f'{path}.bg references unknown theme "{bg}"')
        elif key == "fontSize":
            for size in values:
                if size not in ALL_FONT_SIZES:
                    errors.append(f'{path}.fontSize "{size}" is not one of {", ".join(ALL_FONT_SIZES)}')


def _check_overrides(
    raw: Any, path: str, ramp_length: int, themes: Mapping[str, Any], errors: List[str]
) -> None:
    if raw is None:
        return
    if not isinstance(raw, list):
        errors.append(f"{path} must be an array")
        return
    for i, ov in enumerate(raw):
        _check_override(ov, f"{path}[{i}]", ramp_length, themes, errors)


def _ramp_length(primitives: Mapping[str, Any], name: Any) -> int | None:
    steps = primitives.get(name) if isinstance(name, str) else None
    return len(steps) if isinstance(steps, list) else None


def _check_variant_block(
    block: Any,
    path: str,
    base_length: int,
    primitives: Mapping[str, Any],
    themes: Mapping[str, Any],
    errors: List[str],
) -> None:
    """Validate ``vision`` / ``tone`` maps: optional ramp, defaultStep, overrides."""
    if not _is_mapping(block):
        errors.append(f"{path} must be an object")
        return
    for mode, entry in block.items():
        entry_path = f"{path}.{mode}"
        if not _is_mapping(entry):
            errors.append(f"{entry_path} must be an object")
            continue
        length = base_length
        if "ramp" in entry:
            found = _ramp_length(primitives, entry["ramp"])
            if found is None:
                errors.append(f'{entry_path}.ramp references unknown ramp "{entry["ramp"]}"')
                continue
            length = found
        if "defaultStep" in entry and not _is_step(entry["defaultStep"], length):
            errors.append(f"{entry_path}.defaultStep {entry['defaultStep']} is out of bounds")
        _check_overrides(entry.get("overrides"), f"{entry_path}.overrides", length, themes, errors)


def _check_semantic(
    sem: Any,
    path: str,
    primitives: Mapping[str, Any],
    themes: Mapping[str, Any],
    errors: List[str],
) -> None:
    if not _is_mapping(sem):
        errors.append(f"{path} must be an object")
        return
    if not isinstance(sem.get("ramp"), str):
        errors.append(f"{path}.ramp must be a string")
        return
    length = _ramp_length(primitives, sem["ramp"])
    if length is None:
        errors.append(f'{path}.ramp references unknown ramp "{sem["ramp"]}"')
        return
    if not _is_step(sem.get("defaultStep"), length):
        errors.append(
            f'{path}.defaultStep {sem.get("defaultStep")} is out of bounds for ramp "{sem["ramp"]}" (length {length})'
        )
    if "decorative" in sem and not isinstance(sem["decorative"], bool):
        errors.append(f"{path}.decorative must be a boolean")
    _check_overrides(sem.get("overrides"), f"{path}.overrides", length, themes, errors)

    interactions = sem.get("interactions")
    if interactions is not None:
        if not _is_mapping(interactions):
            errors.append(f"{path}.interactions must be an object")
        else:
            for state, entry in interactions.items():
                state_path = f"{path}.interactions.{state}"
                if not _is_mapping(entry):
                    errors.append(f"{state_path} must be an object")
                    continue
                if not _is_step(entry.get("step"), length):
                    errors.append(f"{state_path}.step {entry.get('step')} is out of bounds")
                _check_overrides(entry.get("overrides"), f"{state_path}.overrides", length, themes, errors)

    for block in ("vision", "tone"):
        if sem.get(block) is not None:
            _check_variant_block(sem[block], f"{path}.{block}", length, primitives, themes, errors)


def _check_theme(
    name: str, theme: Any, primitives: Mapping[str, Any], errors: List[str]
) -> None:
    path = f"themes.{name}"
    if not _is_mapping(theme):
        errors.append(f"{path} must be an object")
        return
    if not isinstance(theme.get("ramp"), str):
        errors.append(f"{path}.ramp must be a string")
    else:
        length = _ramp_length(primitives, theme["ramp"])
        if length is None:
            errors.append(f'{path}.ramp references unknown ramp "{theme["ramp"]}"')
        elif not _is_step(theme.get("step"), length):
            errors.append(
                f'{path}.step {theme.get("step")} is out of bounds for ramp "{theme["ramp"]}" (length {length})'
            )
    for key in ("fallback", "aliases"):
        if key in theme and not _is_str_list(theme[key]):
            errors.append(f"{path}.{key} must be an array of strings")
    tone = theme.get("tone")
    if tone is not None:
        if not _is_mapping(tone):
            errors.append(f"{path}.tone must be an object")
            return
        for mode, entry in tone.items():
            entry_path = f"{path}.tone.{mode}"
            if not _is_mapping(entry):
                errors.append(f"{entry_path} must be an object")
                continue
            ramp_name = entry.get("ramp", theme.get("ramp"))
            length = _ramp_length(primitives, ramp_name)
            if length is None:
                errors.append(f'{entry_path}.ramp references unknown ramp "{ramp_name}"')
            elif "step" in entry and not _is_step(entry["step"], length):
                errors.append(f"{entry_path}.step {entry['step']} is out of bounds")
            for key in ("fallback", "aliases"):
                if key in entry and not _is_str_list(entry[key]):
                    errors.append(f"{entry_path}.{key} must be an array of strings")


def _check_config(config: Any, themes: Mapping[str, Any], errors: List[str]) -> None:
    if not _is_mapping(config):
        errors.append("config must be an object")
        return
    enums = (
        ("wcagTarget", _TARGETS),
        ("complianceEngine", _ENGINES),
        ("stepSelectionStrategy", _STRATEGIES),
        ("onUnresolvedOverride", _UNRESOLVED_POLICIES),
    )
    for key, allowed in enums:
        if key in config and config[key] not in allowed:
            errors.append(f"config.{key} must be one of: {', '.join(allowed)}")
    if "defaultTheme" in config:
        if not isinstance(config["defaultTheme"], str):
            errors.append("config.defaultTheme must be a string")
        elif config["defaultTheme"] not in themes:
            errors.append(f'config.defaultTheme "{config["defaultTheme"]}" is not a key in themes')
    stacks = config.get("stacks")
    if stacks is not None:
        if not _is_mapping(stacks):
            errors.append("config.stacks must be an object")
        else:
            for stack, offset in stacks.items():
                if not isinstance(offset, int) or isinstance(offset, bool):
                    errors.append(f"config.stacks.{stack} must be an integer offset")
    cvd = config.get("cvd")
    if cvd is not None:
        if not _is_mapping(cvd):
            errors.append("config.cvd must be an object")
        else:
            if "enabled" in cvd and not isinstance(cvd["enabled"], bool):
                errors.append("config.cvd.enabled must be a boolean")
            for key in ("confusionThresholdDE", "distinguishableThresholdDE"):
                if key in cvd and not isinstance(cvd[key], (int, float)):
                    errors.append(f"config.cvd.{key} must be a number")


def _check_interaction_names(raw: Mapping[str, Any], declared: set[str], errors: List[str]) -> None:
    """Derived ``<token>-<state>`` names must not shadow a declared token or each other."""
    derived_names: set[str] = set()
    for section in SEMANTIC_SECTIONS:
        block = raw.get(section)
        if not _is_mapping(block):
            continue
        for token_name, sem in block.items():
            interactions = sem.get("interactions") if _is_mapping(sem) else None
            if not _is_mapping(interactions):
                continue
            for state in interactions:
                derived = f"{token_name}-{state}"
                path = f"{section}.{token_name}.interactions.{state}"
                if derived in declared:
                    errors.append(f'{path} derives "{derived}", which is already declared as a token')
                elif derived in derived_names:
                    errors.append(f'{path} derives "{derived}", which another interaction also derives')
                derived_names.add(derived)


def validate_schema(raw: Any) -> SchemaValidationResult:
    result = SchemaValidationResult()
    errors = result.errors
    if not _is_mapping(raw):
        errors.append("Input must be an object")
        return result

    primitives = raw.get("primitives")
    if not _is_mapping(primitives):
        errors.append("primitives must be an object")
        primitives = {}
    else:
        for ramp_name, steps in primitives.items():
            if not isinstance(steps, list) or not steps:
                errors.append(f"primitives.{ramp_name} must be a non-empty array")
                continue
            for i, step in enumerate(steps):
                _check_color(step, f"primitives.{ramp_name}[{i}]", errors)

    themes = raw.get("themes")
    if not _is_mapping(themes):
        errors.append("themes must be an object")
        themes = {}
    else:
        for theme_name, theme in themes.items():
            _check_theme(theme_name, theme, primitives, errors)

    if not any(_is_mapping(raw.get(section)) for section in SEMANTIC_SECTIONS):
        errors.append("foreground must be an object")
    seen_tokens: set[str] = set()
    for section in SEMANTIC_SECTIONS:
        block = raw.get(section)
        if block is None:
            continue
        if not _is_mapping(block):
            errors.append(f"{section} must be an object")
            continue
        for token_name, sem in block.items():
            if token_name in seen_tokens:
                errors.append(f'{section}.{token_name} duplicates a token declared in another section')
            seen_tokens.add(token_name)
            _check_semantic(sem, f"{section}.{token_name}", primitives, themes, errors)
    _check_interaction_names(raw, seen_tokens, errors)

    if raw.get("config") is not None:
        _check_config(raw["config"], themes, errors)
    return result


def ensure_valid(raw: Any) -> None:
    result = validate_schema(raw)
    if not result.valid:
        raise TokenValidationError(result.errors)
