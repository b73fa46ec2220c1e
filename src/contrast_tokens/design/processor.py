"""Input compiler: raw specification -> ``ProcessedSpec``.

Steps, in dependency order:
 1. Build every ramp (hex, OKLCH, luminance per step); flag non-monotonic
    luminance as a warning.
 2. Resolve the elevation stack set (declared stacks, else the built-in
    offsets table). ``root`` is always present at offset 0.
 3. Build every theme: resolve its base step, derive the elevation direction
    and pre-compute one surface per stack.
 4. Build every semantic token, its interaction states and vision entries.
 5. Apply configuration defaults.

Structural validation runs first (see ``schema``); the compiler still raises
``TokenCompileError`` for cross references it cannot trust the gate with
(unknown ramps, step bounds at the point of use, non-zero root offset).
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from ..config import settings
from .color_space import color_value_to_hex, hex_to_oklch, relative_luminance
from .models import (
    CompileConfig,
    ContextOverride,
    CVDOptions,
    InteractionState,
    ProcessedSpec,
    Ramp,
    SemanticToken,
    Step,
    Surface,
    Theme,
    TokenCompileError,
    VisionEntry,
)
from .schema import ensure_valid

_logger = logging.getLogger(__name__)

__all__ = [
    "compile_spec",
    "build_ramp",
    "resolve_stacks",
    "build_theme",
    "parse_override",
    "luminance_is_monotonic",
]

_SECTION_TARGETS = (("foreground", "text"), ("nonText", "ui-component"))


# --- Ramps --------------------------------------------------------------------


def luminance_is_monotonic(steps: Sequence[Step]) -> bool:
    """Heuristic monotonicity check over sliding three-step windows.

    Flat segments are tolerated; only a strict direction reversal between two
    consecutive deltas counts as a break.
    """
    for i in range(2, len(steps)):
        d1 = steps[i - 1].relative_luminance - steps[i - 2].relative_luminance
        d2 = steps[i].relative_luminance - steps[i - 1].relative_luminance
        if d1 and d2 and (d1 > 0) != (d2 > 0):
            return False
    return True


def build_ramp(name: str, values: Sequence[Any]) -> Ramp:
    steps: List[Step] = []
    for index, value in enumerate(values):
        hex_value = color_value_to_hex(value)
        steps.append(
            Step(
                index=index,
                hex=hex_value,
                oklch=hex_to_oklch(hex_value),
                relative_luminance=relative_luminance(hex_value),
            )
        )
    return Ramp(name=name, steps=tuple(steps))


# --- Stacks -------------------------------------------------------------------


def resolve_stacks(declared: Optional[Mapping[str, int]]) -> Dict[str, int]:
    if not declared:
        return dict(settings.DEFAULT_STACK_OFFSETS)
    root = declared.get("root", 0)
    if root != 0:
        raise TokenCompileError(f'Stack "root" must have offset 0 (got {root})')
    stacks = {"root": 0}
    for name, offset in declared.items():
        if name != "root":
            stacks[name] = int(offset)
    return stacks


# --- Themes -------------------------------------------------------------------


def _require_ramp(ramps: Mapping[str, Ramp], name: Any, owner: str) -> Ramp:
    ramp = ramps.get(name) if isinstance(name, str) else None
    if ramp is None:
        raise TokenCompileError(f'{owner} references unknown ramp "{name}"')
    return ramp


def _require_step(ramp: Ramp, step: Any, owner: str) -> int:
    if not isinstance(step, int) or not ramp.has_step(step):
        raise TokenCompileError(
            f'{owner} step {step} is out of bounds for ramp "{ramp.name}" (length {ramp.step_count})'
        )
    return step


def build_theme(
    name: str, raw: Mapping[str, Any], ramps: Mapping[str, Ramp], stacks: Mapping[str, int]
) -> Theme:
    owner = f'Theme "{name}"'
    ramp = _require_ramp(ramps, raw.get("ramp"), owner)
    step = _require_step(ramp, raw.get("step"), owner)
    base = ramp.steps[step]
    direction = "lighter" if step > ramp.last_index / 2 else "darker"
    sign = -1 if direction == "lighter" else 1
    surfaces: Dict[str, Surface] = {}
    for stack, offset in stacks.items():
        surface_step = ramp.steps[ramp.clamp(step + sign * offset)]
        surfaces[stack] = Surface(
            step=surface_step.index,
            hex=surface_step.hex,
            relative_luminance=surface_step.relative_luminance,
        )
    return Theme(
        name=name,
        ramp=ramp.name,
        step=step,
        hex=base.hex,
        relative_luminance=base.relative_luminance,
        fallback=tuple(raw.get("fallback") or ()),
        aliases=tuple(raw.get("aliases") or ()),
        elevation_direction=direction,
        surfaces=surfaces,
    )


# --- Semantic tokens ----------------------------------------------------------


def _filter(value: Any) -> Optional[Tuple[str, ...]]:
    if value is None:
        return None
    if isinstance(value, str):
        return (value,)
    return tuple(value)


def parse_override(raw: Mapping[str, Any]) -> ContextOverride:
    return ContextOverride(
        step=raw["step"],
        themes=_filter(raw.get("bg")),
        font_sizes=_filter(raw.get("fontSize")),
        stacks=_filter(raw.get("stack")),
    )


def _parse_overrides(raw: Optional[Sequence[Mapping[str, Any]]], ramp: Ramp, owner: str) -> Tuple[ContextOverride, ...]:
    overrides = []
    for i, item in enumerate(raw or ()):
        ov = parse_override(item)
        _require_step(ramp, ov.step, f"{owner} override[{i}]")
        overrides.append(ov)
    return tuple(overrides)


def _build_semantic(
    name: str, raw: Mapping[str, Any], target: str, ramps: Mapping[str, Ramp]
) -> SemanticToken:
    owner = f'Semantic "{name}"'
    ramp = _require_ramp(ramps, raw.get("ramp"), owner)
    default_step = _require_step(ramp, raw.get("defaultStep"), owner)

    interactions: Dict[str, InteractionState] = {}
    for state, entry in (raw.get("interactions") or {}).items():
        state_owner = f'{owner} interaction "{state}"'
        interactions[state] = InteractionState(
            step=_require_step(ramp, entry.get("step"), state_owner),
            overrides=_parse_overrides(entry.get("overrides"), ramp, state_owner),
        )

    vision: Dict[str, VisionEntry] = {}
    for mode, entry in (raw.get("vision") or {}).items():
        mode_owner = f'{owner} vision "{mode}"'
        vision_ramp = _require_ramp(ramps, entry.get("ramp", ramp.name), mode_owner)
        vision[mode] = VisionEntry(
            ramp=vision_ramp,
            default_step=_require_step(vision_ramp, entry.get("defaultStep", default_step), mode_owner),
            overrides=_parse_overrides(entry.get("overrides"), vision_ramp, mode_owner),
        )

    return SemanticToken(
        name=name,
        ramp=ramp,
        default_step=default_step,
        compliance_target="decorative" if raw.get("decorative") else target,  # type: ignore[arg-type]
        overrides=_parse_overrides(raw.get("overrides"), ramp, owner),
        interactions=interactions,
        vision=vision,
    )


# --- Config -------------------------------------------------------------------


def _build_config(raw: Mapping[str, Any], themes: Mapping[str, Theme]) -> CompileConfig:
    cvd_raw = raw.get("cvd") or {}
    default_theme = raw.get("defaultTheme") or next(iter(themes), "")
    return CompileConfig(
        wcag_target=raw.get("wcagTarget", settings.DEFAULT_WCAG_TARGET),
        compliance_engine=raw.get("complianceEngine", settings.DEFAULT_COMPLIANCE_ENGINE),
        default_theme=default_theme,
        step_selection_strategy=raw.get("stepSelectionStrategy", settings.DEFAULT_STEP_STRATEGY),
        on_unresolved_override=raw.get("onUnresolvedOverride", settings.DEFAULT_ON_UNRESOLVED_OVERRIDE),
        cvd=CVDOptions(
            enabled=cvd_raw.get("enabled", True),
            confusion_threshold=float(
                cvd_raw.get("confusionThresholdDE", settings.CVD_CONFUSION_THRESHOLD)
            ),
            distinguishable_threshold=float(
                cvd_raw.get("distinguishableThresholdDE", settings.CVD_DISTINGUISHABLE_THRESHOLD)
            ),
        ),
    )


def compile_spec(raw: Mapping[str, Any], *, validate: bool = True) -> ProcessedSpec:
    """Compile a raw specification into its processed, immutable form.

    Parameters
    ----------
    raw : Mapping
        Specification document (already parsed from JSON).
    validate : bool
        Run the structural validator first (raises ``TokenValidationError``).
    """
    if validate:
        ensure_valid(raw)
    warnings: List[str] = []

    ramps: Dict[str, Ramp] = {}
    for ramp_name, values in (raw.get("primitives") or {}).items():
        ramp = build_ramp(ramp_name, values)
        if not luminance_is_monotonic(ramp.steps):
            warnings.append(f'Ramp "{ramp_name}" luminance is not monotonically ordered')
        ramps[ramp_name] = ramp

    config_raw = raw.get("config") or {}
    stacks = resolve_stacks(config_raw.get("stacks"))

    themes: Dict[str, Theme] = {}
    for theme_name, theme_raw in (raw.get("themes") or {}).items():
        themes[theme_name] = build_theme(theme_name, theme_raw, ramps, stacks)
    if not themes:
        warnings.append("No themes defined; default theme will be an empty string")

    semantics: Dict[str, SemanticToken] = {}
    for section, target in _SECTION_TARGETS:
        for token_name, sem_raw in (raw.get(section) or {}).items():
            semantics[token_name] = _build_semantic(token_name, sem_raw, target, ramps)

    config = _build_config(config_raw, themes)
    if themes and not config_raw.get("defaultTheme"):
        _logger.debug("defaultTheme not set; using first theme %r", config.default_theme)

    for message in warnings:
        _logger.warning(message)
    return ProcessedSpec(
        ramps=ramps,
        stacks=stacks,
        themes=themes,
        semantics=semantics,
        config=config,
        warnings=tuple(warnings),
    )
