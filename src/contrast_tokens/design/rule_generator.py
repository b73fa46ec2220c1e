"""Context rule generation: compliance-driven step search and manual overrides.

A *rule* pins a token to a ramp step for one (theme, font size, stack)
context. Contexts without a rule use the token's default step.

Public API:
- find_closest_passing_step(ramp, preferred_step, passes, direction)
- auto_generate_rules(ramp, default_step, themes, engine, ...) -> list[ContextRule]
- expand_override(override, themes, font_sizes, stacks) -> list[ContextRule]
- patch_with_overrides(auto_rules, overrides, themes, font_sizes, stacks) -> dict

Overrides are applied as an explicit sort-and-fold: ascending specificity,
then declaration order, each one a full overwrite of the contexts it matches.
"""

from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..config.settings import ALL_FONT_SIZES, DEFAULT_FONT_WEIGHT
from .compliance import ComplianceContext, ComplianceEngine, Direction, Level, Target
from .models import ContextOverride, ContextRule, Ramp, StepStrategy, Theme

__all__ = [
    "RuleKey",
    "font_size_px",
    "compliance_context",
    "search_direction",
    "find_closest_passing_step",
    "auto_generate_rules",
    "expand_override",
    "patch_with_overrides",
]

RuleKey = Tuple[str, str, str]  # (theme, font size, stack)


def font_size_px(font_size: str) -> int:
    """Integer pixel prefix of a font-size class (``"16px"`` -> 16)."""
    digits = ""
    for ch in font_size:
        if not ch.isdigit():
            break
        digits += ch
    return int(digits or 0)


def compliance_context(font_size: str, target: Target, level: Level) -> ComplianceContext:
    return ComplianceContext(
        font_size_px=font_size_px(font_size),
        font_weight=DEFAULT_FONT_WEIGHT,
        target=target,
        level=level,
    )


def search_direction(engine: ComplianceEngine, surface_hex: str, surface_luminance: float) -> Direction:
    preferred = getattr(engine, "preferred_direction", None)
    if callable(preferred):
        return preferred(surface_hex)
    return "darker" if surface_luminance > 0.5 else "lighter"


def find_closest_passing_step(
    ramp: Ramp,
    preferred_step: int,
    passes: Callable[[str], bool],
    direction: Direction,
) -> Optional[int]:
    """Closest ramp index to ``preferred_step`` whose color satisfies ``passes``.

    ``darker`` walks toward higher indices only, ``lighter`` toward lower
    indices only. ``either`` walks both ways and returns the nearer hit, the
    darker one on a tie. Returns ``None`` when nothing passes.
    """
    if ramp.has_step(preferred_step) and passes(ramp.steps[preferred_step].hex):
        return preferred_step

    def walk(indices: Iterable[int]) -> Optional[int]:
        for i in indices:
            if passes(ramp.steps[i].hex):
                return i
        return None

    darker_range = range(max(preferred_step + 1, 0), ramp.step_count)
    lighter_range = range(min(preferred_step - 1, ramp.last_index), -1, -1)
    if direction == "darker":
        return walk(darker_range)
    if direction == "lighter":
        return walk(lighter_range)

    darker = walk(darker_range)
    lighter = walk(lighter_range)
    if darker is None:
        return lighter
    if lighter is None:
        return darker
    return darker if darker - preferred_step <= preferred_step - lighter else lighter


def _closest_step(
    ramp: Ramp,
    preferred_step: int,
    passes: Callable[[str], bool],
    direction: Direction,
) -> Optional[int]:
    found = find_closest_passing_step(ramp, preferred_step, passes, direction)
    if found is None and direction != "either":
        # Preferred direction exhausted (mid-luminance surfaces); widen the search.
        found = find_closest_passing_step(ramp, preferred_step, passes, "either")
    return found


def auto_generate_rules(
    ramp: Ramp,
    default_step: int,
    themes: Mapping[str, Theme],
    engine: ComplianceEngine,
    *,
    target: Target = "text",
    level: Level = "AA",
    font_sizes: Sequence[str] = ALL_FONT_SIZES,
    stacks: Optional[Sequence[str]] = None,
    strategy: StepStrategy = "closest",
) -> List[ContextRule]:
    """Emit a rule for every context where ``default_step`` needs replacing.

    Contexts are evaluated against each theme's per-stack surface. Under
    ``mirror-closest`` a theme whose elevation direction is ``lighter`` (a
    dark surface) reflects a failing default step across the ramp midpoint;
    the mirrored step is kept as-is for decorative tokens and used as the
    search origin for everything else when it fails compliance too. A default
    step that already passes is never replaced.
    """
    rules: Dict[RuleKey, ContextRule] = {}
    for theme_name, theme in themes.items():
        stack_names = stacks if stacks is not None else tuple(theme.surfaces)
        mirrored = strategy == "mirror-closest" and theme.elevation_direction == "lighter"
        for stack in stack_names:
            surface = theme.surfaces.get(stack)
            if surface is None:
                continue
            for font_size in font_sizes:
                context = compliance_context(font_size, target, level)

                def passes(candidate: str) -> bool:
                    return engine.evaluate(candidate, surface.hex, context).passed

                origin = ramp.last_index - default_step if mirrored else default_step
                if mirrored and target == "decorative":
                    step: Optional[int] = origin
                elif passes(ramp.steps[default_step].hex):
                    continue
                elif mirrored and passes(ramp.steps[origin].hex):
                    step = origin
                else:
                    direction = search_direction(engine, surface.hex, surface.relative_luminance)
                    step = _closest_step(ramp, origin, passes, direction)

                if step is not None and step != default_step:
                    rule = ContextRule(theme=theme_name, font_size=font_size, stack=stack, step=step)
                    rules[rule.key] = rule
    return list(rules.values())


def _axis(values: Optional[Tuple[str, ...]], everything: Sequence[str]) -> Sequence[str]:
    return everything if values is None else values


def expand_override(
    override: ContextOverride,
    themes: Sequence[str],
    font_sizes: Sequence[str],
    stacks: Sequence[str],
) -> List[ContextRule]:
    """Cartesian expansion of an override's filters into concrete rules."""
    return [
        ContextRule(theme=theme, font_size=font_size, stack=stack, step=override.step)
        for theme in _axis(override.themes, themes)
        for font_size in _axis(override.font_sizes, font_sizes)
        for stack in _axis(override.stacks, stacks)
    ]


def patch_with_overrides(
    auto_rules: Iterable[ContextRule],
    overrides: Sequence[ContextOverride],
    themes: Sequence[str],
    font_sizes: Sequence[str],
    stacks: Sequence[str],
) -> Dict[RuleKey, int]:
    step_map: Dict[RuleKey, int] = {rule.key: rule.step for rule in auto_rules}
    ordered = sorted(enumerate(overrides), key=lambda item: (item[1].specificity, item[0]))
    for _, override in ordered:
        for rule in expand_override(override, themes, font_sizes, stacks):
            step_map[rule.key] = rule.step
    return step_map
