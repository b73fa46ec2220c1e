"""CVD auto-correction pass.

Runs once after every token's default-vision variants exist. For each
deficiency type and each (theme, stack, font size) context it simulates all
tokens' resolved colors, finds pairs that are clearly distinct normally but
collapse under simulation, and tries to move the affected tokens to another
compliance-passing step of their ramp.

Score of a candidate step (higher is better)::

    0.7 * min simulated distance to every other token - 0.3 * simulated drift

A CVD variant is committed only when the best score beats the current color's
score by at least 0.5 and picks a different hex. Otherwise nothing is recorded
and the resolver falls back to the default-vision value.

The pass is not shardable by token: confusion is pairwise across all tokens
of one context.
"""

from __future__ import annotations

import logging
from itertools import combinations
from typing import AbstractSet, Dict, List, Mapping, Optional, Sequence, Tuple

from ..config import settings
from .color_vision_simulation import oklab_delta_e, simulate_hex
from .compliance import ComplianceEngine, Level
from .models import CVDOptions, ResolvedVariant, SemanticToken, Theme, VariantKey
from .rule_generator import compliance_context

_logger = logging.getLogger(__name__)

__all__ = ["find_confused_pairs", "find_best_cvd_step", "correct_for_cvd"]


def find_confused_pairs(
    colors: Mapping[str, str],
    mode: str,
    options: CVDOptions,
) -> List[Tuple[str, str]]:
    """Token pairs distinguishable normally but confused under ``mode``."""
    simulated = {name: simulate_hex(hex_value, mode) for name, hex_value in colors.items()}
    confused = []
    for a, b in combinations(colors, 2):
        if oklab_delta_e(colors[a], colors[b]) <= options.distinguishable_threshold:
            continue
        if oklab_delta_e(simulated[a], simulated[b]) < options.confusion_threshold:
            confused.append((a, b))
    return confused


def _min_separation(sim_hex: str, others: Sequence[str], fallback: float) -> float:
    if not others:
        return fallback
    return min(oklab_delta_e(sim_hex, other) for other in others)


def find_best_cvd_step(
    candidates: Sequence[str],
    current_hex: str,
    mode: str,
    other_simulated: Sequence[str],
    options: CVDOptions,
) -> Optional[str]:
    """Pick the candidate hex that best separates ``current_hex`` from the others.

    Returns ``None`` when no candidate improves on the current color by the
    required margin.
    """
    current_sim = simulate_hex(current_hex, mode)
    best_hex: Optional[str] = None
    best_score = float("-inf")
    for candidate in candidates:
        sim = simulate_hex(candidate, mode)
        separation = _min_separation(sim, other_simulated, options.distinguishable_threshold)
        drift = oklab_delta_e(sim, current_sim)
        score = settings.CVD_SEPARATION_WEIGHT * separation - settings.CVD_DRIFT_WEIGHT * drift
        if score > best_score:
            best_score = score
            best_hex = candidate
    if best_hex is None:
        return None
    current_score = settings.CVD_SEPARATION_WEIGHT * _min_separation(
        current_sim, other_simulated, options.distinguishable_threshold
    )
    if best_score - current_score < settings.CVD_MIN_IMPROVEMENT or best_hex == current_hex:
        return None
    return best_hex


def correct_for_cvd(
    variants: Mapping[VariantKey, ResolvedVariant],
    semantics: Mapping[str, SemanticToken],
    themes: Mapping[str, Theme],
    stacks: Sequence[str],
    engine: ComplianceEngine,
    level: Level,
    options: CVDOptions,
    explicit: AbstractSet[Tuple[str, str]] = frozenset(),
    font_sizes: Sequence[str] = settings.ALL_FONT_SIZES,
) -> Dict[VariantKey, ResolvedVariant]:
    """Return the CVD-specific variants to add on top of ``variants``.

    Only base semantic tokens take part. ``explicit`` holds ``(token, mode)``
    pairs with a user-declared vision entry; those are never replaced.
    """
    added: Dict[VariantKey, ResolvedVariant] = {}
    if not options.enabled:
        return added

    for mode in settings.CVD_TYPES:
        for theme_name, theme in themes.items():
            for stack in stacks:
                surface = theme.surfaces.get(stack)
                if surface is None:
                    continue
                for font_size in font_sizes:
                    current: Dict[str, ResolvedVariant] = {}
                    for token in semantics:
                        variant = variants.get(VariantKey(token, font_size, theme_name, stack))
                        if variant is not None:
                            current[token] = variant
                    if len(current) < 2:
                        continue
                    colors = {name: v.hex for name, v in current.items()}
                    pairs = find_confused_pairs(colors, mode, options)
                    if not pairs:
                        continue
                    involved = {name for pair in pairs for name in pair}
                    simulated = {name: simulate_hex(h, mode) for name, h in colors.items()}

                    for token in (t for t in current if t in involved):
                        if (token, mode) in explicit:
                            continue
                        sem = semantics[token]
                        context = compliance_context(font_size, sem.compliance_target, level)
                        evaluations = {
                            step.hex: engine.evaluate(step.hex, surface.hex, context)
                            for step in sem.ramp.steps
                        }
                        passing = [h for h, ev in evaluations.items() if ev.passed]
                        others = [sim for name, sim in simulated.items() if name != token]
                        best = find_best_cvd_step(passing, colors[token], mode, others, options)
                        if best is None:
                            continue
                        step_index = next(s.index for s in sem.ramp.steps if s.hex == best)
                        key = VariantKey(token, font_size, theme_name, stack, mode)
                        added[key] = ResolvedVariant(
                            ramp=sem.ramp.name,
                            step=step_index,
                            hex=best,
                            compliance=evaluations[best],
                        )
                        _logger.debug("cvd %s: %s %s -> %s", mode, key, colors[token], best)
    return added
