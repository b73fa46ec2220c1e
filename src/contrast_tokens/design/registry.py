"""Registry builder: expands every semantic token over the full variant space.

Per token, in order:
 1. default-vision variants from the rule generator (auto rules patched with
    manual overrides), each evaluated against its context's *surface*;
 2. interaction-state variants (``<token>-<state>``) derived from the base
    token's already-resolved step plus the declared delta, negated on themes
    whose elevation direction is ``lighter``; interaction overrides win last;
 3. vision-mode variants, one separate default-style pass per declared mode.

A final CVD pass (see ``cvd_correction``) adds correction variants once all
tokens exist.

Public API:
- build_registry(processed, engine=None) -> TokenRegistry
- validate_registry(registry) -> ValidationResult
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Dict, List, Optional, Sequence, Set, Tuple

from ..config.settings import ALL_FONT_SIZES, CVD_TYPES
from .compliance import ComplianceEngine, Target, get_engine
from .cvd_correction import correct_for_cvd
from .models import (
    ContextOverride,
    ProcessedSpec,
    Ramp,
    RegistryMeta,
    ResolvedVariant,
    SemanticToken,
    TokenCompileError,
    TokenRegistry,
    ValidationResult,
    VariantKey,
)
from .rule_generator import (
    RuleKey,
    auto_generate_rules,
    compliance_context,
    expand_override,
    patch_with_overrides,
)
from .serialize import ramp_content_hash

_logger = logging.getLogger(__name__)

__all__ = ["build_registry", "validate_registry"]


def _describe_failure(key: VariantKey, variant: ResolvedVariant) -> str:
    ev = variant.compliance
    required = "?" if ev.required is None else f"{ev.required:g}"
    return f"Variant {key}: contrast {ev.value:.2f} < required {required} ({ev.metric})"


class _RegistryBuilder:
    """Accumulates variants for one compilation run."""

    def __init__(self, processed: ProcessedSpec, engine: ComplianceEngine):
        self.processed = processed
        self.engine = engine
        self.level = processed.config.wcag_target
        self.theme_names: Tuple[str, ...] = tuple(processed.themes)
        self.stack_names: Tuple[str, ...] = tuple(processed.stacks)
        self.font_sizes: Tuple[str, ...] = ALL_FONT_SIZES
        self.variants: Dict[VariantKey, ResolvedVariant] = {}
        self.defaults: Dict[str, str] = {}
        self.failed_overrides: List[str] = []

    def _contexts(self):
        for theme_name, theme in self.processed.themes.items():
            for stack in self.stack_names:
                surface = theme.surfaces.get(stack)
                if surface is None:
                    continue
                for font_size in self.font_sizes:
                    yield theme_name, theme, stack, surface, font_size

    def _manual_keys(self, overrides: Sequence[ContextOverride]) -> Set[RuleKey]:
        keys: Set[RuleKey] = set()
        for override in overrides:
            for rule in expand_override(override, self.theme_names, self.font_sizes, self.stack_names):
                keys.add(rule.key)
        return keys

    def _record(
        self,
        key: VariantKey,
        ramp: Ramp,
        step: int,
        target: Target,
        surface_hex: str,
        manual: bool,
    ) -> None:
        step_data = ramp.steps[step]
        context = compliance_context(key.font_size, target, self.level)
        variant = ResolvedVariant(
            ramp=ramp.name,
            step=step,
            hex=step_data.hex,
            compliance=self.engine.evaluate(step_data.hex, surface_hex, context),
        )
        self.variants[key] = variant
        if manual and not variant.compliance.passed:
            self.failed_overrides.append(_describe_failure(key, variant))

    def build_pass(
        self,
        token: str,
        ramp: Ramp,
        default_step: int,
        overrides: Sequence[ContextOverride],
        target: Target,
        vision: str = "default",
    ) -> None:
        auto_rules = auto_generate_rules(
            ramp,
            default_step,
            self.processed.themes,
            self.engine,
            target=target,
            level=self.level,
            font_sizes=self.font_sizes,
            stacks=self.stack_names,
            strategy=self.processed.config.step_selection_strategy,
        )
        step_map = patch_with_overrides(
            auto_rules, overrides, self.theme_names, self.font_sizes, self.stack_names
        )
        manual = self._manual_keys(overrides)
        for theme_name, _theme, stack, surface, font_size in self._contexts():
            rule_key = (theme_name, font_size, stack)
            step = step_map.get(rule_key, default_step)
            self._record(
                VariantKey(token, font_size, theme_name, stack, vision),
                ramp,
                step,
                target,
                surface.hex,
                rule_key in manual,
            )

    def build_interactions(self, sem: SemanticToken) -> None:
        for state, interaction in sem.interactions.items():
            name = f"{sem.name}-{state}"
            self.defaults[name] = sem.ramp.steps[interaction.step].hex
            delta = interaction.step - sem.default_step
            patched = patch_with_overrides(
                (), interaction.overrides, self.theme_names, self.font_sizes, self.stack_names
            )
            for theme_name, theme, stack, surface, font_size in self._contexts():
                base = self.variants.get(VariantKey(sem.name, font_size, theme_name, stack))
                if base is None:
                    continue
                rule_key = (theme_name, font_size, stack)
                if rule_key in patched:
                    step, manual = patched[rule_key], True
                else:
                    signed = -delta if theme.elevation_direction == "lighter" else delta
                    step, manual = sem.ramp.clamp(base.step + signed), False
                self._record(
                    VariantKey(name, font_size, theme_name, stack),
                    sem.ramp,
                    step,
                    sem.compliance_target,
                    surface.hex,
                    manual,
                )

    def build_token(self, sem: SemanticToken) -> Set[Tuple[str, str]]:
        """Build every pass for one token; returns its explicit (token, mode) pairs."""
        self.defaults[sem.name] = sem.ramp.steps[sem.default_step].hex
        self.build_pass(sem.name, sem.ramp, sem.default_step, sem.overrides, sem.compliance_target)
        self.build_interactions(sem)
        explicit: Set[Tuple[str, str]] = set()
        for mode, entry in sem.vision.items():
            if mode not in CVD_TYPES:
                _logger.debug("token %s: ignoring unknown vision mode %r", sem.name, mode)
                continue
            self.build_pass(
                sem.name, entry.ramp, entry.default_step, entry.overrides, sem.compliance_target, mode
            )
            explicit.add((sem.name, mode))
        return explicit


def build_registry(
    processed: ProcessedSpec,
    engine: Optional[ComplianceEngine] = None,
    *,
    generated_at: Optional[str] = None,
) -> TokenRegistry:
    """Expand a processed specification into an immutable ``TokenRegistry``.

    Parameters
    ----------
    processed : ProcessedSpec
        Output of ``compile_spec``.
    engine : ComplianceEngine, optional
        Overrides the engine named by ``processed.config.compliance_engine``.
    generated_at : str, optional
        ISO timestamp for the metadata (defaults to now, UTC).
    """
    config = processed.config
    if engine is None:
        engine = get_engine(config.compliance_engine)
    builder = _RegistryBuilder(processed, engine)

    explicit: Set[Tuple[str, str]] = set()
    for sem in processed.semantics.values():
        explicit |= builder.build_token(sem)

    corrections = correct_for_cvd(
        builder.variants,
        processed.semantics,
        processed.themes,
        builder.stack_names,
        engine,
        builder.level,
        config.cvd,
        explicit,
        builder.font_sizes,
    )
    builder.variants.update(corrections)

    warnings = list(processed.warnings)
    if builder.failed_overrides:
        if config.on_unresolved_override == "error":
            raise TokenCompileError(
                "Manual overrides fail compliance:\n" + "\n".join(builder.failed_overrides)
            )
        for message in builder.failed_overrides:
            _logger.warning(message)
        warnings.extend(builder.failed_overrides)

    meta = RegistryMeta(
        generated_at=generated_at or datetime.now(timezone.utc).isoformat(),
        total_variants=len(builder.variants),
        token_count=len(processed.semantics),
        compliance_engine=engine.id,
        wcag_target=config.wcag_target,
        input_hash=ramp_content_hash(processed.ramps),
    )
    _logger.info(
        "registry built: %d variants, %d tokens (%d cvd corrections)",
        meta.total_variants,
        meta.token_count,
        len(corrections),
    )
    return TokenRegistry(
        ramps=processed.ramps,
        themes=processed.themes,
        theme_fallbacks={name: theme.fallback for name, theme in processed.themes.items()},
        stacks=dict(processed.stacks),
        variants=MappingProxyType(builder.variants),
        defaults=MappingProxyType(builder.defaults),
        meta=meta,
        warnings=tuple(warnings),
    )


def validate_registry(registry: TokenRegistry) -> ValidationResult:
    """Re-check every resolved variant; failures are reported as warnings."""
    result = ValidationResult()
    for key, variant in registry.variants.items():
        if not variant.compliance.passed:
            result.warnings.append(_describe_failure(key, variant))
    return result
