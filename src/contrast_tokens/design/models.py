"""Typed data model for compiled token specifications and registries.

All structures are frozen dataclasses created once per compilation run.
Themes and tokens hold their ``Ramp`` by value; nothing points back up the
tree, so a registry can be dropped and rebuilt wholesale.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Literal, Mapping, NamedTuple, Optional, Tuple

from .color_space import OKLCH
from .compliance import ComplianceEvaluation, Level, Target

ElevationDirection = Literal["lighter", "darker"]
StepStrategy = Literal["closest", "mirror-closest"]

__all__ = [
    "ElevationDirection",
    "StepStrategy",
    "TokenCompileError",
    "Step",
    "Ramp",
    "Surface",
    "Theme",
    "ContextOverride",
    "InteractionState",
    "VisionEntry",
    "SemanticToken",
    "CVDOptions",
    "CompileConfig",
    "ProcessedSpec",
    "ContextRule",
    "VariantKey",
    "ResolvedVariant",
    "RegistryMeta",
    "TokenRegistry",
    "DesignContext",
    "ValidationResult",
]


class TokenCompileError(RuntimeError):
    """Raised when a specification cannot be compiled (fatal severity)."""


@dataclass(frozen=True)
class Step:
    index: int
    hex: str
    oklch: OKLCH
    relative_luminance: float


@dataclass(frozen=True)
class Ramp:
    name: str
    steps: Tuple[Step, ...]

    @property
    def step_count(self) -> int:
        return len(self.steps)

    @property
    def last_index(self) -> int:
        return len(self.steps) - 1

    def clamp(self, index: int) -> int:
        return max(0, min(self.last_index, index))

    def has_step(self, index: int) -> bool:
        return 0 <= index < len(self.steps)


@dataclass(frozen=True)
class Surface:
    step: int
    hex: str
    relative_luminance: float


@dataclass(frozen=True)
class Theme:
    name: str
    ramp: str
    step: int
    hex: str
    relative_luminance: float
    fallback: Tuple[str, ...]
    aliases: Tuple[str, ...]
    elevation_direction: ElevationDirection
    surfaces: Mapping[str, Surface]


@dataclass(frozen=True)
class ContextOverride:
    """A manual step assignment filtered by theme / font size / stack.

    ``None`` on a filter is a wildcard. A scalar filter from the input is kept
    as a one-item tuple.
    """

    step: int
    themes: Optional[Tuple[str, ...]] = None
    font_sizes: Optional[Tuple[str, ...]] = None
    stacks: Optional[Tuple[str, ...]] = None

    @property
    def specificity(self) -> int:
        return sum(f is not None for f in (self.themes, self.font_sizes, self.stacks))


@dataclass(frozen=True)
class InteractionState:
    step: int
    overrides: Tuple[ContextOverride, ...] = ()


@dataclass(frozen=True)
class VisionEntry:
    ramp: Ramp
    default_step: int
    overrides: Tuple[ContextOverride, ...] = ()


@dataclass(frozen=True)
class SemanticToken:
    name: str
    ramp: Ramp
    default_step: int
    compliance_target: Target = "text"
    overrides: Tuple[ContextOverride, ...] = ()
    interactions: Mapping[str, InteractionState] = field(default_factory=dict)
    vision: Mapping[str, VisionEntry] = field(default_factory=dict)


@dataclass(frozen=True)
class CVDOptions:
    enabled: bool = True
    confusion_threshold: float = 5.0
    distinguishable_threshold: float = 8.0


@dataclass(frozen=True)
class CompileConfig:
    wcag_target: Level = "AA"
    compliance_engine: str = "wcag21"
    default_theme: str = ""
    step_selection_strategy: StepStrategy = "closest"
    on_unresolved_override: Literal["error", "warn"] = "warn"
    cvd: CVDOptions = field(default_factory=CVDOptions)


@dataclass(frozen=True)
class ProcessedSpec:
    ramps: Mapping[str, Ramp]
    stacks: Mapping[str, int]
    themes: Mapping[str, Theme]
    semantics: Mapping[str, SemanticToken]
    config: CompileConfig
    warnings: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ContextRule:
    theme: str
    font_size: str
    stack: str
    step: int

    @property
    def key(self) -> Tuple[str, str, str]:
        return (self.theme, self.font_size, self.stack)


class VariantKey(NamedTuple):
    token: str
    font_size: str
    theme: str
    stack: str
    vision: str = "default"

    def __str__(self) -> str:
        return "__".join(self)


@dataclass(frozen=True)
class ResolvedVariant:
    ramp: str
    step: int
    hex: str
    compliance: ComplianceEvaluation


@dataclass(frozen=True)
class RegistryMeta:
    generated_at: str
    total_variants: int
    token_count: int
    compliance_engine: str
    wcag_target: Level
    input_hash: str


@dataclass(frozen=True)
class TokenRegistry:
    """Immutable build artifact; the resolver only ever reads from it."""

    ramps: Mapping[str, Ramp]
    themes: Mapping[str, Theme]
    theme_fallbacks: Mapping[str, Tuple[str, ...]]
    stacks: Mapping[str, int]
    variants: Mapping[VariantKey, ResolvedVariant]
    defaults: Mapping[str, str]
    meta: RegistryMeta
    warnings: Tuple[str, ...] = ()


@dataclass(frozen=True)
class DesignContext:
    font_size: str = "16px"
    theme: str = ""
    stack: str = "root"
    vision_mode: str = "default"


@dataclass
class ValidationResult:
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors
