"""Pluggable contrast compliance engines.

Engines are looked up by id at registry-build time. Additional engines can be
registered with :func:`register_engine`; the rule generator and registry
builder only rely on the :class:`ComplianceEngine` protocol.
"""

from __future__ import annotations

from typing import Dict, Tuple

from .base import (  # noqa: F401
    ComplianceContext,
    ComplianceEngine,
    ComplianceEvaluation,
    Direction,
    Level,
    Polarity,
    Target,
    exempt_evaluation,
)
from .wcag21 import wcag21, contrast_ratio, Wcag21Engine  # noqa: F401
from .apca import apca, soft_clamp, ApcaEngine  # noqa: F401

_ENGINES: Dict[str, ComplianceEngine] = {wcag21.id: wcag21, apca.id: apca}


def register_engine(engine: ComplianceEngine, *, allow_override: bool = False) -> None:
    if engine.id in _ENGINES and not allow_override:
        raise ValueError(f"Compliance engine already registered: {engine.id}")
    _ENGINES[engine.id] = engine


def get_engine(engine_id: str) -> ComplianceEngine:
    try:
        return _ENGINES[engine_id]
    except KeyError:
        raise KeyError(f"Unknown compliance engine: {engine_id}") from None


def available_engines() -> Tuple[str, ...]:
    return tuple(_ENGINES)


__all__ = [
    "ComplianceContext",
    "ComplianceEngine",
    "ComplianceEvaluation",
    "Direction",
    "Level",
    "Polarity",
    "Target",
    "exempt_evaluation",
    "wcag21",
    "apca",
    "Wcag21Engine",
    "ApcaEngine",
    "contrast_ratio",
    "soft_clamp",
    "register_engine",
    "get_engine",
    "available_engines",
]
