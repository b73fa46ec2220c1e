"""Registry transport form (JSON compatible) and content hashing.

Every internal mapping is written as an array of ``[key, value]`` pairs so
key order survives any JSON round trip. Variant keys are written as
``[token, fontSize, theme, stack, vision]`` arrays so names containing any
character survive decoding.

Public API:
- djb2_hash(text) -> str
- ramp_content_hash(ramps) -> str
- serialize_registry(registry) -> dict
- deserialize_registry(data) -> TokenRegistry
- dump_registry(registry, path) / load_registry(path)
"""

from __future__ import annotations

import json
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping

from ..config.settings import REGISTRY_FORMAT_VERSION
from .color_space import OKLCH
from .compliance import ComplianceEvaluation
from .models import (
    Ramp,
    RegistryMeta,
    ResolvedVariant,
    Step,
    Surface,
    Theme,
    TokenRegistry,
    VariantKey,
)

__all__ = [
    "djb2_hash",
    "ramp_content_hash",
    "serialize_registry",
    "deserialize_registry",
    "dump_registry",
    "load_registry",
]


def djb2_hash(text: str) -> str:
    """32-bit xor-variant djb2 hash rendered as lowercase hex (non-cryptographic)."""
    value = 5381
    for ch in text:
        value = (((value << 5) + value) ^ ord(ch)) & 0xFFFFFFFF
    return format(value, "x")


def ramp_content_hash(ramps: Mapping[str, Ramp]) -> str:
    payload = {"primitives": {name: [s.hex for s in ramp.steps] for name, ramp in ramps.items()}}
    return djb2_hash(json.dumps(payload, separators=(",", ":")))


# --- encode -------------------------------------------------------------------


def _ramp_to_dict(ramp: Ramp) -> Dict[str, Any]:
    return {
        "name": ramp.name,
        "steps": [
            {
                "index": s.index,
                "hex": s.hex,
                "oklch": {"l": s.oklch.l, "c": s.oklch.c, "h": s.oklch.h},
                "relativeLuminance": s.relative_luminance,
            }
            for s in ramp.steps
        ],
        "stepCount": ramp.step_count,
    }


def _theme_to_dict(theme: Theme) -> Dict[str, Any]:
    return {
        "name": theme.name,
        "ramp": theme.ramp,
        "step": theme.step,
        "hex": theme.hex,
        "relativeLuminance": theme.relative_luminance,
        "fallback": list(theme.fallback),
        "aliases": list(theme.aliases),
        "elevationDirection": theme.elevation_direction,
        "surfaces": [
            [stack, {"step": s.step, "hex": s.hex, "relativeLuminance": s.relative_luminance}]
            for stack, s in theme.surfaces.items()
        ],
    }


def _meta_to_dict(meta: RegistryMeta) -> Dict[str, Any]:
    return {
        "generatedAt": meta.generated_at,
        "totalVariants": meta.total_variants,
        "tokenCount": meta.token_count,
        "complianceEngine": meta.compliance_engine,
        "wcagTarget": meta.wcag_target,
        "inputHash": meta.input_hash,
    }


def serialize_registry(registry: TokenRegistry) -> Dict[str, Any]:
    return {
        "version": REGISTRY_FORMAT_VERSION,
        "meta": _meta_to_dict(registry.meta),
        "ramps": [[name, _ramp_to_dict(r)] for name, r in registry.ramps.items()],
        "themes": [[name, _theme_to_dict(t)] for name, t in registry.themes.items()],
        "themeFallbacks": [[name, list(fb)] for name, fb in registry.theme_fallbacks.items()],
        "stacks": [[name, offset] for name, offset in registry.stacks.items()],
        "variantMap": [
            [list(key), {"ramp": v.ramp, "step": v.step, "hex": v.hex, "compliance": v.compliance.to_dict()}]
            for key, v in registry.variants.items()
        ],
        "defaults": [[name, hex_value] for name, hex_value in registry.defaults.items()],
        "warnings": list(registry.warnings),
    }


# --- decode -------------------------------------------------------------------


def _ramp_from_dict(data: Mapping[str, Any]) -> Ramp:
    steps = tuple(
        Step(
            index=s["index"],
            hex=s["hex"],
            oklch=OKLCH(s["oklch"]["l"], s["oklch"]["c"], s["oklch"]["h"]),
            relative_luminance=s["relativeLuminance"],
        )
        for s in data["steps"]
    )
    return Ramp(name=data["name"], steps=steps)


def _theme_from_dict(data: Mapping[str, Any]) -> Theme:
    surfaces = {
        stack: Surface(step=s["step"], hex=s["hex"], relative_luminance=s["relativeLuminance"])
        for stack, s in data["surfaces"]
    }
    return Theme(
        name=data["name"],
        ramp=data["ramp"],
        step=data["step"],
        hex=data["hex"],
        relative_luminance=data["relativeLuminance"],
        fallback=tuple(data.get("fallback") or ()),
        aliases=tuple(data.get("aliases") or ()),
        elevation_direction=data["elevationDirection"],
        surfaces=surfaces,
    )


def _meta_from_dict(data: Mapping[str, Any]) -> RegistryMeta:
    return RegistryMeta(
        generated_at=data["generatedAt"],
        total_variants=data["totalVariants"],
        token_count=data["tokenCount"],
        compliance_engine=data["complianceEngine"],
        wcag_target=data["wcagTarget"],
        input_hash=data["inputHash"],
    )


def _registry_from_dict(data: Mapping[str, Any]) -> TokenRegistry:
    variants = {
        VariantKey(*key): ResolvedVariant(
            ramp=v["ramp"],
            step=v["step"],
            hex=v["hex"],
            compliance=ComplianceEvaluation.from_dict(v["compliance"]),
        )
        for key, v in data["variantMap"]
    }
    return TokenRegistry(
        ramps={name: _ramp_from_dict(r) for name, r in data["ramps"]},
        themes={name: _theme_from_dict(t) for name, t in data["themes"]},
        theme_fallbacks={name: tuple(fb) for name, fb in data["themeFallbacks"]},
        stacks={name: offset for name, offset in data["stacks"]},
        variants=MappingProxyType(variants),
        defaults=MappingProxyType(dict(data["defaults"])),
        meta=_meta_from_dict(data["meta"]),
        warnings=tuple(data.get("warnings") or ()),
    )


def deserialize_registry(data: Mapping[str, Any]) -> TokenRegistry:
    """Rebuild a registry from its transport form.

    Raises ``ValueError`` for an unsupported version or a malformed document.
    """
    version = data.get("version")
    if version != REGISTRY_FORMAT_VERSION:
        raise ValueError(
            f"Unsupported registry format version {version!r} (expected {REGISTRY_FORMAT_VERSION})"
        )
    try:
        return _registry_from_dict(data)
    except KeyError as exc:
        raise ValueError(f"Malformed registry: missing member {exc}") from exc
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Malformed registry: {exc}") from exc


def dump_registry(registry: TokenRegistry, path: str | Path) -> Path:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    with out.open("w", encoding="utf-8") as f:
        json.dump(serialize_registry(registry), f, indent=2)
        f.write("\n")
    return out


def load_registry(path: str | Path) -> TokenRegistry:
    with Path(path).open("r", encoding="utf-8") as f:
        data: List[Any] | Dict[str, Any] = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Registry file {path} does not contain a JSON object")
    return deserialize_registry(data)
