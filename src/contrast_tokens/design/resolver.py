"""Runtime token resolution against a built registry.

Lookup order for ``resolve_token`` (first hit wins):
 1. exact (token, font size, theme, stack, vision) key;
 2. same context with vision ``default``;
 3. stack relaxed one level at a time toward ``root``
    (requested vision, then ``default``, at each level);
 4. the theme's declared fallback themes at stack ``root``
    (requested vision, then ``default``);
 5. the token's global default hex, or ``""`` for an unknown token.

Resolution never raises and never mutates the registry.
"""

from __future__ import annotations

from typing import Dict, Iterator, Optional

from ..config.settings import STACK_FALLBACK
from .models import DesignContext, TokenRegistry, VariantKey

__all__ = ["resolve_token", "resolve_all_tokens", "token_names"]


def _candidate_keys(token: str, context: DesignContext, registry: TokenRegistry) -> Iterator[VariantKey]:
    font_size, theme, stack, vision = (
        context.font_size,
        context.theme,
        context.stack,
        context.vision_mode,
    )
    yield VariantKey(token, font_size, theme, stack, vision)
    if vision != "default":
        yield VariantKey(token, font_size, theme, stack)
    # Stacks outside the relaxation table fall straight back to root.
    for relaxed in STACK_FALLBACK.get(stack, ("root",)):
        yield VariantKey(token, font_size, theme, relaxed, vision)
        if vision != "default":
            yield VariantKey(token, font_size, theme, relaxed)
    for fallback in registry.theme_fallbacks.get(theme, ()):
        yield VariantKey(token, font_size, fallback, "root", vision)
        if vision != "default":
            yield VariantKey(token, font_size, fallback, "root")


def resolve_token(token: str, context: DesignContext, registry: TokenRegistry) -> str:
    for key in _candidate_keys(token, context, registry):
        variant = registry.variants.get(key)
        if variant is not None:
            return variant.hex
    return registry.defaults.get(token, "")


def token_names(registry: TokenRegistry) -> Iterator[str]:
    """Distinct token names in the variant space, in first-seen order."""
    seen: Dict[str, None] = {}
    for key in registry.variants:
        if key.token not in seen:
            seen[key.token] = None
            yield key.token


def resolve_all_tokens(
    context: DesignContext, registry: TokenRegistry, prefix: Optional[str] = None
) -> Dict[str, str]:
    return {
        name: resolve_token(name, context, registry)
        for name in token_names(registry)
        if prefix is None or name.startswith(prefix)
    }
