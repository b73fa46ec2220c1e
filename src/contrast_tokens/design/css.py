"""CSS custom-property emitter.

Consumes a built registry through ``resolve_token`` only. Output layout:

- ``:root`` - default theme, root stack, default vision; plus ``--bg-<theme>``
  and ``--<ramp>-<step>`` variables.
- ``[data-theme="X"]`` - values that differ from ``:root`` per other theme.
- ``[data-theme="X"] [data-stack="S"]`` - per non-root stack, differences from
  that theme's root stack plus the surface variable.
- ``[data-vision="M"] ...`` - per CVD mode that has variants, differences only.

CSS variables carry one representative font size; font-size aware lookups
need ``resolve_token``.
"""

from __future__ import annotations

import re
from typing import Dict, List, Optional, Sequence

from ..config.settings import CVD_TYPES
from .models import DesignContext, Theme, TokenRegistry
from .resolver import resolve_token, token_names

__all__ = ["token_to_css_var", "generate_css"]

_CAMEL = re.compile(r"([A-Z])")


def token_to_css_var(name: str) -> str:
    """``fgPrimary`` -> ``--fg-primary``; ``fgLink-hover`` -> ``--fg-link-hover``."""
    base, sep, suffix = name.partition("-")
    return "--" + _CAMEL.sub(lambda m: "-" + m.group(1).lower(), base) + sep + suffix


def _block(selector: str, declarations: Sequence[str]) -> List[str]:
    return [f"{selector} {{", *declarations, "}", ""]


def _diff(values: Dict[str, str], baseline: Dict[str, str]) -> List[str]:
    return [
        f"  {token_to_css_var(name)}: {hex_value};"
        for name, hex_value in values.items()
        if hex_value != baseline.get(name)
    ]


def _surface_var(theme: Theme, stack: str) -> Optional[str]:
    surface = theme.surfaces.get(stack)
    if surface is None:
        return None
    return f"  --bg-surface: var(--{theme.ramp}-{surface.step});"


def generate_css(
    registry: TokenRegistry, font_size: str = "16px", default_theme: Optional[str] = None
) -> str:
    names = list(token_names(registry))
    if default_theme is None:
        default_theme = next(iter(registry.themes), "")
    stacks = [s for s in registry.stacks if s != "root"]

    def resolve_all(theme: str, stack: str, vision: str) -> Dict[str, str]:
        context = DesignContext(font_size=font_size, theme=theme, stack=stack, vision_mode=vision)
        return {name: resolve_token(name, context, registry) for name in names}

    lines: List[str] = ["/* AUTO-GENERATED FROM design tokens. Do not edit manually. */", ""]

    root_values = resolve_all(default_theme, "root", "default")
    root_decls = [f"  {token_to_css_var(n)}: {h};" for n, h in root_values.items()]
    default = registry.themes.get(default_theme)
    if default is not None:
        root_decls.append(_surface_var(default, "root") or f"  --bg-surface: var(--bg-{default_theme});")
    root_decls += [f"  --bg-{name}: {theme.hex};" for name, theme in registry.themes.items()]
    for ramp_name, ramp in registry.ramps.items():
        root_decls += [f"  --{ramp_name}-{step.index}: {step.hex};" for step in ramp.steps]
    lines += _block(":root", root_decls)

    theme_roots: Dict[str, Dict[str, str]] = {}
    for name, theme in registry.themes.items():
        theme_roots[name] = values = resolve_all(name, "root", "default")
        if name == default_theme:
            continue
        decls = _diff(values, root_values)
        decls.append(_surface_var(theme, "root") or f"  --bg-surface: var(--bg-{name});")
        lines += _block(f'[data-theme="{name}"]', decls)

    for name, theme in registry.themes.items():
        for stack in stacks:
            decls = _diff(resolve_all(name, stack, "default"), theme_roots[name])
            surface = _surface_var(theme, stack)
            if surface:
                decls.append(surface)
            if decls:
                lines += _block(f'[data-theme="{name}"] [data-stack="{stack}"]', decls)

    present = {key.vision for key in registry.variants}
    for mode in CVD_TYPES:
        if mode not in present:
            continue
        decls = _diff(resolve_all(default_theme, "root", mode), root_values)
        if decls:
            lines += _block(f'[data-vision="{mode}"]', decls)
        for name in registry.themes:
            decls = _diff(resolve_all(name, "root", mode), theme_roots[name])
            if decls:
                lines += _block(f'[data-vision="{mode}"] [data-theme="{name}"]', decls)
            for stack in stacks:
                decls = _diff(resolve_all(name, stack, mode), resolve_all(name, stack, "default"))
                if decls:
                    lines += _block(
                        f'[data-vision="{mode}"] [data-theme="{name}"] [data-stack="{stack}"]', decls
                    )
    return "\n".join(lines)
