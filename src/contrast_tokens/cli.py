"""Command line entrypoint.

Subcommands:
    compile SPEC --out REGISTRY.json [--css FILE] [--tone NAME] [--engine ID]
    audit REGISTRY.json [--strict]
    resolve REGISTRY.json TOKEN [--font-size 16px] [--theme T] [--stack S] [--vision M]

Exit codes: 0 success, 1 audit failures under ``--strict``, 2 input errors.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Sequence

from .config import settings
from .design.compliance import available_engines
from .design.css import generate_css
from .design.loader import load_spec
from .design.models import DesignContext, TokenCompileError
from .design.processor import compile_spec
from .design.registry import build_registry, validate_registry
from .design.resolver import resolve_token
from .design.schema import TokenValidationError
from .design.serialize import dump_registry, load_registry
from .design.tone import apply_tone_mode

_logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="contrast-tokens", description="Compile design-token specifications into color registries"
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    c = sub.add_parser("compile", help="Compile a JSON specification into a registry")
    c.add_argument("spec", help="Path to the token specification JSON")
    c.add_argument("--out", required=True, help="Registry output path")
    c.add_argument("--css", help="Also write CSS custom properties to this path")
    c.add_argument("--tone", help="Apply a named tone profile before compiling")
    c.add_argument("--engine", choices=available_engines(), help="Override config.complianceEngine")

    a = sub.add_parser("audit", help="Re-check compliance of a serialized registry")
    a.add_argument("registry", help="Registry JSON path")
    a.add_argument("--strict", action="store_true", help="Exit 1 when any variant fails")

    r = sub.add_parser("resolve", help="Resolve one token for a context")
    r.add_argument("registry", help="Registry JSON path")
    r.add_argument("token")
    r.add_argument("--font-size", default="16px")
    r.add_argument("--theme", help="Theme name (default: first theme in the registry)")
    r.add_argument("--stack", default="root")
    r.add_argument("--vision", default="default", choices=settings.ALL_VISION_MODES)
    return p


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, settings.LOG_LEVEL.upper(), logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _cmd_compile(args: argparse.Namespace) -> int:
    raw: Dict[str, Any] = load_spec(args.spec)
    if args.tone:
        raw = apply_tone_mode(raw, args.tone)
    if args.engine:
        raw = dict(raw)
        raw["config"] = {**(raw.get("config") or {}), "complianceEngine": args.engine}
    processed = compile_spec(raw)
    registry = build_registry(processed)
    out = dump_registry(registry, args.out)
    print(f"Wrote {registry.meta.total_variants} variants for {registry.meta.token_count} tokens to {out}")
    if args.css:
        css_path = Path(args.css)
        css_path.parent.mkdir(parents=True, exist_ok=True)
        css_path.write_text(generate_css(registry, default_theme=processed.config.default_theme), encoding="utf-8")
        print(f"Wrote CSS to {css_path}")
    for warning in registry.warnings:
        print(f"warning: {warning}", file=sys.stderr)
    return 0


def _cmd_audit(args: argparse.Namespace) -> int:
    registry = load_registry(args.registry)
    result = validate_registry(registry)
    for warning in result.warnings:
        print(warning)
    total = len(registry.variants)
    failing = len(result.warnings)
    print(f"Audit: {total - failing}/{total} variants pass ({registry.meta.compliance_engine}, {registry.meta.wcag_target})")
    if args.strict and failing:
        return 1
    return 0


def _cmd_resolve(args: argparse.Namespace) -> int:
    registry = load_registry(args.registry)
    theme = args.theme if args.theme is not None else next(iter(registry.themes), "")
    context = DesignContext(font_size=args.font_size, theme=theme, stack=args.stack, vision_mode=args.vision)
    print(resolve_token(args.token, context, registry))
    return 0


_COMMANDS = {"compile": _cmd_compile, "audit": _cmd_audit, "resolve": _cmd_resolve}


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    _configure_logging(args.verbose)
    try:
        return _COMMANDS[args.command](args)
    except (TokenValidationError, TokenCompileError, OSError, ValueError) as exc:
        _logger.debug("command %s failed", args.command, exc_info=True)
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
