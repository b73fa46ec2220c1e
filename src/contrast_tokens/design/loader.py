"""Token specification file loading.

Usage:
    from contrast_tokens.design import compile_file
    processed = compile_file("tokens.json", tone="muted")
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

from .models import ProcessedSpec
from .processor import compile_spec
from .schema import ensure_valid
from .tone import apply_tone_mode

__all__ = ["load_spec", "compile_file"]


def load_spec(path: str | Path) -> Dict[str, Any]:
    """Load and structurally validate a JSON token specification.

    Raises ``FileNotFoundError`` when the file is missing and
    ``TokenValidationError`` when the document is rejected.
    """
    spec_path = Path(path)
    if not spec_path.exists():
        raise FileNotFoundError(f"Token specification not found: {spec_path}")
    with spec_path.open("r", encoding="utf-8") as f:
        data: Dict[str, Any] = json.load(f)
    ensure_valid(data)
    return data


def compile_file(path: str | Path, tone: str | None = None) -> ProcessedSpec:
    raw = load_spec(path)
    if tone:
        raw = apply_tone_mode(raw, tone)
    return compile_spec(raw)
