import json

import pytest

from contrast_tokens.design.loader import compile_file, load_spec
from contrast_tokens.design.schema import TokenValidationError

from factories import make_spec


def _write(tmp_path, data):
    path = tmp_path / "tokens.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_load_spec_returns_raw_document(tmp_path):
    raw = make_spec()
    assert load_spec(_write(tmp_path, raw)) == raw


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_spec(tmp_path / "missing.json")


def test_invalid_document_raises(tmp_path):
    raw = make_spec(foreground={"fgPrimary": {"ramp": "nope", "defaultStep": 1}})
    with pytest.raises(TokenValidationError) as exc:
        load_spec(_write(tmp_path, raw))
    assert any("nope" in e for e in exc.value.errors)


def test_compile_file_applies_tone(tmp_path):
    raw = make_spec(
        foreground={"fgPrimary": {"ramp": "neutral", "defaultStep": 8, "tone": {"soft": {"defaultStep": 7}}}}
    )
    path = _write(tmp_path, raw)
    assert compile_file(path).semantics["fgPrimary"].default_step == 8
    assert compile_file(path, tone="soft").semantics["fgPrimary"].default_step == 7
