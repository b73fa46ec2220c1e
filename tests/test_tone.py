from contrast_tokens.design.processor import compile_spec
from contrast_tokens.design.tone import apply_tone_mode, available_tones

from factories import make_spec


def _toned_spec():
    return make_spec(
        themes={
            "white": {"ramp": "neutral", "step": 0, "tone": {"muted": {"step": 1, "fallback": ["dark"]}}},
            "dark": {"ramp": "neutral", "step": 8},
        },
        foreground={
            "fgPrimary": {
                "ramp": "neutral",
                "defaultStep": 8,
                "overrides": [{"bg": "dark", "step": 2}],
                "tone": {"muted": {"defaultStep": 7, "overrides": [{"bg": "dark", "step": 3}]}, "vivid": {}},
            }
        },
    )


def test_default_tone_is_an_unmodified_copy():
    raw = _toned_spec()
    for tone in (None, "", "default"):
        out = apply_tone_mode(raw, tone)
        assert out == raw
        assert out is not raw
        assert out["themes"] is not raw["themes"]


def test_tone_replaces_fields_and_appends_overrides():
    raw = _toned_spec()
    out = apply_tone_mode(raw, "muted")
    assert out["themes"]["white"]["step"] == 1
    assert out["themes"]["white"]["fallback"] == ["dark"]
    assert out["themes"]["dark"] == raw["themes"]["dark"]
    sem = out["foreground"]["fgPrimary"]
    assert sem["defaultStep"] == 7
    assert sem["overrides"] == [{"bg": "dark", "step": 2}, {"bg": "dark", "step": 3}]
    # Input untouched
    assert raw["themes"]["white"]["step"] == 0
    assert len(raw["foreground"]["fgPrimary"]["overrides"]) == 1


def test_toned_spec_compiles():
    processed = compile_spec(apply_tone_mode(_toned_spec(), "muted"))
    assert processed.themes["white"].step == 1
    assert processed.themes["white"].fallback == ("dark",)
    assert processed.semantics["fgPrimary"].default_step == 7
    assert processed.semantics["fgPrimary"].overrides[-1].step == 3


def test_unknown_tone_leaves_spec_alone():
    raw = _toned_spec()
    assert apply_tone_mode(raw, "neon") == raw


def test_available_tones():
    assert available_tones(_toned_spec()) == ("muted", "vivid")
    assert available_tones(make_spec()) == ()
