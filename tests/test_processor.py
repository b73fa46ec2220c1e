import logging

import pytest

from contrast_tokens.config.settings import DEFAULT_STACK_OFFSETS
from contrast_tokens.design.models import ContextOverride, TokenCompileError
from contrast_tokens.design.processor import (
    build_ramp,
    compile_spec,
    luminance_is_monotonic,
    parse_override,
    resolve_stacks,
)

from factories import NEUTRAL, make_spec


def test_ramp_steps_are_indexed_and_normalized():
    ramp = build_ramp("neutral", [c.upper() for c in NEUTRAL])
    assert ramp.step_count == 10
    assert [s.index for s in ramp.steps] == list(range(10))
    assert ramp.steps[0].hex == "#fafafa"
    assert ramp.steps[0].relative_luminance > ramp.steps[9].relative_luminance
    assert 0.0 <= ramp.steps[5].oklch.l <= 1.0


def test_structured_primitives_are_accepted():
    raw = make_spec(
        primitives={"neutral": [{"colorSpace": "srgb", "components": [1, 1, 1]}, "#000"]},
        themes={"white": {"ramp": "neutral", "step": 0}},
        foreground={"fg": {"ramp": "neutral", "defaultStep": 1}},
    )
    processed = compile_spec(raw)
    assert [s.hex for s in processed.ramps["neutral"].steps] == ["#ffffff", "#000000"]


def test_monotonic_check():
    assert luminance_is_monotonic(build_ramp("n", NEUTRAL).steps)
    assert not luminance_is_monotonic(build_ramp("n", ["#ffffff", "#000000", "#ffffff"]).steps)


def test_non_monotonic_ramp_is_a_warning(caplog):
    raw = make_spec(
        primitives={"neutral": NEUTRAL, "zigzag": ["#ffffff", "#000000", "#ffffff"]},
    )
    with caplog.at_level(logging.WARNING, logger="contrast_tokens.design.processor"):
        processed = compile_spec(raw)
    assert any("zigzag" in w for w in processed.warnings)
    assert any("zigzag" in r.getMessage() for r in caplog.records)


def test_default_stacks_used_when_none_declared(processed):
    assert dict(processed.stacks) == dict(DEFAULT_STACK_OFFSETS)
    assert processed.stacks is not DEFAULT_STACK_OFFSETS


def test_declared_stacks_are_used_verbatim_with_root_first():
    assert resolve_stacks({"sheet": 1, "root": 0}) == {"root": 0, "sheet": 1}
    assert list(resolve_stacks({"sheet": 1})) == ["root", "sheet"]


def test_root_stack_must_be_zero():
    with pytest.raises(TokenCompileError):
        compile_spec(make_spec(stacks={"root": 1, "card": 2}))


def test_theme_elevation_and_surfaces(processed):
    white = processed.themes["white"]
    dark = processed.themes["dark"]
    assert white.elevation_direction == "darker"
    assert dark.elevation_direction == "lighter"
    assert white.hex == "#fafafa"
    assert white.surfaces["card"].step == 1
    assert white.surfaces["overlay"].hex == "#d4d4d4"
    assert dark.surfaces["root"].step == 8
    assert dark.surfaces["card"].step == 7
    assert dark.surfaces["overlay"].step == 5


def test_surfaces_clamp_to_ramp_bounds():
    raw = make_spec(
        themes={"black": {"ramp": "neutral", "step": 9}},
        stacks={"root": 0, "deep": 20},
    )
    surfaces = compile_spec(raw).themes["black"].surfaces
    assert surfaces["deep"].step == 0


def test_semantic_targets_and_decorative():
    raw = make_spec(
        foreground={
            "fgPrimary": {"ramp": "neutral", "defaultStep": 8},
            "fgDivider": {"ramp": "neutral", "defaultStep": 3, "decorative": True},
        },
        non_text={"borderFocus": {"ramp": "neutral", "defaultStep": 6}},
    )
    semantics = compile_spec(raw).semantics
    assert semantics["fgPrimary"].compliance_target == "text"
    assert semantics["fgDivider"].compliance_target == "decorative"
    assert semantics["borderFocus"].compliance_target == "ui-component"


def test_vision_entries_inherit_ramp_and_step():
    raw = make_spec(
        foreground={
            "fgPrimary": {
                "ramp": "neutral",
                "defaultStep": 8,
                "interactions": {"hover": {"step": 9}},
                "vision": {"deuteranopia": {}, "protanopia": {"defaultStep": 9}},
            }
        }
    )
    sem = compile_spec(raw).semantics["fgPrimary"]
    assert sem.interactions["hover"].step == 9
    assert sem.vision["deuteranopia"].ramp.name == "neutral"
    assert sem.vision["deuteranopia"].default_step == 8
    assert sem.vision["protanopia"].default_step == 9


def test_unknown_ramp_is_fatal_without_validation():
    raw = make_spec(foreground={"fgPrimary": {"ramp": "ghost", "defaultStep": 0}})
    with pytest.raises(TokenCompileError):
        compile_spec(raw, validate=False)
    raw = make_spec(themes={"white": {"ramp": "neutral", "step": 12}})
    with pytest.raises(TokenCompileError):
        compile_spec(raw, validate=False)


def test_config_defaults(processed):
    config = processed.config
    assert config.wcag_target == "AA"
    assert config.compliance_engine == "wcag21"
    assert config.default_theme == "white"
    assert config.step_selection_strategy == "closest"
    assert config.on_unresolved_override == "warn"
    assert config.cvd.enabled is True
    assert config.cvd.confusion_threshold == 5.0
    assert config.cvd.distinguishable_threshold == 8.0


def test_config_overrides():
    raw = make_spec(
        wcagTarget="AAA",
        complianceEngine="apca",
        defaultTheme="dark",
        cvd={"enabled": False, "confusionThresholdDE": 3},
    )
    config = compile_spec(raw).config
    assert config.wcag_target == "AAA"
    assert config.compliance_engine == "apca"
    assert config.default_theme == "dark"
    assert config.cvd.enabled is False
    assert config.cvd.confusion_threshold == 3.0


def test_no_themes_warns_and_defaults_to_empty_name():
    processed = compile_spec(make_spec(themes={}))
    assert processed.config.default_theme == ""
    assert any("No themes" in w for w in processed.warnings)


def test_parse_override_normalizes_scalars():
    ov = parse_override({"bg": "dark", "fontSize": ["12px", "14px"], "step": 3})
    assert ov == ContextOverride(step=3, themes=("dark",), font_sizes=("12px", "14px"), stacks=None)
    assert ov.specificity == 2
    assert parse_override({"step": 1}).specificity == 0
