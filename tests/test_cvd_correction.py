import pytest

from contrast_tokens.design import cvd_correction
from contrast_tokens.design.color_vision_simulation import oklab_delta_e, simulate_hex
from contrast_tokens.design.cvd_correction import find_best_cvd_step, find_confused_pairs
from contrast_tokens.design.models import CVDOptions, DesignContext, VariantKey
from contrast_tokens.design.processor import compile_spec
from contrast_tokens.design.registry import build_registry
from contrast_tokens.design.resolver import resolve_token

from factories import GREEN, RED, red_green_spec

_COLLAPSED = "#808080"


@pytest.fixture
def collapse_red_green(monkeypatch):
    """Make red/green step 6 indistinguishable under deuteranopia only."""

    def fake_simulate(color, mode):
        if mode == "deuteranopia" and color in (RED[6], GREEN[6]):
            return _COLLAPSED
        return color

    monkeypatch.setattr(cvd_correction, "simulate_hex", fake_simulate)


def _cvd_keys(registry, mode="deuteranopia"):
    return [k for k in registry.variants if k.vision == mode]


def test_confused_pairs_detection(collapse_red_green):
    colors = {"fgError": RED[6], "fgSuccess": GREEN[6], "fgInfo": "#2563eb"}
    pairs = find_confused_pairs(colors, "deuteranopia", CVDOptions())
    assert pairs == [("fgError", "fgSuccess")]
    assert find_confused_pairs(colors, "protanopia", CVDOptions()) == []


def test_similar_colors_are_not_confused():
    colors = {"a": "#777777", "b": "#787878"}
    assert find_confused_pairs(colors, "deuteranopia", CVDOptions()) == []


def test_best_step_requires_margin():
    # Single candidate equal to the current color never counts as an improvement.
    assert find_best_cvd_step(["#dc2626"], "#dc2626", "deuteranopia", ["#16a34a"], CVDOptions()) is None
    assert find_best_cvd_step([], "#dc2626", "deuteranopia", ["#16a34a"], CVDOptions()) is None


def test_collapsed_pair_gets_passing_cvd_variant(collapse_red_green):
    registry = build_registry(compile_spec(red_green_spec()))
    # At 24px both tokens keep step 6 on the light root surface.
    assert registry.variants[VariantKey("fgError", "24px", "white", "root")].hex == RED[6]
    assert registry.variants[VariantKey("fgSuccess", "24px", "white", "root")].hex == GREEN[6]
    corrected = [
        registry.variants.get(VariantKey(token, "24px", "white", "root", "deuteranopia"))
        for token in ("fgError", "fgSuccess")
    ]
    corrected = [v for v in corrected if v is not None]
    assert corrected
    for variant in corrected:
        assert variant.compliance.passed
        assert variant.hex not in (RED[6], GREEN[6])
    assert not _cvd_keys(registry, "protanopia")


def test_corrected_value_is_resolved(collapse_red_green):
    registry = build_registry(compile_spec(red_green_spec()))
    key = next(k for k in _cvd_keys(registry) if k.font_size == "24px")
    context = DesignContext(font_size=key.font_size, theme=key.theme, stack=key.stack, vision_mode="deuteranopia")
    assert resolve_token(key.token, context, registry) == registry.variants[key].hex


def test_explicit_vision_entry_is_not_replaced(collapse_red_green):
    raw = red_green_spec()
    raw["foreground"]["fgError"]["vision"] = {"deuteranopia": {"defaultStep": 9}}
    registry = build_registry(compile_spec(raw))
    for key, variant in registry.variants.items():
        if key.token == "fgError" and key.vision == "deuteranopia":
            assert variant.step == 9


def test_cvd_pass_can_be_disabled(collapse_red_green):
    registry = build_registry(compile_spec(red_green_spec(cvd={"enabled": False})))
    assert not _cvd_keys(registry)


def test_real_simulation_red_green_under_deuteranopia():
    registry = build_registry(compile_spec(red_green_spec()))
    options = CVDOptions()
    for font_size in ("16px", "24px"):
        err = registry.variants[VariantKey("fgError", font_size, "white", "root")].hex
        ok = registry.variants[VariantKey("fgSuccess", font_size, "white", "root")].hex
        confused = (
            oklab_delta_e(err, ok) > options.distinguishable_threshold
            and oklab_delta_e(simulate_hex(err, "deuteranopia"), simulate_hex(ok, "deuteranopia"))
            < options.confusion_threshold
        )
        for variant in (registry.variants[k] for k in _cvd_keys(registry)):
            assert variant.compliance.passed
        if confused:
            assert any(
                VariantKey(token, font_size, "white", "root", "deuteranopia") in registry.variants
                for token in ("fgError", "fgSuccess")
            )
