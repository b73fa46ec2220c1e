import pytest

from contrast_tokens.design.compliance import (
    ComplianceContext,
    ComplianceEngine,
    ComplianceEvaluation,
    apca,
    available_engines,
    contrast_ratio,
    get_engine,
    register_engine,
    soft_clamp,
    wcag21,
)
from contrast_tokens.design.compliance.apca import apca_lc


def ctx(px=16, target="text", level="AA"):
    return ComplianceContext(font_size_px=px, target=target, level=level)


# --- WCAG 2.1 -----------------------------------------------------------------


def test_contrast_ratio_basic():
    assert contrast_ratio("#ffffff", "#000000") == pytest.approx(21.0)
    assert contrast_ratio("#777777", "#777777") == pytest.approx(1.0)


def test_wcag_text_thresholds_depend_on_size():
    normal = wcag21.evaluate("#777777", "#ffffff", ctx(16))
    large = wcag21.evaluate("#777777", "#ffffff", ctx(24))
    assert normal.metric == "wcag21-ratio"
    assert normal.required == 4.5 and not normal.passed
    assert large.required == 3.0 and large.passed


def test_wcag_aaa_and_ui_component():
    assert wcag21.evaluate("#000000", "#ffffff", ctx(16, level="AAA")).required == 7.0
    assert wcag21.evaluate("#000000", "#ffffff", ctx(32, level="AAA")).required == 4.5
    assert wcag21.evaluate("#000000", "#ffffff", ctx(12, "ui-component")).required == 3.0
    assert wcag21.evaluate("#000000", "#ffffff", ctx(12, "ui-component", "AAA")).required == 4.5


def test_wcag_polarity():
    assert wcag21.evaluate("#000000", "#ffffff", ctx()).polarity == "dark-on-light"
    assert wcag21.evaluate("#ffffff", "#000000", ctx()).polarity == "light-on-dark"


@pytest.mark.parametrize("engine", [wcag21, apca])
def test_decorative_is_exempt(engine):
    ev = engine.evaluate("#ffffff", "#ffffff", ctx(target="decorative"))
    assert ev.passed and ev.metric == "wcag-exempt" and ev.value == 0.0


@pytest.mark.parametrize("engine", [wcag21, apca])
def test_preferred_direction(engine):
    assert engine.preferred_direction("#fafafa") == "darker"
    assert engine.preferred_direction("#171717") == "lighter"


# --- APCA ---------------------------------------------------------------------


def test_soft_clamp_only_below_threshold():
    assert soft_clamp(0.5) == 0.5
    assert soft_clamp(0.0) > 0.0


def test_apca_reference_values():
    lc, polarity = apca_lc("#000000", "#ffffff")
    assert polarity == "dark-on-light"
    assert lc == pytest.approx(106.04, abs=0.1)
    lc, polarity = apca_lc("#ffffff", "#000000")
    assert polarity == "light-on-dark"
    assert lc == pytest.approx(-107.88, abs=0.1)


def test_apca_same_color_is_zero():
    assert apca_lc("#777777", "#777777")[0] == 0.0


def test_apca_thresholds():
    assert apca.evaluate("#000000", "#ffffff", ctx(12)).required == 75.0
    assert apca.evaluate("#000000", "#ffffff", ctx(16)).required == 60.0
    assert apca.evaluate("#000000", "#ffffff", ctx(32)).required == 45.0
    assert apca.evaluate("#000000", "#ffffff", ctx(12, level="AAA")).required == 90.0
    assert apca.evaluate("#000000", "#ffffff", ctx(12, "ui-component")).required == 30.0
    ev = apca.evaluate("#ffffff", "#000000", ctx(16))
    assert ev.metric == "apca-lc" and ev.value > 0 and ev.passed


# --- registry of engines --------------------------------------------------------


def test_engine_lookup():
    assert get_engine("wcag21") is wcag21
    assert get_engine("apca") is apca
    assert {"wcag21", "apca"} <= set(available_engines())
    with pytest.raises(KeyError):
        get_engine("nope")


def test_register_custom_engine():
    class AlwaysPass:
        id = "always-pass-test"

        def evaluate(self, fg_hex, bg_hex, context):
            return ComplianceEvaluation(passed=True, metric="test", value=1.0)

    engine = AlwaysPass()
    assert isinstance(engine, ComplianceEngine)
    register_engine(engine, allow_override=True)
    assert get_engine("always-pass-test") is engine
    with pytest.raises(ValueError):
        register_engine(engine)


def test_evaluation_dict_roundtrip():
    ev = wcag21.evaluate("#262626", "#fafafa", ctx())
    data = ev.to_dict()
    assert data["pass"] is True
    assert ComplianceEvaluation.from_dict(data) == ev
