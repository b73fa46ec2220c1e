import pytest

from contrast_tokens.design.color_space import hex_to_rgb
from contrast_tokens.design.color_vision_simulation import (
    CVD_TYPES,
    oklab_delta_e,
    simulate_hex,
    transform_palette,
)


def test_simulate_hex_passthrough_invalid_mode():
    assert simulate_hex("#112233", None) == "#112233"
    assert simulate_hex("#112233", "unknown") == "#112233"
    assert simulate_hex("#112233", "default") == "#112233"


def test_simulation_returns_canonical_hex():
    for mode in CVD_TYPES:
        out = simulate_hex("#DC2626", mode)
        assert out.startswith("#") and len(out) == 7 and out == out.lower()


def test_red_shifts_under_red_green_deficiencies():
    assert simulate_hex("#ff0000", "protanopia") != "#ff0000"
    assert simulate_hex("#ff0000", "deuteranopia") != "#ff0000"


def test_achromatopsia_is_grey():
    r, g, b = hex_to_rgb(simulate_hex("#3366cc", "achromatopsia"))
    assert max(r, g, b) - min(r, g, b) <= 1 / 255 + 1e-9


def test_transform_palette_changes_some_values():
    palette = {"accent": "#FF0000", "success": "#00FF00"}
    deut = transform_palette(palette, "deuteranopia")
    assert set(deut) == set(palette)
    assert deut["accent"] != "#ff0000" or deut["success"] != "#00ff00"
    assert transform_palette(palette, None) == palette


def test_oklab_delta_e_scale():
    assert oklab_delta_e("#123456", "#123456") == 0.0
    assert oklab_delta_e("#000000", "#ffffff") == pytest.approx(100.0, abs=0.5)
    assert oklab_delta_e("#ff0000", "#00ff00") == pytest.approx(oklab_delta_e("#00ff00", "#ff0000"))
