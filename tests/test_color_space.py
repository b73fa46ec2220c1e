import pytest

from contrast_tokens.design.color_space import (
    COLOR_SPACES,
    color_value_to_hex,
    hex_to_color_value,
    hex_to_oklch,
    hex_to_rgb,
    normalize_hex,
    oklab_to_hex,
    relative_luminance,
)


def test_normalize_hex_expands_shorthand_and_lowercases():
    assert normalize_hex("#ABC") == "#aabbcc"
    assert normalize_hex("#FF8800") == "#ff8800"


@pytest.mark.parametrize("bad", ["fff", "#ggg", "#12345", "", "#1234567"])
def test_normalize_hex_rejects_malformed(bad):
    with pytest.raises(ValueError):
        normalize_hex(bad)


def test_relative_luminance_extremes_and_order():
    assert relative_luminance("#ffffff") == pytest.approx(1.0)
    assert relative_luminance("#000000") == pytest.approx(0.0)
    assert relative_luminance("#fafafa") > relative_luminance("#777777") > relative_luminance("#171717")


def test_oklch_of_white_is_achromatic():
    l, c, _h = hex_to_oklch("#ffffff")
    assert l == pytest.approx(1.0, abs=1e-3)
    assert c < 1e-3


def test_oklch_hue_in_range():
    for color in ("#ff0000", "#00ff00", "#0000ff", "#3366cc"):
        _l, _c, h = hex_to_oklch(color)
        assert 0.0 <= h < 360.0


def test_oklch_roundtrip_via_color_value():
    l, c, h = hex_to_oklch("#3366cc")
    assert color_value_to_hex({"colorSpace": "oklch", "components": [l, c, h]}) == "#3366cc"


def test_structured_srgb_hsl_hwb():
    assert color_value_to_hex({"colorSpace": "srgb", "components": [1, 0, 0]}) == "#ff0000"
    assert color_value_to_hex({"colorSpace": "hsl", "components": [120, 100, 50]}) == "#00ff00"
    assert color_value_to_hex({"colorSpace": "hwb", "components": [240, 0, 0]}) == "#0000ff"


def test_wide_gamut_whites_map_to_srgb_white():
    assert color_value_to_hex({"colorSpace": "display-p3", "components": [1, 1, 1]}) == "#ffffff"
    assert color_value_to_hex({"colorSpace": "xyz-d65", "components": [0.9505, 1.0, 1.089]}) == "#ffffff"
    assert color_value_to_hex({"colorSpace": "srgb-linear", "components": [1, 1, 1]}) == "#ffffff"


def test_out_of_gamut_is_clamped_not_raised():
    assert color_value_to_hex({"colorSpace": "srgb", "components": [2, -1, 0.5]}) == "#ff0080"
    # Very saturated OKLCH sits outside sRGB; result is still a valid hex.
    out = color_value_to_hex({"colorSpace": "oklch", "components": [0.7, 0.4, 150]})
    assert normalize_hex(out) == out


def test_none_component_and_explicit_hex():
    assert color_value_to_hex({"colorSpace": "srgb", "components": ["none", 0, 0]}) == "#000000"
    assert color_value_to_hex({"colorSpace": "oklab", "components": [0, 0, 0], "hex": "#ABCDEF"}) == "#abcdef"


def test_unknown_color_space_raises():
    with pytest.raises(ValueError):
        color_value_to_hex({"colorSpace": "cmyk", "components": [0, 0, 0]})


def test_every_color_space_converts_black():
    for space in COLOR_SPACES:
        if space in ("hsl", "hwb"):
            comps = [0, 0, 0] if space == "hsl" else [0, 0, 100]
        else:
            comps = [0, 0, 0]
        assert color_value_to_hex({"colorSpace": space, "components": comps}) == "#000000", space


def test_oklab_to_hex_grey_axis():
    grey = oklab_to_hex(0.6, 0.0, 0.0)
    r, g, b = hex_to_rgb(grey)
    assert max(r, g, b) - min(r, g, b) <= 1 / 255 + 1e-9


def test_hex_to_color_value_wraps_srgb():
    value = hex_to_color_value("#FF0000")
    assert value["colorSpace"] == "srgb"
    assert value["hex"] == "#ff0000"
    assert color_value_to_hex(value) == "#ff0000"
