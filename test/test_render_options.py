import pytest

from render_options import RenderOptions, ScalingMode, parse_color
from wallpaper_applier import build_options_bundle


def test_scaling_codes_are_fixed():
    assert int(ScalingMode.AXES_INDEPENDENT) == 1
    assert int(ScalingMode.NONE) == 2
    assert int(ScalingMode.PROPORTIONAL_FIT) == 3
    assert sorted(int(mode) for mode in ScalingMode) == [1, 2, 3]


@pytest.mark.parametrize(
    "name, mode",
    [("stretch", ScalingMode.AXES_INDEPENDENT), ("none", ScalingMode.NONE), ("FIT", ScalingMode.PROPORTIONAL_FIT)],
)
def test_from_wire(name, mode):
    assert ScalingMode.from_wire(name) is mode
    assert mode.wire_name == name.lower()


def test_from_wire_rejects_unknown():
    with pytest.raises(ValueError):
        ScalingMode.from_wire("zoom")


def test_parse_color():
    assert parse_color("#ffff00") == (1.0, 1.0, 0.0, 1.0)
    assert parse_color("00000080") == (0.0, 0.0, 0.0, 0.502)
    with pytest.raises(ValueError):
        parse_color("#fff")
    with pytest.raises(ValueError):
        parse_color("#gggggg")


@pytest.mark.parametrize("color", [(1.2, 0, 0, 1), (0, 0, 0), (0, 0, -0.1, 1), ("a", 0, 0, 1), (True, 0, 0, 1)])
def test_render_options_validate_color(color):
    with pytest.raises(ValueError):
        RenderOptions(background_color=color)


def test_render_options_reject_raw_integer_scaling():
    with pytest.raises(ValueError):
        RenderOptions(scaling=3)


def test_from_settings_accepts_hex_color():
    options = RenderOptions.from_settings({"scaling": "none", "background_color": "#000000", "allow_clipping": False})
    assert options == RenderOptions(ScalingMode.NONE, (0.0, 0.0, 0.0, 1.0), False)


def test_options_bundle():
    options = RenderOptions(ScalingMode.AXES_INDEPENDENT, (1, 0.5, 0, 1), allow_clipping=False)
    assert build_options_bundle(options) == {
        "scaling_code": 1,
        "allow_clipping": False,
        "fill_color": (1.0, 0.5, 0.0, 1.0),
    }
