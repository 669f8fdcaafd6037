import pytest

from formlayer.style import (
    EffectiveStyle,
    StyleCascade,
    coerce_property,
    hex_to_rgb,
    set_override,
    toggle_override,
)

DEFAULTS = {
    "AC": {"fontSize": 24, "align": "center", "yOffset": 10},
    "Name": {"bold": True},
}


def test_no_tiers_gives_default_style():
    assert StyleCascade(DEFAULTS).resolve("Unknown") == EffectiveStyle()


def test_built_in_defaults_apply():
    style = StyleCascade(DEFAULTS).resolve("AC")
    assert style.font_size == 24
    assert style.align == "center"
    assert style.y_offset == 10
    assert style.color == "#000000"


def test_user_override_wins_per_property():
    style = StyleCascade(DEFAULTS, {"AC": {"fontSize": 30}}).resolve("AC")
    assert style.font_size == 30
    assert style.align == "center"
    assert style.y_offset == 10


def test_invalid_override_values_are_skipped(caplog):
    overrides = {"AC": {"align": "justify", "color": "red", "fontSize": -1}}
    style = StyleCascade(DEFAULTS, overrides).resolve("AC")
    assert style.align == "center"
    assert style.color == "#000000"
    assert style.font_size == 24
    assert "Ignoring style" in caplog.text


def test_cascade_sees_later_changes_to_the_override_mapping():
    overrides = {}
    cascade = StyleCascade(DEFAULTS, overrides)
    overrides["X"] = {"italic": True}
    assert cascade.resolve("X").italic is True


def test_coerce_property():
    assert coerce_property("color", "#FFAA00") == "#ffaa00"
    assert coerce_property("bold", "true") is True
    assert coerce_property("xOffset", "3.5") == 3.5
    with pytest.raises(ValueError):
        coerce_property("fontSize", True)
    with pytest.raises(ValueError):
        coerce_property("fontFamily", "Times")


def test_hex_to_rgb():
    assert hex_to_rgb("#ff0080") == pytest.approx((1.0, 0.0, 128 / 255))


def test_set_override_and_clear():
    overrides = {}
    set_override(overrides, "Name", "color", "#112233")
    set_override(overrides, "Name", "fontSize", "12")
    assert overrides == {"Name": {"color": "#112233", "fontSize": 12.0}}
    set_override(overrides, "Name", "color", "")
    assert overrides == {"Name": {"fontSize": 12.0}}
    set_override(overrides, "Name", "fontSize", None)
    assert overrides == {}


def test_set_override_rejects_unknown_property():
    with pytest.raises(ValueError):
        set_override({}, "Name", "underline", True)


def test_toggle_flips_relative_to_the_effective_value():
    overrides = {}
    cascade = StyleCascade({}, overrides)
    toggle_override(overrides, cascade, "Field", "italic")
    assert overrides == {"Field": {"italic": True}}
    toggle_override(overrides, cascade, "Field", "italic")
    assert overrides == {}


def test_toggle_against_a_built_in_default():
    overrides = {}
    cascade = StyleCascade(DEFAULTS, overrides)
    toggle_override(overrides, cascade, "Name", "bold")
    assert cascade.resolve("Name").bold is False
    toggle_override(overrides, cascade, "Name", "bold")
    assert cascade.resolve("Name").bold is True
    toggle_override(overrides, cascade, "Name", "bold")
    assert cascade.resolve("Name").bold is False
    assert overrides == {"Name": {"bold": False}}


def test_toggle_only_for_bold_and_italic():
    with pytest.raises(ValueError):
        toggle_override({}, StyleCascade({}), "Name", "align")


def test_resolving_twice_gives_the_same_style():
    cascade = StyleCascade(DEFAULTS, {"AC": {"color": "#123456", "xOffset": 2}})
    assert cascade.resolve("AC") == cascade.resolve("AC")
