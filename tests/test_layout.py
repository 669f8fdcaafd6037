import pytest

from formlayer.geometry import Geometry
from formlayer.layout import (
    check_mark_origin,
    check_mark_size,
    font_size_for,
    place_text,
    wrap_lines,
)
from formlayer.style import EffectiveStyle
from formlayer.textfit import fit_font_size


def measure(text):
    return len(text) * 5


BOX = Geometry(100, 700, 200, 20)


def test_wrap_on_spaces():
    assert wrap_lines("aa bb cc", 25, measure) == ["aa bb", "cc"]


def test_wrap_keeps_explicit_line_breaks():
    assert wrap_lines("one\ntwo three", 1000, measure) == ["one", "two three"]


def test_overlong_word_keeps_its_own_line():
    assert wrap_lines("hi extraordinarily ok", 30, measure) == ["hi", "extraordinarily", "ok"]


def test_single_line_left():
    [line] = place_text(BOX, "Alice", 10, EffectiveStyle(), False, measure)
    assert (line.x, line.y) == (102, 707)


def test_single_line_center_and_right():
    [center] = place_text(BOX, "ab", 10, EffectiveStyle(align="center"), False, measure)
    [right] = place_text(BOX, "ab", 10, EffectiveStyle(align="right"), False, measure)
    assert center.x == 195
    assert right.x == 288


def test_single_line_joins_line_breaks():
    [line] = place_text(BOX, "a\nb", 10, EffectiveStyle(), False, measure)
    assert line.text == "a b"


def test_multiline_baselines():
    lines = place_text(Geometry(0, 0, 100, 100), "one\ntwo", 10, EffectiveStyle(), True, measure)
    assert [line.y for line in lines] == [88, pytest.approx(76.5)]


def test_multiline_aligns_each_line():
    lines = place_text(Geometry(0, 0, 100, 100), "a\nabc", 10, EffectiveStyle(align="right"), True, measure)
    assert [line.x for line in lines] == [93, 83]


def test_offsets_are_added_last():
    style = EffectiveStyle(x_offset=3, y_offset=-4)
    [line] = place_text(BOX, "Alice", 10, style, False, measure)
    assert (line.x, line.y) == (105, 703)


def test_check_mark_is_centred():
    geometry = Geometry(300, 700, 15, 15)
    size = check_mark_size(geometry)
    assert size == 12
    assert check_mark_origin(geometry, 10, size) == (302.5, 701.5)


def test_explicit_font_size_wins():
    assert font_size_for(EffectiveStyle(font_size=24), "x", BOX, False) == 24
    assert font_size_for(EffectiveStyle(), "Alice", BOX, False) == fit_font_size("Alice", 200, 20, False)
