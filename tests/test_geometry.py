import pytest

from formlayer.geometry import DisplayRect, Geometry, fit_scale, to_display, zoom_scale


def test_to_display_flips_the_y_axis():
    rect = to_display(Geometry(100, 700, 50, 20), 792, 1.0)
    assert rect == DisplayRect(left=100, top=72, width=50, height=20)


def test_to_display_scales_every_component():
    rect = to_display(Geometry(100, 700, 50, 20), 792, 2.0)
    assert rect == DisplayRect(left=200, top=144, width=100, height=40)


def test_from_rect_normalizes_corner_order():
    assert Geometry.from_rect([150, 720, 100, 700]) == Geometry(100, 700, 50, 20)


def test_as_box():
    assert DisplayRect(10, 20, 30, 40).as_box() == (10, 20, 40, 60)


def test_fit_scale():
    assert fit_scale(676, 612) == pytest.approx(1.0)
    assert fit_scale(100, 612) is None
    assert fit_scale(50, 612) is None


@pytest.mark.parametrize("percent,scale", [(5, 0.1), (10, 0.1), (150, 1.5), (300, 3.0), (500, 3.0)])
def test_zoom_scale_is_clamped(percent, scale):
    assert zoom_scale(percent) == pytest.approx(scale)
