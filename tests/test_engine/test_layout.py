"""Tests for the layout planner."""

import math

import pytest

from bimisvg.engine.layout import Transform, plan, safe_area
from bimisvg.utils.geometry import UNDEFINED, BoundingBox, parse_transform


def test_circle_logo_plan():
    t = plan(BoundingBox(5, 5, 45, 45))
    assert t.scale_x == pytest.approx(1.875)
    assert t.translate_x == pytest.approx(3.125)
    assert t.translate_y == pytest.approx(3.125)
    assert t.to_attribute() == "translate(3.125, 3.125) scale(1.875)"


def test_fit_fills_safe_area():
    t = plan(BoundingBox(5, 5, 45, 45))
    placed = t.apply_box(BoundingBox(5, 5, 45, 45))
    assert placed.as_tuple() == pytest.approx((12.5, 12.5, 87.5, 87.5))


def test_wide_content_keeps_aspect_ratio():
    box = BoundingBox(0, 0, 200, 100)
    t = plan(box)
    assert t.is_uniform
    placed = t.apply_box(box)
    assert placed.width / placed.height == pytest.approx(2.0)
    assert placed.as_tuple() == pytest.approx((12.5, 31.25, 87.5, 68.75))


@pytest.mark.parametrize("padding", [1.0, 5.0, 12.5, 20.0, 25.0])
@pytest.mark.parametrize(
    "box",
    [
        BoundingBox(0, 0, 1, 1),
        BoundingBox(-500, 20, 300, 21),
        BoundingBox(1000, 1000, 1000.5, 4000),
        BoundingBox(3.3, -7.1, 8.9, 2.2),
    ],
)
def test_content_always_inside_safe_area(box, padding):
    t = plan(box, padding_percent=padding)
    placed = t.apply_box(box)
    assert placed.within(safe_area(100, padding), tolerance=1e-9)
    assert t.scale_x == t.scale_y
    # The tighter axis touches both safe-area edges
    area = safe_area(100, padding)
    assert max(placed.width, placed.height) == pytest.approx(area.width)


def test_content_is_centered():
    box = BoundingBox(40, 10, 60, 90)
    placed = plan(box).apply_box(box)
    assert placed.center == pytest.approx((50, 50))


@pytest.mark.parametrize("box", [UNDEFINED, BoundingBox(0, 0, 10, 0), BoundingBox(5, 5, 5, 5)])
def test_degenerate_box_centers_unscaled(box):
    t = plan(box)
    assert t == Transform(1.0, 1.0, 0.0, 0.0)
    assert all(math.isfinite(v) for v in (t.scale_x, t.translate_x, t.translate_y))


def test_degenerate_box_centers_source_canvas():
    t = plan(UNDEFINED, source_size=(50.0, 40.0))
    assert (t.scale_x, t.translate_x, t.translate_y) == (1.0, 25.0, 30.0)
    assert t.to_attribute() == "translate(25, 30) scale(1)"


def test_safe_area():
    assert safe_area(100, 5).as_tuple() == (5, 5, 95, 95)
    assert safe_area(100, 0).as_tuple() == (0, 0, 100, 100)
    with pytest.raises(ValueError):
        safe_area(100, 50)
    with pytest.raises(ValueError):
        safe_area(100, -1)


def test_non_uniform_attribute():
    assert Transform(2, 3, 0, 0).to_attribute() == "translate(0, 0) scale(2, 3)"


@pytest.mark.parametrize("padding", [1.0, 12.5, 25.0])
def test_emitted_attribute_stays_inside_safe_area(padding):
    box = BoundingBox(3.7, 0, 296.3, 97.1)
    t = plan(box, padding_percent=padding)
    placed = box.transformed(parse_transform(t.to_attribute()))
    assert placed.within(safe_area(100, padding), tolerance=1e-9)
