"""Tests for view/raster coordinate mapping and edge clamping."""

import pytest

pytest.importorskip("PySide6", reason="PySide6 is required for geometry tests", exc_type=ImportError)

from PySide6.QtCore import QPointF

from easycrop.core.geometry import (
    EdgeClamp,
    EdgeClampPolicy,
    RasterBounds,
    centering_offset,
    midpoint,
    to_raster_space,
    to_view_space,
)


BOUNDS = RasterBounds(0, 0, 100, 50)


def test_centering_offset_centres_raster():
    assert centering_offset(500, 400, 250, 400) == (125, 0)


def test_centering_offset_uses_integer_division():
    assert centering_offset(101, 51, 50, 50) == (25, 0)


def test_view_and_raster_space_are_inverse():
    view = QPointF(137.5, 42.0)

    raster = to_raster_space(view, 20, 10)

    assert (raster.x(), raster.y()) == (117.5, 32.0)
    back = to_view_space(raster, 20, 10)
    assert (back.x(), back.y()) == (137.5, 42.0)


def test_midpoint():
    mid = midpoint(QPointF(0, 0), QPointF(10, 4))

    assert (mid.x(), mid.y()) == (5, 2)


@pytest.mark.parametrize(
    "point, inside",
    [
        (QPointF(50, 25), True),
        (QPointF(0.5, 0.5), True),
        (QPointF(0, 25), False),      # on the left edge
        (QPointF(100, 25), False),    # on the right edge
        (QPointF(50, 50), False),     # on the bottom edge
        (QPointF(-1, 25), False),
        (QPointF(50, 60), False),
    ],
)
def test_contains_is_strict(point, inside):
    assert BOUNDS.contains(point) is inside


def test_bounds_edges():
    bounds = RasterBounds(10, 20, 30, 40)

    assert (bounds.right, bounds.bottom) == (40, 60)
    assert bounds.to_rect().width() == 30


@pytest.mark.parametrize(
    "point, expected",
    [
        (QPointF(50, -5), EdgeClamp(y=0)),
        (QPointF(50, 70), EdgeClamp(y=50)),
        (QPointF(-5, 25), EdgeClamp(x=0)),
        (QPointF(130, 25), EdgeClamp(x=100)),
    ],
)
def test_single_axis_clamp_pins_overflowing_axis(point, expected):
    assert BOUNDS.edge_clamp(point) == expected


def test_single_axis_clamp_prefers_vertical_edges():
    # Out past the top-left corner: only the top edge is applied
    clamp = BOUNDS.edge_clamp(QPointF(-20, -20), EdgeClampPolicy.SINGLE_AXIS)

    assert clamp == EdgeClamp(y=0)
    pinned = clamp.apply(QPointF(-20, -20))
    assert (pinned.x(), pinned.y()) == (-20, 0)


def test_both_axes_clamp_pins_each_axis():
    clamp = BOUNDS.edge_clamp(QPointF(-20, 80), EdgeClampPolicy.BOTH_AXES)

    pinned = clamp.apply(QPointF(-20, 80))
    assert (pinned.x(), pinned.y()) == (0, 50)


@pytest.mark.parametrize("policy", list(EdgeClampPolicy))
def test_point_on_edge_matches_no_branch(policy):
    assert BOUNDS.edge_clamp(QPointF(100, 25), policy).is_empty
    assert BOUNDS.edge_clamp(QPointF(50, 0), policy).is_empty


def test_policy_from_config_falls_back_to_single_axis():
    assert EdgeClampPolicy.from_config("both_axes") is EdgeClampPolicy.BOTH_AXES
    assert EdgeClampPolicy.from_config("diagonal") is EdgeClampPolicy.SINGLE_AXIS
    assert EdgeClampPolicy.from_config(None) is EdgeClampPolicy.SINGLE_AXIS
