"""Tests for the rectangle and freehand region builders."""

import pytest

pytest.importorskip("PySide6", reason="PySide6 is required for builder tests", exc_type=ImportError)

from PySide6.QtCore import QPointF, QRectF

from easycrop.core.errors import CommitOutcome
from easycrop.core.geometry import EdgeClampPolicy, RasterBounds
from easycrop.core.region_builders import (
    BuilderKind,
    FreehandRegionBuilder,
    RectangleRegionBuilder,
    SegmentKind,
    create_builder,
)

BIG = RasterBounds(0, 0, 300, 300)
SMALL = RasterBounds(0, 0, 100, 50)


def _xy(point: QPointF):
    return (point.x(), point.y())


def _drag(builder, points, bounds):
    builder.begin(QPointF(*points[0]), bounds)
    for p in points[1:]:
        builder.extend(QPointF(*p), bounds)
    return builder.commit()


def _assert_within(rect: QRectF, bounds: RasterBounds, eps: float = 1e-6) -> None:
    assert rect.left() >= bounds.left - eps
    assert rect.top() >= bounds.top - eps
    assert rect.right() <= bounds.right + eps
    assert rect.bottom() <= bounds.bottom + eps


# ─── Rectangle ────────────────────────────────────────────────────────────────


class TestRectangleRegionBuilder:
    def test_valid_stroke_commits_rectangle(self):
        builder = RectangleRegionBuilder()

        outcome = _drag(builder, [(10, 10), (200, 200)], BIG)

        assert outcome is CommitOutcome.COMMITTED
        assert builder.has_region
        assert builder.committed_region() == QRectF(10, 10, 190, 190)

    def test_rectangle_is_normalised(self):
        builder = RectangleRegionBuilder()

        _drag(builder, [(200, 200), (50, 80)], BIG)

        assert builder.committed_region() == QRectF(50, 80, 150, 120)

    def test_small_stroke_is_degenerate_and_resets(self):
        builder = RectangleRegionBuilder()

        outcome = _drag(builder, [(10, 10), (15, 15)], BIG)

        assert outcome is CommitOutcome.DEGENERATE
        assert not builder.has_region
        assert builder.region() is None

    def test_moves_within_threshold_are_throttled(self):
        builder = RectangleRegionBuilder()
        builder.begin(QPointF(10, 10), BIG)

        builder.extend(QPointF(18, 19), BIG)
        assert builder.region() == QRectF(10, 10, 0, 0)

        # More than the threshold on one axis is enough
        builder.extend(QPointF(25, 12), BIG)
        assert builder.region() == QRectF(10, 10, 15, 2)

    def test_threshold_is_configurable(self):
        builder = RectangleRegionBuilder(minimum_stroke_length=2)

        outcome = _drag(builder, [(10, 10), (15, 15)], BIG)

        assert outcome is CommitOutcome.COMMITTED

    def test_outside_move_is_clamped_to_edge(self):
        builder = RectangleRegionBuilder()

        _drag(builder, [(10, 10), (130, 25)], SMALL)

        assert builder.committed_region() == QRectF(10, 10, 90, 15)

    def test_single_axis_clamp_leaves_other_axis(self):
        builder = RectangleRegionBuilder()
        builder.begin(QPointF(50, 25), SMALL)

        builder.extend(QPointF(-20, -20), SMALL)

        assert builder.region() == QRectF(-20, 0, 70, 25)

    def test_both_axes_clamp_stays_inside(self):
        builder = RectangleRegionBuilder(clamp_policy=EdgeClampPolicy.BOTH_AXES)
        builder.begin(QPointF(50, 25), SMALL)

        builder.extend(QPointF(-20, -20), SMALL)

        assert builder.region() == QRectF(0, 0, 50, 25)

    def test_begin_on_edge_is_invalid(self):
        builder = RectangleRegionBuilder()

        builder.begin(QPointF(0, 25), SMALL)

        assert builder.invalid
        assert builder.region() is None

    def test_outside_begin_keeps_committed_region(self):
        builder = RectangleRegionBuilder()
        _drag(builder, [(10, 10), (200, 200)], BIG)

        builder.begin(QPointF(-5, -5), BIG)
        builder.extend(QPointF(100, 100), BIG)
        outcome = builder.commit()

        assert outcome is CommitOutcome.IGNORED
        assert builder.committed_region() == QRectF(10, 10, 190, 190)

    def test_inside_begin_after_invalid_starts_fresh(self):
        builder = RectangleRegionBuilder()
        builder.begin(QPointF(-5, -5), BIG)

        outcome = _drag(builder, [(20, 20), (60, 60)], BIG)

        assert not builder.invalid
        assert outcome is CommitOutcome.COMMITTED


# ─── Freehand ─────────────────────────────────────────────────────────────────


class TestFreehandRegionBuilder:
    def test_segments_are_smoothed_through_midpoints(self):
        builder = FreehandRegionBuilder()

        outcome = _drag(builder, [(10, 10), (30, 10), (30, 30)], BIG)

        assert outcome is CommitOutcome.COMMITTED
        kinds = [s.kind for s in builder.segments]
        assert kinds == [
            SegmentKind.MOVE,
            SegmentKind.QUAD,
            SegmentKind.QUAD,
            SegmentKind.LINE,
            SegmentKind.LINE,
        ]
        first_quad, second_quad = builder.segments[1], builder.segments[2]
        assert [_xy(p) for p in first_quad.points] == [(10, 10), (20, 10)]
        assert [_xy(p) for p in second_quad.points] == [(30, 10), (30, 20)]
        # Closing lines run to the last point, then back to the start
        assert _xy(builder.segments[3].points[0]) == (30, 30)
        assert _xy(builder.segments[4].points[0]) == (10, 10)

    def test_crop_path_only_after_commit(self):
        builder = FreehandRegionBuilder()
        builder.begin(QPointF(10, 10), BIG)
        builder.extend(QPointF(60, 10), BIG)

        assert builder.is_drawing
        assert builder.crop_path() is None

        builder.extend(QPointF(60, 60), BIG)
        builder.commit()
        assert builder.crop_path() is not None
        assert builder.has_region

    def test_single_axis_overflow_stays_inside_bounds(self):
        builder = FreehandRegionBuilder()

        _drag(builder, [(50, 25), (150, 25), (60, 70), (20, 10)], SMALL)

        _assert_within(builder.crop_path().boundingRect(), SMALL)
        assert _xy(builder.segments[1].points[1]) == (100, 25)

    def test_single_axis_corner_overflow_pins_first_edge_only(self):
        builder = FreehandRegionBuilder()
        builder.begin(QPointF(50, 25), SMALL)

        builder.extend(QPointF(-40, -40), SMALL)

        assert _xy(builder.current_point) == (-40, 0)

    def test_both_axes_overflow_stays_inside_bounds(self):
        builder = FreehandRegionBuilder(clamp_policy=EdgeClampPolicy.BOTH_AXES)

        _drag(builder, [(50, 25), (-40, -40), (90, -80), (130, 90)], SMALL)

        _assert_within(builder.crop_path().boundingRect(), SMALL)
        assert _xy(builder.current_point) == (100, 50)

    def test_small_shape_is_degenerate(self):
        builder = FreehandRegionBuilder()

        outcome = _drag(builder, [(10, 10), (15, 15), (12, 18)], BIG)

        assert outcome is CommitOutcome.DEGENERATE
        assert not builder.has_region
        assert builder.segments == []
        assert builder.stroke_count == 0

    def test_outside_begin_keeps_committed_path(self):
        builder = FreehandRegionBuilder()
        _drag(builder, [(10, 10), (60, 10), (60, 60)], BIG)
        before = builder.crop_path().boundingRect()

        builder.begin(QPointF(-5, 5), BIG)
        builder.extend(QPointF(100, 100), BIG)
        outcome = builder.commit()

        assert outcome is CommitOutcome.IGNORED
        assert builder.crop_path().boundingRect() == before
        assert builder.stroke_count == 1

    def test_new_stroke_replaces_previous_shape(self):
        builder = FreehandRegionBuilder()
        _drag(builder, [(10, 10), (60, 10), (60, 60)], BIG)

        builder.begin(QPointF(100, 100), BIG)

        assert not builder.has_region
        assert builder.stroke_count == 0
        assert len(builder.segments) == 1

    def test_display_path_is_crop_path_translated(self):
        builder = FreehandRegionBuilder()
        _drag(builder, [(10, 10), (60, 10), (60, 60)], BIG)

        crop = builder.crop_path().boundingRect()
        display = builder.display_path(20, 30).boundingRect()

        assert display == crop.translated(20, 30)

    def test_display_paths_include_stroke_in_progress(self):
        builder = FreehandRegionBuilder()
        builder.begin(QPointF(10, 10), BIG)
        builder.extend(QPointF(60, 10), BIG)

        assert len(builder.display_paths(0, 0)) == 1

        builder.extend(QPointF(60, 60), BIG)
        builder.commit()
        assert len(builder.display_paths(0, 0)) == 1

        builder.clear_stroke_history()
        assert builder.display_paths(0, 0) == []
        assert builder.has_region


def test_create_builder_by_kind():
    assert isinstance(create_builder(BuilderKind.RECTANGLE), RectangleRegionBuilder)
    freehand = create_builder(BuilderKind.FREEHAND, 4, EdgeClampPolicy.BOTH_AXES)
    assert isinstance(freehand, FreehandRegionBuilder)
    assert freehand.minimum_stroke_length == 4
    assert freehand.clamp_policy is EdgeClampPolicy.BOTH_AXES


def test_create_builder_rejects_unknown_kind():
    with pytest.raises(ValueError):
        create_builder("polygon")
