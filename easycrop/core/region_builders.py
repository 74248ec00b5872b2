"""
Region builders for EasyCrop.

A region builder turns a Down / Move / Up pointer sequence into a closed
crop region. All points handed to a builder are already in raster space;
the builder is told the raster bounds on every event because the raster
can be replaced between interactions.

Builders:
- RectangleRegionBuilder: Classic crop, a normalised rectangle
- FreehandRegionBuilder: Freehand and Lasso crop, a smoothed closed path
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum, auto
from typing import List, Optional, Tuple

from PySide6.QtCore import QPointF, QRectF
from PySide6.QtGui import QPainterPath

from easycrop.core.errors import CommitOutcome
from easycrop.core.geometry import EdgeClampPolicy, RasterBounds, midpoint
from easycrop.services.logging_service import get_logger


DEFAULT_MINIMUM_STROKE_LENGTH = 10.0


class BuilderKind(Enum):
    """Enum for region builder types."""
    RECTANGLE = auto()
    FREEHAND = auto()


class RegionBuilder(ABC):
    """
    Base class for region builders.

    An interaction that begins outside the raster is marked invalid; the
    following extend/commit calls are ignored until the next begin inside
    the raster. An invalid begin never touches the existing region.
    """

    def __init__(
        self,
        minimum_stroke_length: float = DEFAULT_MINIMUM_STROKE_LENGTH,
        clamp_policy: EdgeClampPolicy = EdgeClampPolicy.SINGLE_AXIS,
    ) -> None:
        self._logger = get_logger(__name__)
        self._minimum_stroke_length = minimum_stroke_length
        self._clamp_policy = clamp_policy
        self._invalid = False

    @property
    @abstractmethod
    def kind(self) -> BuilderKind:
        """Return the type of this builder."""
        pass

    @property
    def invalid(self) -> bool:
        """True while the current interaction started outside the raster."""
        return self._invalid

    @property
    def minimum_stroke_length(self) -> float:
        return self._minimum_stroke_length

    @property
    def clamp_policy(self) -> EdgeClampPolicy:
        return self._clamp_policy

    @clamp_policy.setter
    def clamp_policy(self, value: EdgeClampPolicy) -> None:
        self._clamp_policy = value

    @property
    @abstractmethod
    def has_region(self) -> bool:
        """True once a committed, croppable region exists."""
        pass

    @abstractmethod
    def begin(self, point: QPointF, bounds: RasterBounds) -> None:
        """Handle pointer down."""
        pass

    @abstractmethod
    def extend(self, point: QPointF, bounds: RasterBounds) -> None:
        """Handle pointer move."""
        pass

    @abstractmethod
    def commit(self) -> CommitOutcome:
        """Handle pointer up."""
        pass

    @abstractmethod
    def reset(self) -> None:
        """Drop all state and become interaction-ready."""
        pass


# ─── Classic (rectangle) crop ─────────────────────────────────────────────────


@dataclass
class RectangleRegion:
    """Two corner points; the derived edges are always normalised."""
    start: QPointF
    end: QPointF

    @property
    def left(self) -> float:
        return min(self.start.x(), self.end.x())

    @property
    def top(self) -> float:
        return min(self.start.y(), self.end.y())

    @property
    def right(self) -> float:
        return max(self.start.x(), self.end.x())

    @property
    def bottom(self) -> float:
        return max(self.start.y(), self.end.y())

    @property
    def width(self) -> float:
        return abs(self.end.x() - self.start.x())

    @property
    def height(self) -> float:
        return abs(self.end.y() - self.start.y())

    def to_rect(self) -> QRectF:
        return QRectF(self.left, self.top, self.width, self.height)

    def exceeds(self, threshold: float) -> bool:
        """True if the rectangle is larger than `threshold` on either axis."""
        return max(self.width, self.height) > threshold


class RectangleRegionBuilder(RegionBuilder):
    """
    Builds the Classic crop rectangle.

    Moves are throttled: a move is only honoured when it is more than the
    minimum stroke length away from the previous end point on at least
    one axis.
    """

    def __init__(
        self,
        minimum_stroke_length: float = DEFAULT_MINIMUM_STROKE_LENGTH,
        clamp_policy: EdgeClampPolicy = EdgeClampPolicy.SINGLE_AXIS,
    ) -> None:
        super().__init__(minimum_stroke_length, clamp_policy)
        self._region: Optional[RectangleRegion] = None
        self._committed = False

    @property
    def kind(self) -> BuilderKind:
        return BuilderKind.RECTANGLE

    @property
    def active(self) -> bool:
        return self._region is not None

    @property
    def has_region(self) -> bool:
        return self._region is not None and self._committed

    def region(self) -> Optional[QRectF]:
        """The normalised rectangle in raster space, committed or not."""
        if self._region is None:
            return None
        return self._region.to_rect()

    def committed_region(self) -> Optional[QRectF]:
        if not self.has_region:
            return None
        return self._region.to_rect()

    def begin(self, point: QPointF, bounds: RasterBounds) -> None:
        if not bounds.contains(point):
            self._invalid = True
            return

        self._invalid = False
        self._committed = False
        self._region = RectangleRegion(QPointF(point), QPointF(point))

    def extend(self, point: QPointF, bounds: RasterBounds) -> None:
        if self._invalid or self._region is None or self._committed:
            return

        end = self._region.end
        if (abs(point.x() - end.x()) <= self._minimum_stroke_length
                and abs(point.y() - end.y()) <= self._minimum_stroke_length):
            return

        if bounds.contains(point):
            self._region.end = QPointF(point)
            return

        clamp = bounds.edge_clamp(point, self._clamp_policy)
        if not clamp.is_empty:
            self._region.end = clamp.apply(point)

    def commit(self) -> CommitOutcome:
        if self._invalid or self._region is None or self._committed:
            return CommitOutcome.IGNORED

        if not self._region.exceeds(self._minimum_stroke_length):
            self._logger.debug("Rectangle below minimum stroke length, discarding")
            self.reset()
            return CommitOutcome.DEGENERATE

        self._committed = True
        self._logger.debug(f"Rectangle committed: {self._region.to_rect()}")
        return CommitOutcome.COMMITTED

    def reset(self) -> None:
        self._region = None
        self._committed = False
        self._invalid = False


# ─── Freehand / Lasso crop ────────────────────────────────────────────────────


class SegmentKind(Enum):
    MOVE = auto()
    LINE = auto()
    QUAD = auto()


@dataclass(frozen=True)
class PathSegment:
    """
    One recorded path operation in raster space.

    QUAD segments carry (control, end); MOVE and LINE carry a single point.
    """
    kind: SegmentKind
    points: Tuple[QPointF, ...]

    def append_to(self, path: QPainterPath, dx: float = 0.0, dy: float = 0.0) -> None:
        points = [QPointF(p.x() + dx, p.y() + dy) for p in self.points]
        if self.kind is SegmentKind.MOVE:
            path.moveTo(points[0])
        elif self.kind is SegmentKind.LINE:
            path.lineTo(points[0])
        else:
            path.quadTo(points[0], points[1])


def build_path(
    segments: List[PathSegment], dx: float = 0.0, dy: float = 0.0
) -> QPainterPath:
    """Replay recorded segments into a QPainterPath shifted by (dx, dy)."""
    path = QPainterPath()
    for segment in segments:
        segment.append_to(path, dx, dy)
    return path


class FreehandRegionBuilder(RegionBuilder):
    """
    Builds a closed crop path from a freehand stroke.

    Each move appends a quadratic segment whose control point is the
    previously tracked point and whose end point is the midpoint between
    it and the new point, which smooths the sampled stroke into a curve.

    Segments are recorded once in raster space. The raster-space crop path
    and the view-space display path are both replayed from that single
    list, so the two can never drift apart.
    """

    def __init__(
        self,
        minimum_stroke_length: float = DEFAULT_MINIMUM_STROKE_LENGTH,
        clamp_policy: EdgeClampPolicy = EdgeClampPolicy.SINGLE_AXIS,
    ) -> None:
        super().__init__(minimum_stroke_length, clamp_policy)
        self._segments: List[PathSegment] = []
        self._stroke_history: List[List[PathSegment]] = []
        self._start: Optional[QPointF] = None
        self._current: Optional[QPointF] = None
        self._drawing = False
        self._committed = False

    @property
    def kind(self) -> BuilderKind:
        return BuilderKind.FREEHAND

    @property
    def has_region(self) -> bool:
        return self._committed

    @property
    def is_drawing(self) -> bool:
        return self._drawing

    @property
    def segments(self) -> List[PathSegment]:
        return list(self._segments)

    @property
    def start(self) -> Optional[QPointF]:
        return self._start

    @property
    def current_point(self) -> Optional[QPointF]:
        return self._current

    @property
    def stroke_count(self) -> int:
        return len(self._stroke_history)

    def begin(self, point: QPointF, bounds: RasterBounds) -> None:
        if not bounds.contains(point):
            self._invalid = True
            return

        # A new stroke always restarts the whole shape
        self.reset()
        self._start = QPointF(point)
        self._current = QPointF(point)
        self._segments.append(PathSegment(SegmentKind.MOVE, (QPointF(point),)))
        self._drawing = True

    def extend(self, point: QPointF, bounds: RasterBounds) -> None:
        if self._invalid or not self._drawing:
            return

        previous = self._current
        if bounds.contains(point):
            target = midpoint(previous, point)
            tracked = QPointF(point)
        else:
            clamp = bounds.edge_clamp(point, self._clamp_policy)
            if clamp.is_empty:
                return
            target = clamp.apply(midpoint(previous, point))
            tracked = clamp.apply(point)

        self._segments.append(
            PathSegment(SegmentKind.QUAD, (QPointF(previous), target))
        )
        self._current = tracked

    def commit(self) -> CommitOutcome:
        if self._invalid or not self._drawing:
            return CommitOutcome.IGNORED

        self._drawing = False
        self._segments.append(PathSegment(SegmentKind.LINE, (QPointF(self._current),)))
        self._segments.append(PathSegment(SegmentKind.LINE, (QPointF(self._start),)))

        bounds = build_path(self._segments).boundingRect()
        if max(bounds.width(), bounds.height()) <= self._minimum_stroke_length:
            self._logger.debug("Freehand shape below minimum stroke length, discarding")
            self.reset()
            return CommitOutcome.DEGENERATE

        self._stroke_history.append(list(self._segments))
        self._committed = True
        self._logger.debug(
            f"Freehand path committed: {len(self._segments)} segments, bounds {bounds}"
        )
        return CommitOutcome.COMMITTED

    def crop_path(self) -> Optional[QPainterPath]:
        """The closed raster-space path, once a stroke has been committed."""
        if not self._committed:
            return None
        return build_path(self._segments)

    def display_path(self, left: float, top: float) -> Optional[QPainterPath]:
        """The current (possibly in-progress) path in view space."""
        if not self._segments:
            return None
        return build_path(self._segments, left, top)

    def display_paths(self, left: float, top: float) -> List[QPainterPath]:
        """
        Every path the overlay should draw, in view space.

        Committed strokes come from the history; a stroke still being drawn
        is appended so the user gets live feedback.
        """
        paths = [build_path(stroke, left, top) for stroke in self._stroke_history]
        if self._drawing:
            paths.append(build_path(self._segments, left, top))
        return paths

    def clear_stroke_history(self) -> None:
        self._stroke_history.clear()

    def reset(self) -> None:
        self._segments = []
        self._stroke_history.clear()
        self._start = None
        self._current = None
        self._drawing = False
        self._committed = False
        self._invalid = False


def create_builder(
    kind: BuilderKind,
    minimum_stroke_length: float = DEFAULT_MINIMUM_STROKE_LENGTH,
    clamp_policy: EdgeClampPolicy = EdgeClampPolicy.SINGLE_AXIS,
) -> RegionBuilder:
    """
    Factory function to create region builders by kind.

    Raises:
        ValueError: For an unknown builder kind.
    """
    builder_classes = {
        BuilderKind.RECTANGLE: RectangleRegionBuilder,
        BuilderKind.FREEHAND: FreehandRegionBuilder,
    }

    if kind not in builder_classes:
        raise ValueError(f"Unknown builder kind: {kind}")

    return builder_classes[kind](minimum_stroke_length, clamp_policy)
