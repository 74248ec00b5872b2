"""
Coordinate mapping and edge clamping for EasyCrop.

Two coordinate spaces exist:
- view space: the interactive canvas, origin at its top-left corner
- raster space: the displayed raster, origin at the raster's top-left corner

The raster is centred in the canvas, so the two differ by a constant
offset (bitmap_left, bitmap_top) recomputed on every layout pass.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from PySide6.QtCore import QPointF, QRectF


class EdgeClampPolicy(Enum):
    """How a point that left the raster is pulled back onto its edge."""
    # Pin only the first overflowing axis, checked top, bottom, left, right
    SINGLE_AXIS = "single_axis"
    # Pin every overflowing axis
    BOTH_AXES = "both_axes"

    @classmethod
    def from_config(cls, value: Optional[str]) -> "EdgeClampPolicy":
        try:
            return cls(value)
        except ValueError:
            return cls.SINGLE_AXIS


def centering_offset(
    canvas_width: int,
    canvas_height: int,
    raster_width: int,
    raster_height: int,
) -> Tuple[int, int]:
    """Return (bitmap_left, bitmap_top) that centre a raster in the canvas."""
    return (
        abs(canvas_width - raster_width) // 2,
        abs(canvas_height - raster_height) // 2,
    )


def to_raster_space(point: QPointF, left: float, top: float) -> QPointF:
    """Convert a view-space point to raster space."""
    return QPointF(point.x() - left, point.y() - top)


def to_view_space(point: QPointF, left: float, top: float) -> QPointF:
    """Convert a raster-space point to view space."""
    return QPointF(point.x() + left, point.y() + top)


def midpoint(a: QPointF, b: QPointF) -> QPointF:
    return QPointF((a.x() + b.x()) / 2, (a.y() + b.y()) / 2)


@dataclass(frozen=True)
class EdgeClamp:
    """
    The edge coordinates a point was pinned to.

    None on an axis means that axis was left alone.
    """
    x: Optional[float] = None
    y: Optional[float] = None

    @property
    def is_empty(self) -> bool:
        return self.x is None and self.y is None

    def apply(self, point: QPointF) -> QPointF:
        """Replace the pinned coordinates of `point` with the edge values."""
        return QPointF(
            point.x() if self.x is None else self.x,
            point.y() if self.y is None else self.y,
        )


@dataclass(frozen=True)
class RasterBounds:
    """Axis-aligned bounds of the raster, in whichever space the caller uses."""
    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    def to_rect(self) -> QRectF:
        return QRectF(self.left, self.top, self.width, self.height)

    def contains(self, point: QPointF) -> bool:
        """Strict containment; points on an edge count as outside."""
        return (
            self.top < point.y() < self.bottom
            and self.left < point.x() < self.right
        )

    def edge_clamp(
        self,
        point: QPointF,
        policy: EdgeClampPolicy = EdgeClampPolicy.SINGLE_AXIS,
    ) -> EdgeClamp:
        """
        Work out which edge(s) `point` should be pinned to.

        A point lying exactly on an edge matches no branch and yields an
        empty clamp.
        """
        x, y = point.x(), point.y()

        if policy is EdgeClampPolicy.BOTH_AXES:
            edge_x = None
            edge_y = None
            if x < self.left:
                edge_x = self.left
            elif x > self.right:
                edge_x = self.right
            if y < self.top:
                edge_y = self.top
            elif y > self.bottom:
                edge_y = self.bottom
            return EdgeClamp(edge_x, edge_y)

        if y < self.top:
            return EdgeClamp(y=self.top)
        if y > self.bottom:
            return EdgeClamp(y=self.bottom)
        if x < self.left:
            return EdgeClamp(x=self.left)
        if x > self.right:
            return EdgeClamp(x=self.right)
        return EdgeClamp()
