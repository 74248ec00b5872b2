"""
Crop engine for EasyCrop.

The CropEngine owns the current raster, one region builder per builder
kind, and the crop mode that selects between them. It maps view-space
pointer events into raster space, forwards them to the active builder,
and extracts the enclosed pixels from the raster once a region has been
committed.

Usage:
    engine = CropEngine()
    engine.set_raster(scaled_buffer)
    engine.layout(canvas_width, canvas_height)
    engine.route_event(PointerPhase.DOWN, QPointF(10, 10))
    engine.route_event(PointerPhase.MOVE, QPointF(200, 200))
    engine.route_event(PointerPhase.UP, QPointF(200, 200))
    cropped = engine.extract()
"""

import threading
from enum import Enum, auto
from typing import Dict, List, Optional, Tuple

import numpy as np
from PySide6.QtCore import QPointF, QRect, QRectF, Qt
from PySide6.QtGui import QColor, QImage, QPainter, QPainterPath

from easycrop.core.errors import (
    CommitOutcome,
    EmptyRegionError,
    NoRasterError,
    OutOfBoundsError,
)
from easycrop.core.geometry import (
    EdgeClampPolicy,
    RasterBounds,
    centering_offset,
    to_raster_space,
)
from easycrop.core.raster_buffer import RasterBuffer
from easycrop.core.region_builders import (
    DEFAULT_MINIMUM_STROKE_LENGTH,
    BuilderKind,
    FreehandRegionBuilder,
    RectangleRegionBuilder,
    RegionBuilder,
    create_builder,
)
from easycrop.services.config_service import ConfigService
from easycrop.services.logging_service import get_logger


class RenderStyle(Enum):
    """How the overlay for a crop mode is drawn."""
    RECTANGLE_OUTLINE = auto()
    DASHED_OUTLINE = auto()
    TINTED_WASH = auto()


class CropMode(Enum):
    """Enum for crop interaction modes."""
    CLASSIC = "classic"
    FREEHAND = "freehand"
    LASSO = "lasso"

    @property
    def builder_kind(self) -> BuilderKind:
        if self is CropMode.CLASSIC:
            return BuilderKind.RECTANGLE
        # Freehand and Lasso share one builder
        return BuilderKind.FREEHAND

    @property
    def render_style(self) -> RenderStyle:
        return {
            CropMode.CLASSIC: RenderStyle.RECTANGLE_OUTLINE,
            CropMode.FREEHAND: RenderStyle.DASHED_OUTLINE,
            CropMode.LASSO: RenderStyle.TINTED_WASH,
        }[self]


class PointerPhase(Enum):
    DOWN = auto()
    MOVE = auto()
    UP = auto()


class CropEngine:
    """
    Orchestrates crop interactions against the current raster.

    All public methods take one re-entrant lock, so the builder state and
    the raster reference are always read and replaced together.
    """

    def __init__(
        self,
        minimum_stroke_length: float = DEFAULT_MINIMUM_STROKE_LENGTH,
        clamp_policy: EdgeClampPolicy = EdgeClampPolicy.SINGLE_AXIS,
        mode: CropMode = CropMode.CLASSIC,
    ) -> None:
        self._logger = get_logger(__name__)
        self._lock = threading.RLock()

        self._mode = mode
        self._raster: Optional[RasterBuffer] = None
        self._canvas_width = 0
        self._canvas_height = 0
        self._bitmap_left = 0
        self._bitmap_top = 0
        self._last_outcome: Optional[CommitOutcome] = None

        self._builders: Dict[BuilderKind, RegionBuilder] = {
            kind: create_builder(kind, minimum_stroke_length, clamp_policy)
            for kind in BuilderKind
        }

    @classmethod
    def from_config(cls, config: ConfigService) -> "CropEngine":
        """Create an engine using the interaction settings from config."""
        mode = CropMode.CLASSIC
        if config.default_crop_mode:
            try:
                mode = CropMode(config.default_crop_mode)
            except ValueError:
                get_logger(__name__).warning(
                    f"Unknown default_crop_mode {config.default_crop_mode!r}, using classic"
                )
        return cls(
            minimum_stroke_length=config.minimum_stroke_length,
            clamp_policy=EdgeClampPolicy.from_config(config.edge_clamp_policy),
            mode=mode,
        )

    # ─── Mode ─────────────────────────────────────────────────────────────

    @property
    def mode(self) -> CropMode:
        return self._mode

    @property
    def render_style(self) -> RenderStyle:
        return self._mode.render_style

    @property
    def active_builder(self) -> RegionBuilder:
        return self._builders[self._mode.builder_kind]

    @property
    def rectangle_builder(self) -> RectangleRegionBuilder:
        return self._builders[BuilderKind.RECTANGLE]

    @property
    def freehand_builder(self) -> FreehandRegionBuilder:
        return self._builders[BuilderKind.FREEHAND]

    def set_mode(self, mode: CropMode) -> CropMode:
        """
        Switch the crop mode and return the mode actually selected.

        Selecting Lasso while already in Lasso toggles back to Freehand.
        Any change of mode discards every builder's region.
        """
        with self._lock:
            if mode is CropMode.LASSO and self._mode is CropMode.LASSO:
                mode = CropMode.FREEHAND

            if mode is not self._mode:
                self.clear_all()
                self._logger.info(f"Crop mode changed: {self._mode.value} -> {mode.value}")
                self._mode = mode

            return self._mode

    # ─── Raster and layout ────────────────────────────────────────────────

    @property
    def raster(self) -> Optional[RasterBuffer]:
        return self._raster

    def set_raster(self, buffer: Optional[RasterBuffer]) -> None:
        """
        Replace the raster being cropped.

        Regions drawn against the previous raster are discarded.
        """
        with self._lock:
            self._raster = buffer
            self.clear_all()
            self._update_offset()
            if buffer is None:
                self._logger.info("Raster cleared")
            else:
                self._logger.info(f"Raster set: {buffer.width}x{buffer.height}")

    def layout(self, canvas_width: int, canvas_height: int) -> Tuple[int, int]:
        """Record the canvas size and return the raster's centring offset."""
        with self._lock:
            self._canvas_width = canvas_width
            self._canvas_height = canvas_height
            self._update_offset()
            return self._bitmap_left, self._bitmap_top

    def _update_offset(self) -> None:
        if self._raster is None:
            self._bitmap_left = 0
            self._bitmap_top = 0
            return
        self._bitmap_left, self._bitmap_top = centering_offset(
            self._canvas_width,
            self._canvas_height,
            self._raster.width,
            self._raster.height,
        )

    @property
    def offset(self) -> Tuple[int, int]:
        """(bitmap_left, bitmap_top) of the raster inside the canvas."""
        return self._bitmap_left, self._bitmap_top

    @property
    def canvas_size(self) -> Tuple[int, int]:
        return self._canvas_width, self._canvas_height

    def raster_bounds(self) -> Optional[RasterBounds]:
        """Bounds of the raster in raster space."""
        if self._raster is None:
            return None
        return RasterBounds(0, 0, self._raster.width, self._raster.height)

    def view_bounds(self) -> Optional[RasterBounds]:
        """Bounds of the raster in view space."""
        if self._raster is None:
            return None
        return RasterBounds(
            self._bitmap_left, self._bitmap_top,
            self._raster.width, self._raster.height,
        )

    # ─── Event routing ────────────────────────────────────────────────────

    @property
    def last_outcome(self) -> Optional[CommitOutcome]:
        """Outcome of the most recent pointer-up."""
        return self._last_outcome

    def route_event(self, phase: PointerPhase, point: QPointF) -> bool:
        """
        Forward a view-space pointer event to the active builder.

        Returns whether the canvas needs a redraw, which is always.
        Without a raster the event is ignored.
        """
        with self._lock:
            bounds = self.raster_bounds()
            if bounds is None:
                self._logger.debug(f"Ignoring {phase.name} event: no raster loaded")
                return True

            raster_point = to_raster_space(point, self._bitmap_left, self._bitmap_top)
            builder = self.active_builder

            if phase is PointerPhase.DOWN:
                builder.begin(raster_point, bounds)
            elif phase is PointerPhase.MOVE:
                builder.extend(raster_point, bounds)
            else:
                outcome = builder.commit()
                if outcome is CommitOutcome.DEGENERATE:
                    self.clear_all()
                self._last_outcome = outcome

            return True

    # ─── Region queries ───────────────────────────────────────────────────

    def has_active_region(self) -> bool:
        """True if any builder holds a committed, croppable region."""
        with self._lock:
            return any(builder.has_region for builder in self._builders.values())

    def overlay_rect(self) -> Optional[QRectF]:
        """The Classic crop rectangle in view space, for rendering."""
        with self._lock:
            rect = self.rectangle_builder.region()
            if rect is None:
                return None
            return rect.translated(self._bitmap_left, self._bitmap_top)

    def overlay_paths(self) -> List[QPainterPath]:
        """The Freehand / Lasso strokes in view space, for rendering."""
        with self._lock:
            return self.freehand_builder.display_paths(self._bitmap_left, self._bitmap_top)

    def clear_stroke_history(self) -> None:
        with self._lock:
            self.freehand_builder.clear_stroke_history()

    def clear_all(self) -> None:
        """Reset every builder, dropping regions and stroke history."""
        with self._lock:
            for builder in self._builders.values():
                builder.reset()
            self._last_outcome = None

    # ─── Extraction ───────────────────────────────────────────────────────

    def _require_raster(self, buffer: Optional[RasterBuffer]) -> RasterBuffer:
        buffer = buffer if buffer is not None else self._raster
        if buffer is None:
            raise NoRasterError("No image loaded")
        return buffer

    def extract_classic(self, buffer: Optional[RasterBuffer] = None) -> RasterBuffer:
        """
        Crop the committed rectangle out of `buffer` (default: current raster).

        Raises:
            NoRasterError: No buffer given and no raster loaded.
            EmptyRegionError: No rectangle has been committed.
            OutOfBoundsError: The rectangle misses the buffer.
        """
        with self._lock:
            buffer = self._require_raster(buffer)
            rect = self.rectangle_builder.committed_region()
            if rect is None:
                raise EmptyRegionError("No crop rectangle has been selected")

            # Truncate to whole pixels
            pixel_rect = QRect(
                int(rect.left()), int(rect.top()),
                int(rect.width()), int(rect.height()),
            )
            clipped = pixel_rect.intersected(buffer.rect())
            if clipped.isEmpty():
                raise OutOfBoundsError(
                    f"Crop rectangle {pixel_rect} lies outside the "
                    f"{buffer.width}x{buffer.height} raster"
                )

            return buffer.crop(clipped)

    def extract_freehand(self, buffer: Optional[RasterBuffer] = None) -> RasterBuffer:
        """
        Cut the committed freehand path out of `buffer` (default: current raster).

        The path is rasterised into a canvas-sized mask; pixels outside the
        mask become fully transparent and the result is trimmed to the
        mask's tight bounding box.

        Raises:
            NoRasterError: No buffer given and no raster loaded.
            EmptyRegionError: No path has been committed.
            OutOfBoundsError: The path covers no pixel of the buffer.
        """
        with self._lock:
            buffer = self._require_raster(buffer)
            path = self.freehand_builder.crop_path()
            if path is None:
                raise EmptyRegionError("No crop path has been drawn")

            width = max(self._canvas_width, buffer.width)
            height = max(self._canvas_height, buffer.height)

            canvas = QImage(width, height, QImage.Format.Format_ARGB32_Premultiplied)
            canvas.fill(Qt.GlobalColor.transparent)

            painter = QPainter(canvas)
            painter.fillPath(path, QColor(0, 0, 0, 255))
            painter.end()

            bounds = _mask_bounds(canvas).intersected(buffer.rect())
            if bounds.isEmpty():
                raise OutOfBoundsError("Crop path does not cover any pixel of the raster")

            painter = QPainter(canvas)
            painter.setCompositionMode(QPainter.CompositionMode.CompositionMode_SourceIn)
            painter.drawImage(0, 0, buffer.image)
            painter.end()

            cropped = canvas.copy(bounds).convertToFormat(QImage.Format.Format_ARGB32)
            return RasterBuffer(cropped)

    def extract(self, buffer: Optional[RasterBuffer] = None) -> RasterBuffer:
        """
        Extract using the current mode's region, then reset for the next crop.

        Raises:
            CropError: See extract_classic / extract_freehand.
        """
        with self._lock:
            if self._mode is CropMode.CLASSIC:
                result = self.extract_classic(buffer)
            else:
                result = self.extract_freehand(buffer)

            self.clear_all()
            self._logger.info(
                f"Extracted {result.width}x{result.height} region ({self._mode.value})"
            )
            return result


def _mask_bounds(mask: QImage) -> QRect:
    """Tight bounding box of the non-transparent pixels of an ARGB32 image."""
    width = mask.width()
    height = mask.height()
    words_per_line = mask.bytesPerLine() // 4

    pixels = np.frombuffer(mask.constBits(), dtype=np.uint32)
    alpha = (pixels.reshape((height, words_per_line))[:, :width] >> 24) != 0

    rows = np.flatnonzero(alpha.any(axis=1))
    cols = np.flatnonzero(alpha.any(axis=0))
    if rows.size == 0:
        return QRect()

    return QRect(
        int(cols[0]), int(rows[0]),
        int(cols[-1] - cols[0] + 1), int(rows[-1] - rows[0] + 1),
    )
