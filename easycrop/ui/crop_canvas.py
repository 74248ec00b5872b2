"""
Crop canvas widget for EasyCrop.

The CropCanvas is the interactive drawing area. It displays:
- The scaled raster, centred on a plain background
- Live crop feedback: a dashed rectangle (Classic), dashed strokes
  (Freehand) or a translucent wash (Lasso)

Mouse input is forwarded to the CropEngine; the canvas keeps no crop
state of its own.
"""

from typing import Optional

from PySide6.QtCore import QPointF, Qt, Signal
from PySide6.QtGui import QColor, QMouseEvent, QPainter, QPen
from PySide6.QtWidgets import QWidget

from easycrop.core.crop_engine import CropEngine, PointerPhase, RenderStyle
from easycrop.core.raster_buffer import RasterBuffer
from easycrop.services.config_service import ConfigService
from easycrop.services.logging_service import get_logger


class CropCanvas(QWidget):
    """
    Canvas widget that renders the raster and routes pointer events.

    Signals:
        interaction_started: Emitted when an accepted press begins a stroke.
        interaction_finished: Emitted with has_active_region on release.
        canvas_resized: Emitted with the new (width, height).
    """

    interaction_started = Signal()
    interaction_finished = Signal(bool)
    canvas_resized = Signal(int, int)

    OVERLAY_COLOR = QColor(255, 255, 255)

    def __init__(
        self,
        engine: CropEngine,
        config: Optional[ConfigService] = None,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self._logger = get_logger(__name__)
        self._engine = engine

        background = config.background_color if config else "#ffffff"
        stroke_width = config.crop_stroke_width if config else 5
        dash_pattern = config.crop_dash_pattern if config else [10, 20]
        lasso_alpha = config.lasso_alpha if config else 80
        self._edge_margin = config.edge_gesture_margin if config else 50

        self._background_color = QColor(background)

        self._crop_pen = QPen(self.OVERLAY_COLOR, stroke_width)
        self._crop_pen.setCapStyle(Qt.PenCapStyle.RoundCap)
        self._crop_pen.setJoinStyle(Qt.PenJoinStyle.RoundJoin)
        # Qt dash lengths are in units of the pen width
        self._crop_pen.setDashPattern([d / max(1, stroke_width) for d in dash_pattern])

        self._lasso_color = QColor(self.OVERLAY_COLOR)
        self._lasso_color.setAlpha(lasso_alpha)

        # Whether the current press was accepted (not an edge gesture)
        self._tracking = False

        self.setMouseTracking(False)
        self.setMinimumSize(200, 200)
        self.setCursor(Qt.CursorShape.CrossCursor)

    @property
    def engine(self) -> CropEngine:
        return self._engine

    # ─── State ────────────────────────────────────────────────────────────

    def set_raster(self, buffer: Optional[RasterBuffer]) -> None:
        """Show a new scaled raster; any drawn region is discarded."""
        self._engine.set_raster(buffer)
        self._engine.layout(self.width(), self.height())
        self.update()

    def clear_canvas(self) -> None:
        """Drop every drawn region and stroke."""
        self._engine.clear_all()
        self.update()

    # ─── Painting ─────────────────────────────────────────────────────────

    def paintEvent(self, event) -> None:
        """Paint background, raster and crop overlay."""
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        painter.fillRect(self.rect(), self._background_color)

        left, top = self._engine.layout(self.width(), self.height())
        raster = self._engine.raster
        if raster is not None:
            painter.drawImage(left, top, raster.image)

        self._draw_overlay(painter)
        painter.end()

    def _draw_overlay(self, painter: QPainter) -> None:
        style = self._engine.render_style

        if style is RenderStyle.RECTANGLE_OUTLINE:
            rect = self._engine.overlay_rect()
            if rect is not None:
                painter.setPen(self._crop_pen)
                painter.setBrush(Qt.BrushStyle.NoBrush)
                painter.drawRect(rect)
            return

        for path in self._engine.overlay_paths():
            if style is RenderStyle.TINTED_WASH:
                painter.fillPath(path, self._lasso_color)
            else:
                painter.setPen(self._crop_pen)
                painter.setBrush(Qt.BrushStyle.NoBrush)
                painter.drawPath(path)

    # ─── Input ────────────────────────────────────────────────────────────

    def _is_edge_gesture(self, pos: QPointF) -> bool:
        """Presses hugging the left/right edge belong to system gestures."""
        return not (self._edge_margin < pos.x() < self.width() - self._edge_margin)

    def mousePressEvent(self, event: QMouseEvent) -> None:
        """Start a crop stroke."""
        if event.button() != Qt.MouseButton.LeftButton:
            super().mousePressEvent(event)
            return

        pos = event.position()
        if self._is_edge_gesture(pos):
            self._tracking = False
            event.ignore()
            return

        self._tracking = True
        self.interaction_started.emit()
        if self._engine.route_event(PointerPhase.DOWN, pos):
            self.update()

    def mouseMoveEvent(self, event: QMouseEvent) -> None:
        """Extend the crop stroke."""
        if not self._tracking:
            return
        if self._engine.route_event(PointerPhase.MOVE, event.position()):
            self.update()

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        """Finish the crop stroke."""
        if event.button() != Qt.MouseButton.LeftButton or not self._tracking:
            return

        self._tracking = False
        if self._engine.route_event(PointerPhase.UP, event.position()):
            self.update()
        self.interaction_finished.emit(self._engine.has_active_region())

    def resizeEvent(self, event) -> None:
        super().resizeEvent(event)
        self._engine.layout(self.width(), self.height())
        self.canvas_resized.emit(self.width(), self.height())
