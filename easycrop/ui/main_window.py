"""
Main window for EasyCrop.

This module contains the crop window: a toolbar with the crop actions,
the CropCanvas in the centre and a status bar for feedback. Loading,
rotating and flipping go through the ImageSession; region drawing and
extraction go through the CropEngine.
"""

from pathlib import Path
from typing import Optional, Union

from PySide6.QtCore import Qt, Slot
from PySide6.QtGui import QAction, QKeySequence
from PySide6.QtWidgets import (
    QFileDialog,
    QGraphicsOpacityEffect,
    QMainWindow,
    QMessageBox,
    QToolBar,
    QWidget,
)

from easycrop.core.crop_engine import CropEngine, CropMode
from easycrop.core.errors import CropError, ImageLoadError
from easycrop.core.image_session import ImageSession
from easycrop.services.config_service import ConfigService
from easycrop.services.logging_service import get_logger
from easycrop.ui.crop_canvas import CropCanvas
from easycrop.ui.crop_type_dialog import CropTypeDialog
from easycrop.ui.result_dialog import ResultDialog

IMAGE_FILTER = "Images (*.png *.jpg *.jpeg *.bmp *.gif *.webp)"
EMPTY_SELECTION_MESSAGE = "Please select an area to crop"


class MainWindow(QMainWindow):
    """
    Main application window for EasyCrop.

    Features:
    - Toolbar with Open, Crop, Rotate, Flip, Lasso and Clear
    - Crop canvas showing the image and the live selection
    - Status bar for crop feedback

    The toolbar is faded out while a Freehand or Lasso stroke is in progress
    and restored when the stroke ends.
    """

    def __init__(
        self,
        config_service: Optional[ConfigService] = None,
        parent: Optional[QWidget] = None
    ) -> None:
        """
        Initialize the MainWindow.

        Args:
            config_service: Optional config service for crop settings.
            parent: Optional parent widget.
        """
        super().__init__(parent)
        self._logger = get_logger(__name__)
        self._config = config_service

        self._session = ImageSession()
        if config_service:
            self._engine = CropEngine.from_config(config_service)
        else:
            self._engine = CropEngine()
        self._canvas = CropCanvas(self._engine, config_service, self)

        self._setup_window()
        self._setup_toolbar()
        self.setCentralWidget(self._canvas)
        self.statusBar()
        self._connect_signals()
        self._update_lasso_action()

        self._logger.info("MainWindow initialized")

    def _setup_window(self) -> None:
        """Configure main window properties."""
        self.setWindowTitle("EasyCrop")
        self.setMinimumSize(480, 480)
        self.resize(900, 700)

    def _setup_toolbar(self) -> None:
        """Create the crop toolbar."""
        self._toolbar = QToolBar("Crop")
        self._toolbar.setMovable(False)
        self.addToolBar(Qt.ToolBarArea.TopToolBarArea, self._toolbar)

        # Faded rather than hidden so the canvas keeps its size mid-stroke
        self._toolbar_effect = QGraphicsOpacityEffect(self._toolbar)
        self._toolbar_effect.setOpacity(1.0)
        self._toolbar.setGraphicsEffect(self._toolbar_effect)

        self._open_action = QAction("Open", self)
        self._open_action.setShortcut(QKeySequence.StandardKey.Open)
        self._open_action.setStatusTip("Open an image")
        self._open_action.triggered.connect(self._on_open)
        self._toolbar.addAction(self._open_action)

        self._toolbar.addSeparator()

        self._crop_action = QAction("Crop", self)
        self._crop_action.setShortcut(Qt.Key.Key_Return)
        self._crop_action.setStatusTip("Crop the selected area")
        self._crop_action.triggered.connect(self._on_crop)
        self._toolbar.addAction(self._crop_action)

        self._rotate_action = QAction("Rotate", self)
        self._rotate_action.setShortcut("R")
        self._rotate_action.setStatusTip("Rotate 90° clockwise")
        self._rotate_action.triggered.connect(self._on_rotate)
        self._toolbar.addAction(self._rotate_action)

        self._flip_action = QAction("Flip", self)
        self._flip_action.setShortcut("F")
        self._flip_action.setStatusTip("Mirror the image")
        self._flip_action.triggered.connect(self._on_flip)
        self._toolbar.addAction(self._flip_action)

        self._lasso_action = QAction("Lasso", self)
        self._lasso_action.setCheckable(True)
        self._lasso_action.setShortcut("L")
        self._lasso_action.setStatusTip("Toggle the filled lasso selection")
        self._lasso_action.triggered.connect(self._on_lasso)
        self._toolbar.addAction(self._lasso_action)

        self._toolbar.addSeparator()

        self._clear_action = QAction("Clear", self)
        self._clear_action.setStatusTip("Discard the current selection")
        self._clear_action.triggered.connect(self._canvas.clear_canvas)
        self._toolbar.addAction(self._clear_action)

    def _connect_signals(self) -> None:
        self._canvas.interaction_started.connect(self._on_interaction_started)
        self._canvas.interaction_finished.connect(self._on_interaction_finished)
        self._canvas.canvas_resized.connect(self._on_canvas_resized)

    # ─── Public Methods ───────────────────────────────────────────────────

    @property
    def engine(self) -> CropEngine:
        return self._engine

    @property
    def session(self) -> ImageSession:
        return self._session

    @property
    def canvas(self) -> CropCanvas:
        return self._canvas

    def load_image(self, path: Union[str, Path]) -> bool:
        """
        Load an image file into the crop canvas.

        Returns:
            True if the image was loaded.
        """
        try:
            self._session.load(path)
        except ImageLoadError as e:
            self._logger.error(str(e))
            QMessageBox.warning(self, "Cannot open image", str(e))
            return False

        self._refresh_raster()
        self.setWindowTitle(f"EasyCrop - {Path(path).name}")
        return True

    def set_mode(self, mode: CropMode) -> CropMode:
        """Switch the crop mode and sync the toolbar."""
        selected = self._engine.set_mode(mode)
        self._update_lasso_action()
        self._canvas.update()
        return selected

    def ask_crop_mode(self) -> None:
        """Show the crop type dialog unless a default mode is configured."""
        if self._config and self._config.default_crop_mode:
            return
        dialog = CropTypeDialog(self)
        dialog.mode_selected.connect(self.set_mode)
        dialog.exec()

    # ─── Actions ──────────────────────────────────────────────────────────

    def _on_open(self) -> None:
        filepath, _ = QFileDialog.getOpenFileName(self, "Open Image", "", IMAGE_FILTER)
        if filepath:
            self.load_image(filepath)

    def _on_crop(self) -> None:
        try:
            result = self._engine.extract()
        except CropError as e:
            self._logger.warning(f"Crop failed: {e}")
            self.statusBar().showMessage(EMPTY_SELECTION_MESSAGE, 3000)
            return

        self._canvas.update()
        dialog = ResultDialog(result.image, self._config, self)
        dialog.exec()

    def _on_rotate(self) -> None:
        if not self._session.has_image:
            return
        self._session.rotate(self._canvas.width(), self._canvas.height())
        self._canvas.set_raster(self._session.scaled)

    def _on_flip(self) -> None:
        if not self._session.has_image:
            return
        self._session.flip(self._canvas.width(), self._canvas.height())
        self._canvas.set_raster(self._session.scaled)

    def _on_lasso(self) -> None:
        self.set_mode(CropMode.LASSO)

    def _update_lasso_action(self) -> None:
        mode = self._engine.mode
        self._lasso_action.setVisible(mode is not CropMode.CLASSIC)
        self._lasso_action.setChecked(mode is CropMode.LASSO)

    def _refresh_raster(self) -> None:
        if not self._session.has_image:
            return
        self._session.rescale(self._canvas.width(), self._canvas.height())
        self._canvas.set_raster(self._session.scaled)

    # ─── Canvas Signals ───────────────────────────────────────────────────

    @Slot()
    def _on_interaction_started(self) -> None:
        if self._engine.mode is not CropMode.CLASSIC:
            self._set_toolbar_shown(False)

    @Slot(bool)
    def _on_interaction_finished(self, has_region: bool) -> None:
        self._set_toolbar_shown(True)
        if has_region:
            self.statusBar().clearMessage()

    def _set_toolbar_shown(self, shown: bool) -> None:
        self._toolbar_effect.setOpacity(1.0 if shown else 0.0)
        self._toolbar.setEnabled(shown)

    @Slot(int, int)
    def _on_canvas_resized(self, width: int, height: int) -> None:
        self._refresh_raster()

    # ─── Key Events ───────────────────────────────────────────────────────

    def keyPressEvent(self, event) -> None:
        """Escape clears the selection first, then closes the window."""
        if event.key() == Qt.Key.Key_Escape:
            if self._engine.has_active_region():
                self._canvas.clear_canvas()
            else:
                self.close()
            return
        super().keyPressEvent(event)

    def closeEvent(self, event) -> None:
        self._logger.info("MainWindow closing")
        super().closeEvent(event)
