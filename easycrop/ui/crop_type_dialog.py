"""
Crop type dialog for EasyCrop.

Shown when a crop session starts; the user picks Classic or Freehand crop.
Lasso is reached from the main window's toggle once Freehand is active.
"""

from typing import Optional

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import QDialog, QHBoxLayout, QLabel, QPushButton, QVBoxLayout, QWidget

from easycrop.core.crop_engine import CropMode
from easycrop.services.logging_service import get_logger


class CropTypeDialog(QDialog):
    """
    Modal dialog offering the two base crop modes.

    The dialog cannot be dismissed without choosing; Escape and the close
    button are ignored.

    Signals:
        mode_selected: Emitted with the chosen CropMode.
    """

    mode_selected = Signal(object)

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._logger = get_logger(__name__)
        self._selected_mode: Optional[CropMode] = None

        self.setWindowTitle("Choose crop type")
        self.setModal(True)
        self.setWindowFlag(Qt.WindowType.WindowCloseButtonHint, False)

        layout = QVBoxLayout(self)
        layout.addWidget(QLabel("How would you like to crop?"))

        buttons = QHBoxLayout()
        self._classic_button = QPushButton("Classic")
        self._classic_button.setToolTip("Drag out a rectangle")
        self._classic_button.clicked.connect(lambda: self._choose(CropMode.CLASSIC))
        buttons.addWidget(self._classic_button)

        self._freehand_button = QPushButton("Freehand")
        self._freehand_button.setToolTip("Draw around the area to keep")
        self._freehand_button.clicked.connect(lambda: self._choose(CropMode.FREEHAND))
        buttons.addWidget(self._freehand_button)

        layout.addLayout(buttons)

    @property
    def selected_mode(self) -> Optional[CropMode]:
        return self._selected_mode

    def _choose(self, mode: CropMode) -> None:
        self._selected_mode = mode
        self._logger.debug(f"Crop type selected: {mode.value}")
        self.mode_selected.emit(mode)
        self.accept()

    def reject(self) -> None:
        # Not cancelable
        pass
