"""
Result dialog for EasyCrop.

Previews the cropped image and saves it as a PNG into the configured
save folder.
"""

from datetime import datetime
from pathlib import Path
from typing import Optional

from PySide6.QtCore import Qt
from PySide6.QtGui import QImage, QPixmap
from PySide6.QtWidgets import (
    QDialog,
    QHBoxLayout,
    QLabel,
    QMessageBox,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from easycrop.services.config_service import DEFAULT_CONFIG, ConfigService
from easycrop.services.logging_service import get_logger

logger = get_logger(__name__)

PREVIEW_SIZE = 640


def save_image(image: QImage, folder: Path) -> Optional[Path]:
    """
    Write `image` to `folder` as image_<milliseconds>.png.

    Returns:
        The written path, or None if the image could not be saved.
    """
    try:
        folder.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error(f"Could not create save folder {folder}: {e}")
        return None

    filename = f"image_{int(datetime.now().timestamp() * 1000)}.png"
    filepath = folder / filename

    if image.save(str(filepath), "PNG"):
        logger.info(f"Saved cropped image to {filepath}")
        return filepath

    logger.error(f"Failed to save to {filepath}")
    return None


class ResultDialog(QDialog):
    """Shows a cropped image with a Save button."""

    def __init__(
        self,
        image: QImage,
        config: Optional[ConfigService] = None,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self._image = image
        self._config = config
        self._saved_path: Optional[Path] = None

        self.setWindowTitle(f"Cropped image ({image.width()} × {image.height()})")
        self._setup_ui()

    def _setup_ui(self) -> None:
        layout = QVBoxLayout(self)

        preview = QLabel()
        preview.setAlignment(Qt.AlignmentFlag.AlignCenter)
        pixmap = QPixmap.fromImage(self._image)
        if pixmap.width() > PREVIEW_SIZE or pixmap.height() > PREVIEW_SIZE:
            pixmap = pixmap.scaled(
                PREVIEW_SIZE, PREVIEW_SIZE,
                Qt.AspectRatioMode.KeepAspectRatio,
                Qt.TransformationMode.SmoothTransformation,
            )
        preview.setPixmap(pixmap)
        layout.addWidget(preview)

        buttons = QHBoxLayout()
        buttons.addStretch()
        self._save_button = QPushButton("Save")
        self._save_button.clicked.connect(self._on_save)
        buttons.addWidget(self._save_button)

        close_button = QPushButton("Close")
        close_button.clicked.connect(self.accept)
        buttons.addWidget(close_button)
        layout.addLayout(buttons)

    @property
    def saved_path(self) -> Optional[Path]:
        return self._saved_path

    def _on_save(self) -> None:
        if self._config:
            folder = Path(self._config.default_save_folder)
        else:
            folder = Path(DEFAULT_CONFIG["default_save_folder"])

        self._saved_path = save_image(self._image, folder)
        if self._saved_path is None:
            QMessageBox.warning(self, "Save failed", f"Could not save to {folder}")
            return

        self._save_button.setEnabled(False)
        self._save_button.setText("Saved")
