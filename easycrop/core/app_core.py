"""
Application core for EasyCrop.

This module contains the AppCore class which is responsible for:
- Initializing the services (config, logging)
- Applying the application palette
- Creating the main window and opening the requested image
- Asking for the crop type when no default is configured
"""

from pathlib import Path
from typing import Optional, Union

from PySide6.QtCore import QObject
from PySide6.QtGui import QColor, QPalette
from PySide6.QtWidgets import QApplication

from easycrop.services.config_service import ConfigService
from easycrop.services.logging_service import get_logger, set_log_level, setup_logging
from easycrop.ui.main_window import MainWindow


class AppCore(QObject):
    """
    Central application core that wires together all components.

    Responsibilities:
    - Initialize services
    - Apply the global palette
    - Create and show the MainWindow
    """

    def __init__(
        self,
        app: QApplication,
        image_path: Optional[Union[str, Path]] = None,
        config_service: Optional[ConfigService] = None,
    ) -> None:
        """
        Initialize the application core.

        Args:
            app: The QApplication instance.
            image_path: Optional image to open on start.
            config_service: Optional config service (a default one is created).
        """
        super().__init__()
        self._app = app
        self._image_path = image_path

        self._config_service: Optional[ConfigService] = config_service
        self._main_window: Optional[MainWindow] = None

        self._init_services()
        self._apply_palette()
        self._init_ui()

    def _init_services(self) -> None:
        """Initialize all application services."""
        setup_logging()
        self._logger = get_logger(__name__)
        self._logger.info("Initializing EasyCrop application core...")

        if self._config_service is None:
            self._config_service = ConfigService()
        set_log_level(self._config_service.log_level)
        self._logger.info(
            f"Edge clamp policy from config: {self._config_service.edge_clamp_policy}"
        )

    def _apply_palette(self) -> None:
        """Apply a neutral dark palette around the white crop canvas."""
        palette = QPalette()
        palette.setColor(QPalette.ColorRole.Window, QColor(45, 45, 45))
        palette.setColor(QPalette.ColorRole.WindowText, QColor(220, 220, 220))
        palette.setColor(QPalette.ColorRole.Base, QColor(35, 35, 35))
        palette.setColor(QPalette.ColorRole.Text, QColor(220, 220, 220))
        palette.setColor(QPalette.ColorRole.Button, QColor(55, 55, 55))
        palette.setColor(QPalette.ColorRole.ButtonText, QColor(220, 220, 220))
        palette.setColor(QPalette.ColorRole.Highlight, QColor(80, 120, 180))
        palette.setColor(QPalette.ColorRole.HighlightedText, QColor(255, 255, 255))
        palette.setColor(
            QPalette.ColorGroup.Disabled,
            QPalette.ColorRole.ButtonText,
            QColor(127, 127, 127)
        )
        self._app.setPalette(palette)
        self._logger.debug("Palette applied")

    def _init_ui(self) -> None:
        """Create the main window and load the start image, if any."""
        self._main_window = MainWindow(self._config_service)
        self._main_window.show()

        if self._image_path:
            self._main_window.load_image(self._image_path)

        self._main_window.ask_crop_mode()
        self._logger.info("Main window shown")

    # ─── Properties ───────────────────────────────────────────────────────

    @property
    def config(self) -> ConfigService:
        """Get the configuration service."""
        if self._config_service is None:
            raise RuntimeError("ConfigService not initialized")
        return self._config_service

    @property
    def main_window(self) -> MainWindow:
        """Get the main window."""
        if self._main_window is None:
            raise RuntimeError("MainWindow not initialized")
        return self._main_window

    def shutdown(self) -> None:
        """Close the window and quit."""
        self._logger.info("Shutting down EasyCrop...")
        if self._main_window:
            self._main_window.close()
        QApplication.quit()
