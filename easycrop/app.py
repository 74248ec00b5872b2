"""
EasyCrop - Classic, freehand and lasso image cropping.

This is the main entry point for the application.
Run with: python -m easycrop.app [IMAGE]
"""

import signal
import sys
from typing import Optional

from PySide6.QtCore import QTimer
from PySide6.QtWidgets import QApplication

from easycrop import __version__
from easycrop.core.app_core import AppCore
from easycrop.services.logging_service import get_logger, setup_logging


# Global app reference for signal handlers
_app: Optional[QApplication] = None
_app_core: Optional[AppCore] = None
_should_quit = False


def request_quit(signum, frame):
    """Handle termination signals."""
    global _should_quit
    _should_quit = True


def check_for_quit():
    """Timer callback to check if we should quit."""
    if _should_quit:
        get_logger(__name__).info("Signal received, quitting...")
        if _app_core:
            _app_core.shutdown()
        elif _app:
            _app.quit()


def main() -> int:
    """
    Main entry point for EasyCrop.

    Returns:
        Exit code (0 for success, non-zero for error).
    """
    global _app, _app_core

    setup_logging()
    logger = get_logger(__name__)

    try:
        logger.info("Starting EasyCrop...")

        _app = QApplication(sys.argv)
        _app.setApplicationName("EasyCrop")
        _app.setOrganizationName("EasyCrop")
        _app.setApplicationVersion(__version__)

        signal.signal(signal.SIGINT, request_quit)
        signal.signal(signal.SIGTERM, request_quit)

        # Timer to poll for quit signal (Qt event loop blocks Python signals)
        quit_timer = QTimer()
        quit_timer.timeout.connect(check_for_quit)
        quit_timer.start(100)

        args = _app.arguments()[1:]
        image_path = args[0] if args else None

        _app_core = AppCore(_app, image_path)

        logger.info("EasyCrop initialization complete. Entering event loop...")
        exit_code = _app.exec()

        logger.info(f"EasyCrop exiting with code {exit_code}")
        return exit_code

    except Exception as e:
        logger.critical(f"Fatal error during startup: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
