import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]

# Make the package importable without an editable install.
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


@pytest.fixture(scope="session")
def qapp():
    QApplication = pytest.importorskip(
        "PySide6.QtWidgets", reason="Qt widgets not available", exc_type=ImportError
    ).QApplication
    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    yield app
