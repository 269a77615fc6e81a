from __future__ import annotations

import os

import pytest

PYQT_ENV_VAR = "PYQT_TESTS"


def pytest_configure(config):
    if os.getenv(PYQT_ENV_VAR):
        # Widget tests run without a display.
        os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


def pytest_runtest_setup(item):
    if item.get_closest_marker("pyqt_required") and not os.getenv(PYQT_ENV_VAR):
        pytest.skip(f"{PYQT_ENV_VAR} not set; skipping widget test")
