#!/usr/bin/env python3
"""Spawn a mock host window (title bar, dock tray, full screen menu) for local TitleTool testing."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from PyQt6.QtCore import Qt, QTimer
from PyQt6.QtGui import QAction, QKeySequence
from PyQt6.QtWidgets import (
    QApplication,
    QFrame,
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QMenuBar,
    QToolBar,
    QVBoxLayout,
    QWidget,
)

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import load  # noqa: E402

DEFAULT_TITLE = "TitleTool Host (Stub)"
DEFAULT_WIDTH = 1024
DEFAULT_HEIGHT = 640


class SolutionInfoControl(QFrame):
    """Stand-in for the host's title bar info badge."""

    def __init__(self, text: str, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        layout = QHBoxLayout(self)
        layout.setContentsMargins(4, 0, 4, 0)
        label = QLabel(text, self)
        label.setObjectName("TextBorder")
        layout.addWidget(label)


class MockHostWindow(QMainWindow):
    def __init__(self, *, include_menu_anchor: bool, toolbar_delay_ms: int) -> None:
        super().__init__()
        self.setObjectName("MainWindow")
        self.setWindowTitle(DEFAULT_TITLE)
        self.resize(DEFAULT_WIDTH, DEFAULT_HEIGHT)

        central = QWidget(self)
        column = QVBoxLayout(central)
        column.setContentsMargins(0, 0, 0, 0)
        column.setSpacing(0)

        self.title_bar = QWidget(central)
        self.title_bar.setObjectName("MainWindowTitleBar")
        title_grid = QGridLayout(self.title_bar)
        title_grid.setContentsMargins(6, 0, 6, 0)
        title_grid.addWidget(QLabel("Host", self.title_bar), 0, 0)
        title_grid.addWidget(SolutionInfoControl("solution.sln", self.title_bar), 0, 3)
        title_grid.setColumnStretch(5, 1)
        column.addWidget(self.title_bar)

        self.full_screen_panel = QWidget(central)
        panel_row = QHBoxLayout(self.full_screen_panel)
        panel_row.setContentsMargins(0, 0, 0, 0)
        if include_menu_anchor:
            menu_bar = QMenuBar(self.full_screen_panel)
            menu_bar.setObjectName("PART_MainMenuBar")
            menu_bar.addMenu("&File")
            menu_bar.addMenu("&View")
            panel_row.addWidget(menu_bar)
        panel_row.addStretch(1)
        self.full_screen_panel.hide()
        column.addWidget(self.full_screen_panel)

        self.tray = QWidget(central)
        self.tray.setObjectName("TopDockTray")
        self.tray.setAutoFillBackground(True)
        tray_row = QHBoxLayout(self.tray)
        tray_row.setContentsMargins(0, 0, 0, 0)
        tray_row.addWidget(self._make_toolbar("Standard", ["New", "Open", "Save"]))
        tray_row.addStretch(1)
        column.addWidget(self.tray)

        body = QLabel("Press F11 to toggle full screen.", central)
        body.setAlignment(Qt.AlignmentFlag.AlignCenter)
        column.addWidget(body, 1)
        self.setCentralWidget(central)

        toggle = QAction("Toggle full screen", self)
        toggle.setShortcut(QKeySequence("F11"))
        toggle.triggered.connect(self.toggle_full_screen)
        self.addAction(toggle)

        if toolbar_delay_ms > 0:
            QTimer.singleShot(toolbar_delay_ms, self.add_title_toolbar)
        else:
            self.add_title_toolbar()

    def _make_toolbar(self, name: str, actions: list[str]) -> QToolBar:
        toolbar = QToolBar(name, self.tray)
        toolbar.setObjectName(name)
        for label in actions:
            toolbar.addAction(label)
        return toolbar

    def add_title_toolbar(self) -> None:
        layout = self.tray.layout()
        layout.insertWidget(layout.count() - 1, self._make_toolbar("TitleBar", ["Build", "Run", "Debug"]))

    def toggle_full_screen(self) -> None:
        entering = self.title_bar.isVisible()
        self.title_bar.setVisible(not entering)
        self.full_screen_panel.setVisible(entering)
        if entering:
            self.showFullScreen()
        else:
            self.showNormal()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Launch a mock host window and load the TitleTool plugin.")
    parser.add_argument(
        "--plugin-dir",
        default=str(PROJECT_ROOT),
        help="Directory holding title_tool_settings.json (default: %(default)s)",
    )
    parser.add_argument(
        "--toolbar-delay-ms",
        type=int,
        default=0,
        help="Add the TitleBar toolbar after this many milliseconds to exercise retries.",
    )
    parser.add_argument(
        "--no-menu-anchor",
        action="store_true",
        help="Omit the full screen menu bar anchor (primary layout only).",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging to stderr.")
    return parser


def main() -> int:
    args = build_parser().parse_args()
    logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO)

    app = QApplication(sys.argv)
    window = MockHostWindow(
        include_menu_anchor=not args.no_menu_anchor,
        toolbar_delay_ms=max(0, args.toolbar_delay_ms),
    )
    load.plugin_start(
        args.plugin_dir,
        progress=lambda message, step, total: logging.getLogger(load.PLUGIN_NAME).debug(
            "Progress %d/%d: %s", step, total, message
        ),
    )
    window.show()
    try:
        return app.exec()
    finally:
        load.plugin_stop()


if __name__ == "__main__":
    raise SystemExit(main())
