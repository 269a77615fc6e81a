"""PyQt6 binding of the host tree interface.

Notifications are delivered through event filters installed on the watched
widgets, so every callback runs on the GUI thread inside Qt's event dispatch.
"""
from __future__ import annotations

import logging
from typing import Callable, List, Optional

from PyQt6 import sip
from PyQt6.QtCore import QEvent, QObject
from PyQt6.QtWidgets import QApplication, QGridLayout, QHBoxLayout, QMainWindow, QToolBar, QWidget

from title_tool.host import GridSlot, HostEvent, Margins, Subscription

_LOGGER = logging.getLogger("TitleTool")

WRAPPER_OBJECT_NAME = "TitleToolWrapper"

_LAYOUT_EVENTS = {
    QEvent.Type.LayoutRequest,
    QEvent.Type.Resize,
    QEvent.Type.ChildAdded,
    QEvent.Type.ChildRemoved,
}


class _EventRelay(QObject):
    """Event filter translating Qt events into a single host notification."""

    def __init__(self, widget: QWidget, event: HostEvent, callback: Callable[[], None]) -> None:
        super().__init__(widget)
        self._event = event
        self._callback = callback
        self._last_visible = widget.isVisible()

    def eventFilter(self, watched: QObject, event: QEvent) -> bool:  # type: ignore[override]
        etype = event.type()
        if self._event is HostEvent.VISIBILITY_CHANGED:
            if etype in (QEvent.Type.Show, QEvent.Type.Hide) and isinstance(watched, QWidget):
                visible = watched.isVisible()
                if visible != self._last_visible:
                    self._last_visible = visible
                    self._dispatch()
        elif self._event is HostEvent.LAYOUT_UPDATED:
            if etype in _LAYOUT_EVENTS:
                self._dispatch()
        elif self._event is HostEvent.LOADED:
            if etype == QEvent.Type.Show:
                self._dispatch()
        return False

    def _dispatch(self) -> None:
        try:
            self._callback()
        except Exception:
            _LOGGER.exception("Handler for %s notification failed", self._event.value)


class QtHostAdapter:
    """Host adapter over a live QWidget tree."""

    def children(self, node: QWidget) -> List[QWidget]:
        return [child for child in node.children() if isinstance(child, QWidget)]

    def type_name(self, node: QWidget) -> str:
        return node.metaObject().className()

    def name(self, node: QWidget) -> Optional[str]:
        return node.objectName() or None

    def is_visible(self, node: QWidget) -> bool:
        return node.isVisible()

    def is_loaded(self, node: QWidget) -> bool:
        return node.isVisible()

    def width(self, node: QWidget) -> float:
        return float(node.width())

    def parent(self, node: QWidget) -> Optional[QWidget]:
        return node.parentWidget()

    def create_wrapper(self, source: QWidget) -> QWidget:
        wrapper = QWidget()
        wrapper.setObjectName(WRAPPER_OBJECT_NAME)
        layout = QHBoxLayout(wrapper)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)
        # Keep the tray background; toolbar hover effects paint against it.
        wrapper.setPalette(source.palette())
        wrapper.setAutoFillBackground(source.autoFillBackground())
        return wrapper

    def detach(self, node: QWidget, container: QWidget) -> None:
        if isinstance(container, QMainWindow) and isinstance(node, QToolBar):
            container.removeToolBar(node)
        else:
            layout = container.layout()
            if layout is not None:
                layout.removeWidget(node)
        node.setParent(None)

    def attach(self, node: QWidget, container: QWidget, slot: Optional[GridSlot] = None) -> None:
        layout = container.layout()
        if isinstance(layout, QGridLayout) and slot is not None:
            layout.addWidget(node, slot[0], slot[1])
        elif layout is not None:
            layout.addWidget(node)
        else:
            node.setParent(container)
        node.show()

    def set_margins(self, node: QWidget, margins: Margins) -> None:
        node.setContentsMargins(margins.left, margins.top, margins.right, margins.bottom)

    def set_visible(self, node: QWidget, visible: bool) -> None:
        node.setVisible(visible)

    def apply_control_fixups(self, control: QWidget) -> None:
        if isinstance(control, QToolBar):
            # A fixed toolbar has no drag handle and cannot be torn off.
            control.setMovable(False)
            control.setFloatable(False)
        control.setContentsMargins(0, 0, 0, 0)

    def subscribe(self, node: QWidget, event: HostEvent, callback: Callable[[], None]) -> Subscription:
        relay = _EventRelay(node, event, callback)
        node.installEventFilter(relay)

        def _dispose() -> None:
            if sip.isdeleted(node) or sip.isdeleted(relay):
                return
            node.removeEventFilter(relay)
            relay.deleteLater()

        return Subscription(_dispose, label=f"{event.value}:{node.objectName() or self.type_name(node)}")


def find_main_window(object_name: Optional[str] = None) -> Optional[QWidget]:
    """Locate the application's main window among the top-level widgets."""
    app = QApplication.instance()
    if app is None:
        return None
    candidates = [widget for widget in QApplication.topLevelWidgets() if isinstance(widget, QMainWindow)]
    if object_name:
        candidates = [widget for widget in candidates if widget.objectName().casefold() == object_name.casefold()]
    active = QApplication.activeWindow()
    if active in candidates:
        return active
    return candidates[0] if candidates else None
