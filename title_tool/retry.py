"""Notification-driven retries while the toolbar has not been created yet."""
from __future__ import annotations

import logging
from typing import Callable, Dict, Optional

from title_tool.host import HostAdapter, HostEvent, Node, SubscriptionSet

_LOGGER = logging.getLogger("TitleTool")


class RetryCoordinator:
    """Re-runs relocation on host notifications while the toolbar is missing.

    ``retry_fn`` performs one attempt and returns True once a terminal state
    was reached, at which point every registration made here is disposed.
    """

    def __init__(self, host: HostAdapter, retry_fn: Callable[[], bool]) -> None:
        self._host = host
        self._retry_fn = retry_fn
        self._source: Optional[Node] = None
        self._watched: Dict[int, Node] = {}
        self._subscriptions = SubscriptionSet()
        self._retrying = False
        self.notifications = 0

    @property
    def active(self) -> bool:
        return self._source is not None

    @property
    def subscription_count(self) -> int:
        return len(self._subscriptions)

    def arm(self, source: Node) -> bool:
        """Watch ``source`` for changes; returns False when it is already watched."""
        if self._source is source:
            self._watch_children()
            return False
        if self._source is not None:
            _LOGGER.debug("Dock tray instance changed; re-arming retry hooks")
            self.dispose()
        self._source = source
        self._subscriptions.add(
            self._host.subscribe(source, HostEvent.LAYOUT_UPDATED, self._on_layout_updated)
        )
        self._watch_children()
        _LOGGER.debug("Retry hooks armed: %d subscriptions", self.subscription_count)
        return True

    def dispose(self) -> None:
        disposed = self._subscriptions.dispose_all()
        if disposed:
            _LOGGER.debug("Retry hooks removed: %d subscriptions", disposed)
        self._watched.clear()
        self._source = None

    def _watch_children(self) -> None:
        source = self._source
        if source is None:
            return
        for child in self._host.children(source):
            key = id(child)
            if key in self._watched:
                continue
            # Holding the node keeps its id from being reused while watched.
            self._watched[key] = child
            self._subscriptions.add(
                self._host.subscribe(child, HostEvent.VISIBILITY_CHANGED, self._on_child_visibility_changed)
            )

    def _on_layout_updated(self) -> None:
        _LOGGER.debug("Tray layout updated")
        self._retry()
        self._watch_children()

    def _on_child_visibility_changed(self) -> None:
        _LOGGER.debug("Tray child visibility changed")
        self._retry()

    def _retry(self) -> None:
        if self._retrying or self._source is None:
            return
        self.notifications += 1
        self._retrying = True
        try:
            done = self._retry_fn()
        finally:
            self._retrying = False
        if done:
            self.dispose()
