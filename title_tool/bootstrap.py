"""Starts relocation once the host main window has loaded."""
from __future__ import annotations

import logging
from typing import Callable, Optional

from title_tool.host import HostAdapter, HostEvent, Node, Subscription
from title_tool.relocation import MoveState, RelocationEngine

_LOGGER = logging.getLogger("TitleTool")

ProgressFn = Callable[[str, int, int], None]
TOTAL_STEPS = 2


class RelocationBootstrap:
    """Runs the engine once the host's main surface exists.

    The wait for the main surface to load is the only cancellable phase;
    everything after that is driven by host notifications.
    """

    def __init__(
        self,
        host: HostAdapter,
        engine: RelocationEngine,
        root_provider: Callable[[], Optional[Node]],
        *,
        progress: Optional[ProgressFn] = None,
    ) -> None:
        self._host = host
        self._engine = engine
        self._root_provider = root_provider
        self._progress = progress
        self._pending: Optional[Subscription] = None
        self._started = False

    @property
    def pending(self) -> bool:
        return self._pending is not None and self._pending.active

    @property
    def state(self) -> MoveState:
        return self._engine.state

    def start(self) -> MoveState:
        if self._started:
            return self._engine.state
        self._started = True
        self._report("Initializing", 0)
        root = self._root_provider()
        self._report("On main thread", 1)
        if root is None:
            _LOGGER.debug("Main window not available yet; relocation not started")
            self._started = False
            return self._engine.state
        if self._host.is_loaded(root):
            return self._run("Direct")
        _LOGGER.debug("Main window not loaded yet; deferring toolbar move")
        self._pending = self._host.subscribe(root, HostEvent.LOADED, self._on_loaded)
        return self._engine.state

    def cancel(self) -> bool:
        pending = self._pending
        if pending is None or not pending.active:
            return False
        pending.dispose()
        self._pending = None
        _LOGGER.debug("Deferred toolbar move cancelled")
        return True

    def _on_loaded(self) -> None:
        if self._pending is not None:
            self._pending.dispose()
            self._pending = None
        self._run("Deferred")

    def _run(self, kind: str) -> MoveState:
        _LOGGER.debug("Main window loaded %s - moving toolbar", kind)
        state = self._engine.run()
        self._report(f"{kind} Completion", TOTAL_STEPS)
        return state

    def _report(self, message: str, step: int) -> None:
        if self._progress is None:
            return
        try:
            self._progress(message, step, TOTAL_STEPS)
        except Exception:
            _LOGGER.debug("Progress callback failed for %r", message, exc_info=True)
