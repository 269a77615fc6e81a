"""Primary entry point for the TitleTool plugin."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Optional

from title_tool.bootstrap import ProgressFn, RelocationBootstrap
from title_tool.errors import InvalidArgument
from title_tool.host import HostAdapter
from title_tool.logging_utils import (
    ActivityLog,
    LogSink,
    attach_trace_file,
    configure_logger,
    resolve_logs_dir,
)
from title_tool.relocation import MoveState, RelocationEngine
from title_tool.settings import RelocatorSettings
from title_tool.version import __version__ as TITLE_TOOL_VERSION

PLUGIN_NAME = "TitleTool"
PLUGIN_VERSION = TITLE_TOOL_VERSION

LOGGER = configure_logger()


def _log(message: str) -> None:
    """Log to the host via the Python logging facade."""
    LOGGER.info(message)


class _LoggerSink:
    """Activity log sink writing to the plugin logger."""

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    def info(self, message: str) -> None:
        self._logger.info(message)

    def error(self, message: str) -> None:
        self._logger.error(message)


class _PluginRuntime:
    """Encapsulates plugin state so host globals stay tidy."""

    def __init__(
        self,
        plugin_dir: str,
        settings: RelocatorSettings,
        *,
        host: Optional[HostAdapter] = None,
        root_provider: Optional[Callable[[], Optional[Any]]] = None,
        log_sink: Optional[LogSink] = None,
        progress: Optional[ProgressFn] = None,
    ) -> None:
        self.plugin_dir = Path(plugin_dir)
        self._settings = settings
        self._host = host
        self._root_provider = root_provider
        self._log_sink = log_sink if log_sink is not None else _LoggerSink(LOGGER)
        self._progress = progress
        self.engine: Optional[RelocationEngine] = None
        self.bootstrap: Optional[RelocationBootstrap] = None

    # Lifecycle ------------------------------------------------------------

    def start(self) -> MoveState:
        if self.bootstrap is not None:
            return self.bootstrap.start()
        if not self._settings.enabled:
            _log("Toolbar relocation disabled in settings")
            return MoveState.UNRESOLVED
        host, root_provider = self._resolve_host()
        self.engine = RelocationEngine(
            host,
            root_provider,
            profile=self._settings.profile,
            placement=self._settings.placement(),
            activity_log=ActivityLog(self._log_sink, logger=LOGGER),
        )
        self.bootstrap = RelocationBootstrap(host, self.engine, root_provider, progress=self._progress)
        return self.bootstrap.start()

    def run(self) -> MoveState:
        if self.engine is None or self.bootstrap is None:
            return self.start()
        if self.bootstrap.pending:
            return self.engine.state
        return self.engine.run()

    def stop(self) -> None:
        if self.bootstrap is not None:
            self.bootstrap.cancel()
        if self.engine is not None:
            self.engine.shutdown()
            LOGGER.debug("Relocation hooks removed (state=%s)", self.engine.state.value)
        self.bootstrap = None
        self.engine = None

    @property
    def state(self) -> MoveState:
        return self.engine.state if self.engine is not None else MoveState.UNRESOLVED

    # Helpers --------------------------------------------------------------

    def _resolve_host(self) -> tuple[HostAdapter, Callable[[], Optional[Any]]]:
        if self._host is not None and self._root_provider is not None:
            return self._host, self._root_provider
        if self._host is not None or self._root_provider is not None:
            raise InvalidArgument("host and root_provider must be injected together")
        from title_tool.qt_host import QtHostAdapter, find_main_window

        return QtHostAdapter(), find_main_window


_plugin: Optional[_PluginRuntime] = None
_settings: Optional[RelocatorSettings] = None


def _configure_trace_file(settings: RelocatorSettings) -> None:
    if not settings.debug_logging:
        return
    try:
        handler = attach_trace_file(LOGGER, resolve_logs_dir(), retention=settings.log_retention)
    except OSError as exc:
        LOGGER.warning("Unable to open trace log: %s", exc)
        return
    LOGGER.debug("Trace log enabled at %s", getattr(handler, "baseFilename", "?"))


def plugin_start(
    plugin_dir: str,
    *,
    host: Optional[HostAdapter] = None,
    root_provider: Optional[Callable[[], Optional[Any]]] = None,
    log_sink: Optional[LogSink] = None,
    progress: Optional[ProgressFn] = None,
) -> str:
    global _plugin, _settings
    if _plugin is not None:
        return PLUGIN_NAME
    _settings = RelocatorSettings(Path(plugin_dir))
    configure_logger(debug=_settings.debug_logging)
    _configure_trace_file(_settings)
    _log(f"Initialising {PLUGIN_NAME} {PLUGIN_VERSION} from {plugin_dir}")
    _plugin = _PluginRuntime(
        plugin_dir,
        _settings,
        host=host,
        root_provider=root_provider,
        log_sink=log_sink,
        progress=progress,
    )
    try:
        _plugin.start()
    except Exception as exc:
        LOGGER.exception("Failed to start toolbar relocation: %s", exc)
    return PLUGIN_NAME


def run_relocation() -> MoveState:
    """Idempotent: returns the cached outcome once placed or impossible."""
    if _plugin is None:
        LOGGER.debug("run_relocation called before plugin_start")
        return MoveState.UNRESOLVED
    try:
        return _plugin.run()
    except Exception as exc:
        LOGGER.exception("Toolbar relocation raised: %s", exc)
        return _plugin.state


def plugin_stop() -> None:
    global _plugin, _settings
    if _plugin:
        try:
            _plugin.stop()
        finally:
            _plugin = None
    _settings = None


# Metadata expected by some plugin loaders
name = PLUGIN_NAME
version = PLUGIN_VERSION
