from __future__ import annotations

import importlib
import logging
import os
import tempfile
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional, Protocol

LOGGER_NAME = "TitleTool"
LOG_TAG = "TitleTool"
LOG_DIR_ENV_VAR = "TITLE_TOOL_LOG_DIR"
TRACE_LOG_FILE = "title_tool.log"
HOST_DEFAULT_LOG_LEVEL = logging.INFO


def _load_host_config_module() -> Optional[Any]:
    try:
        return importlib.import_module("config")
    except Exception:
        return None


def _resolve_host_logger() -> Optional[logging.Logger]:
    module = _load_host_config_module()
    if module is None:
        return None
    logger_obj = getattr(module, "logger", None)
    return logger_obj if isinstance(logger_obj, logging.Logger) else None


class _HostLogHandler(logging.Handler):
    """Forwards plugin records to the host's logger, or the root logger when the host has none."""

    def emit(self, record: logging.LogRecord) -> None:
        message = self.format(record)
        host_logger = _resolve_host_logger()
        if host_logger is not None:
            try:
                if host_logger.isEnabledFor(record.levelno):
                    host_logger.log(record.levelno, message)
                    return
            except Exception:
                pass
        root_logger = logging.getLogger()
        if root_logger.isEnabledFor(record.levelno):
            root_logger.log(record.levelno, message)


def configure_logger(*, debug: bool = False) -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(resolve_log_level(debug))
    if not any(getattr(handler, "_host_handler", False) for handler in logger.handlers):
        handler = _HostLogHandler()
        handler._host_handler = True  # type: ignore[attr-defined]
        handler.setFormatter(logging.Formatter(f"[%(asctime)s] [{LOG_TAG}] %(message)s", "%H:%M:%S"))
        logger.addHandler(handler)
    logger.propagate = False
    return logger


def resolve_log_level(debug_enabled: bool) -> int:
    return logging.DEBUG if debug_enabled else HOST_DEFAULT_LOG_LEVEL


def resolve_logs_dir(log_dir_name: str = LOG_TAG) -> Path:
    """
    Resolve the directory to store trace logs.

    Strategy:
    - Use TITLE_TOOL_LOG_DIR if set.
    - Fall back to XDG state/cache locations, then `cwd/logs/<log_dir_name>`.
    - Final fallback: tempdir/<log_dir_name>.
    """
    targets = []
    env_override = os.environ.get(LOG_DIR_ENV_VAR)
    if env_override:
        targets.append(Path(env_override).expanduser())
    state_home = Path(os.environ.get("XDG_STATE_HOME", Path.home() / ".local" / "state"))
    cache_home = Path(os.environ.get("XDG_CACHE_HOME", Path.home() / ".cache"))
    targets.append(state_home / "logs" / log_dir_name)
    targets.append(cache_home / "logs" / log_dir_name)
    targets.append(Path.cwd() / "logs" / log_dir_name)

    for target in targets:
        try:
            target.mkdir(parents=True, exist_ok=True)
            return target
        except OSError:
            continue

    temp_fallback = Path(tempfile.gettempdir()) / log_dir_name
    temp_fallback.mkdir(parents=True, exist_ok=True)
    return temp_fallback


def build_rotating_file_handler(
    log_dir: Path,
    filename: str = TRACE_LOG_FILE,
    *,
    retention: int = 5,
    max_bytes: int = 512 * 1024,
    formatter: Optional[logging.Formatter] = None,
) -> logging.Handler:
    """Construct a rotating file handler with sane defaults."""
    retention = max(1, retention)
    backup_count = max(0, retention - 1)
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_dir / filename,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    if formatter is not None:
        handler.setFormatter(formatter)
    handler.setLevel(logging.DEBUG)
    return handler


def attach_trace_file(logger: logging.Logger, log_dir: Path, *, retention: int = 5) -> logging.Handler:
    for handler in logger.handlers:
        if getattr(handler, "_trace_file", False):
            return handler
    handler = build_rotating_file_handler(
        log_dir,
        retention=retention,
        formatter=logging.Formatter("%(asctime)s %(levelname)s %(message)s"),
    )
    handler._trace_file = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    return handler


class LogSink(Protocol):
    """Host diagnostics sink (an activity log)."""

    def info(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class ActivityLog:
    """Two-level log that writes to the host sink and always traces locally.

    A missing sink, or one that raises, degrades to the trace path only.
    """

    def __init__(self, sink: Optional[LogSink] = None, *, logger: Optional[logging.Logger] = None) -> None:
        self._sink = sink
        self._logger = logger or logging.getLogger(LOGGER_NAME)

    @property
    def available(self) -> bool:
        return self._sink is not None

    def info(self, message: str) -> None:
        self._emit(logging.INFO, message)

    def error(self, message: str) -> None:
        self._emit(logging.ERROR, message)

    def trace(self, message: str, *args: object) -> None:
        self._logger.debug(message, *args)

    def _emit(self, level: int, message: str) -> None:
        sink = self._sink
        if sink is None:
            self._logger.debug("No host log sink: %s", message)
            return
        self._logger.debug("%s: %s", logging.getLevelName(level), message)
        try:
            if level >= logging.ERROR:
                sink.error(message)
            else:
                sink.info(message)
        except Exception as exc:
            self._logger.debug("Host log sink rejected entry (%s): %s", exc, message)
