from __future__ import annotations

import logging
import sys
from pathlib import Path
from types import SimpleNamespace
from typing import List

from title_tool import logging_utils
from title_tool.logging_utils import ActivityLog


class _ListHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self.messages: List[str] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.messages.append(record.getMessage())


class _Sink:
    def __init__(self) -> None:
        self.entries: List[tuple] = []

    def info(self, message: str) -> None:
        self.entries.append(("info", message))

    def error(self, message: str) -> None:
        self.entries.append(("error", message))


class _BrokenSink:
    def info(self, message: str) -> None:
        raise RuntimeError("sink closed")

    def error(self, message: str) -> None:
        raise RuntimeError("sink closed")


def _trace_logger(name: str) -> tuple:
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    handler = _ListHandler()
    logger.handlers = [handler]
    return logger, handler


def test_activity_log_routes_levels_to_sink() -> None:
    logger, handler = _trace_logger("title_tool.test.sink")
    sink = _Sink()
    log = ActivityLog(sink, logger=logger)

    log.info("moved")
    log.error("broken")

    assert log.available
    assert sink.entries == [("info", "moved"), ("error", "broken")]
    assert handler.messages == ["INFO: moved", "ERROR: broken"]


def test_activity_log_without_sink_only_traces() -> None:
    logger, handler = _trace_logger("title_tool.test.nosink")
    log = ActivityLog(logger=logger)

    log.error("no tray")
    log.trace("attempt %d", 2)

    assert not log.available
    assert handler.messages == ["No host log sink: no tray", "attempt 2"]


def test_activity_log_survives_raising_sink() -> None:
    logger, handler = _trace_logger("title_tool.test.broken")
    log = ActivityLog(_BrokenSink(), logger=logger)

    log.info("moved")

    assert handler.messages[-1] == "Host log sink rejected entry (sink closed): moved"


def test_configure_logger_adds_host_handler_once() -> None:
    first = logging_utils.configure_logger()
    second = logging_utils.configure_logger(debug=True)

    host_handlers = [h for h in second.handlers if getattr(h, "_host_handler", False)]
    assert first is second
    assert len(host_handlers) == 1
    assert second.propagate is False
    assert second.level == logging.DEBUG
    logging_utils.configure_logger()


def test_host_handler_forwards_to_host_logger(monkeypatch) -> None:
    host_logger, host_handler = _trace_logger("title_tool.test.host")
    monkeypatch.setitem(sys.modules, "config", SimpleNamespace(logger=host_logger))
    logger = logging_utils.configure_logger()

    logger.info("toolbar placed")

    assert host_handler.messages
    assert host_handler.messages[-1].endswith("[TitleTool] toolbar placed")


def test_resolve_logs_dir_honours_env_override(tmp_path: Path, monkeypatch) -> None:
    target = tmp_path / "trace"
    monkeypatch.setenv(logging_utils.LOG_DIR_ENV_VAR, str(target))

    resolved = logging_utils.resolve_logs_dir()

    assert resolved == target
    assert target.is_dir()


def test_rotating_handler_keeps_retention_minus_one_backups(tmp_path: Path) -> None:
    handler = logging_utils.build_rotating_file_handler(tmp_path, retention=3)
    try:
        assert handler.backupCount == 2
        assert Path(handler.baseFilename).name == logging_utils.TRACE_LOG_FILE
    finally:
        handler.close()


def test_attach_trace_file_is_idempotent(tmp_path: Path) -> None:
    logger = logging.getLogger("title_tool.test.trace")
    logger.handlers = []
    try:
        first = logging_utils.attach_trace_file(logger, tmp_path)
        second = logging_utils.attach_trace_file(logger, tmp_path)
        assert first is second
        assert len(logger.handlers) == 1
    finally:
        for handler in logger.handlers:
            handler.close()
        logger.handlers = []
