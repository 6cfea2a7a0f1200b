"""Structured logging for broadlink-lan.

Every module logger is a child of the ``broadlink_lan`` package logger, which
owns the handlers. Records carry the active correlation id (one per discovery
run, handshake or CLI invocation) and an optional ``extra_data`` mapping such
as the device MAC or the exchange attempt number. Two renderings are
available: JSON lines for files and a compact single-line form for terminals.
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Mapping
from datetime import UTC, datetime
from pathlib import Path
from typing import cast, override

from broadlink_lan.correlation import get_correlation_id

__all__ = [
    "BroadlinkLogger",
    "HumanReadableFormatter",
    "JSONFormatter",
    "get_logger",
]

NO_CORRELATION = "[--------]"


def _record_context(record: logging.LogRecord) -> dict[str, object]:
    extra_data = getattr(record, "extra_data", None)
    if isinstance(extra_data, Mapping):
        return dict(cast("Mapping[str, object]", extra_data))
    return {}


class JSONFormatter(logging.Formatter):
    """One JSON object per record, for log files and collectors."""

    @override
    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "correlation_id": get_correlation_id(),
            "message": record.getMessage(),
        }
        context = _record_context(record)
        if context:
            entry["context"] = context
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            entry["stack_info"] = self.formatStack(record.stack_info)
        return json.dumps(entry, default=str)


class HumanReadableFormatter(logging.Formatter):
    """Single-line terminal format: ``time level [module:line] [corr] > message | k=v``."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s.%(msecs)03d %(levelname)s [%(module)s:%(lineno)d] %(correlation_id)s > %(message)s",
            datefmt="%m/%d/%y %H:%M:%S",
        )

    @override
    def format(self, record: logging.LogRecord) -> str:
        correlation_id = get_correlation_id()
        # uuid7 ids share their timestamp prefix, so show the random tail
        record.correlation_id = f"[{correlation_id[-8:]}]" if correlation_id else NO_CORRELATION
        line = super().format(record)
        context = _record_context(record)
        if not context:
            return line
        return " | ".join([line, *(f"{key}={value}" for key, value in context.items())])


def _human_handler(target: str) -> logging.Handler:
    if target == "stdout":
        return logging.StreamHandler(sys.stdout)
    if target == "stderr":
        return logging.StreamHandler(sys.stderr)
    path = Path(target)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        return logging.FileHandler(path, mode="a")
    except OSError as e:
        print(f"Warning: cannot open log file {target}: {e}; logging to stderr", file=sys.stderr)
        return logging.StreamHandler(sys.stderr)


def _json_handler(json_file: str | Path) -> logging.Handler | None:
    path = Path(json_file)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        return logging.FileHandler(path, mode="a")
    except OSError as e:
        print(f"Warning: cannot open JSON log file {json_file}: {e}", file=sys.stderr)
        return None


def _configure_package_logger(
    package_logger: logging.Logger,
    log_format: str,
    json_file: str | Path | None,
    human_output: str | None,
) -> None:
    """Attach handlers to the package logger once; later calls are no-ops."""
    from broadlink_lan.const import BROADLINK_DEBUG

    if package_logger.handlers:
        return

    level = logging.DEBUG if BROADLINK_DEBUG else logging.INFO
    package_logger.setLevel(level)

    handlers: list[logging.Handler] = []
    if log_format in ("json", "both") and json_file:
        json_handler = _json_handler(json_file)
        if json_handler is not None:
            json_handler.setFormatter(JSONFormatter())
            handlers.append(json_handler)
    if log_format in ("human", "both"):
        human_handler = _human_handler(human_output or "stderr")
        human_handler.setFormatter(HumanReadableFormatter())
        handlers.append(human_handler)

    for handler in handlers:
        handler.setLevel(level)
        package_logger.addHandler(handler)


class BroadlinkLogger:
    """Module logger whose ``extra=`` mapping lands in the formatters' context.

    Use it like a ``logging.Logger``::

        logger = get_logger(__name__)
        logger.info("Authenticated %s", descriptor, extra={"device_id": device_id})
    """

    def __init__(
        self,
        name: str,
        log_format: str = "human",
        json_file: str | Path | None = None,
        human_output: str | None = "stderr",
    ) -> None:
        from broadlink_lan.const import BROADLINK_LOG_NAME

        self.name: str = name
        self.log_format: str = log_format
        self.logger: logging.Logger = logging.getLogger(name)
        self._package_logger: logging.Logger = logging.getLogger(BROADLINK_LOG_NAME)
        _configure_package_logger(self._package_logger, log_format, json_file, human_output)

    def _log(self, level: int, msg: str, *args: object, extra: Mapping[str, object] | None = None) -> None:
        payload = {"extra_data": dict(extra)} if extra else None
        # stacklevel=3 so module and line point at the caller of debug()/info()
        self.logger.log(level, msg, *args, extra=payload, stacklevel=3)

    def debug(self, msg: str, *args: object, extra: Mapping[str, object] | None = None) -> None:
        self._log(logging.DEBUG, msg, *args, extra=extra)

    def info(self, msg: str, *args: object, extra: Mapping[str, object] | None = None) -> None:
        self._log(logging.INFO, msg, *args, extra=extra)

    def warning(self, msg: str, *args: object, extra: Mapping[str, object] | None = None) -> None:
        self._log(logging.WARNING, msg, *args, extra=extra)

    def error(self, msg: str, *args: object, extra: Mapping[str, object] | None = None) -> None:
        self._log(logging.ERROR, msg, *args, extra=extra)

    def exception(self, msg: str, *args: object, extra: Mapping[str, object] | None = None) -> None:
        """Log at ERROR with the active exception's traceback."""
        payload = {"extra_data": dict(extra)} if extra else None
        self.logger.exception(msg, *args, extra=payload, stacklevel=2)

    def set_level(self, level: int) -> None:
        """Change the level of the package logger and every handler it owns (used by ``--debug``)."""
        self._package_logger.setLevel(level)
        for handler in self._package_logger.handlers:
            handler.setLevel(level)

    @property
    def handlers(self) -> list[logging.Handler]:
        return self._package_logger.handlers


def get_logger(
    name: str,
    log_format: str | None = None,
    json_file: str | Path | None = None,
    human_output: str | None = None,
) -> BroadlinkLogger:
    """Return a logger for ``name``, configured from BROADLINK_LOG_* unless overridden."""
    from broadlink_lan.const import (
        BROADLINK_LOG_FORMAT,
        BROADLINK_LOG_HUMAN_OUTPUT,
        BROADLINK_LOG_JSON_FILE,
    )

    return BroadlinkLogger(
        name=name,
        log_format=log_format or BROADLINK_LOG_FORMAT,
        json_file=json_file or BROADLINK_LOG_JSON_FILE,
        human_output=human_output or BROADLINK_LOG_HUMAN_OUTPUT,
    )
