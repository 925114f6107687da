"""
Structured JSON Logging Module.

All directory loggers live under the ``skillswap`` namespace.  Handlers
(stdout plus an optional rotating file) are attached once, to the
``skillswap`` logger itself; every component logger such as
``skillswap.repository`` or ``skillswap.services`` propagates to them, so
a process writes each record exactly once regardless of how many
``StructuredLogger`` instances it creates.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, TextIO, Union

ROOT_LOGGER_NAME: str = "skillswap"


def _qualified_name(name: str) -> str:
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return name
    return f"{ROOT_LOGGER_NAME}.{name}"


def _resolve_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    return resolved if isinstance(resolved, int) else logging.INFO


class JSONFormatter(logging.Formatter):
    """Formats log records as single-line JSON objects.

    Each entry contains ``timestamp`` (ISO-8601, UTC), ``level``,
    ``logger_name`` and ``message``.  Fields passed through ``extra=`` are
    nested under ``extra`` keeping their JSON types; anything that is not
    JSON-serialisable is rendered with ``str``.
    """

    _STANDARD_ATTRS: frozenset[str] = frozenset(
        logging.LogRecord(
            name="", level=0, pathname="", lineno=0, msg="", args=(), exc_info=None
        ).__dict__.keys()
    ) | {"message", "asctime"}

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger_name": record.name,
            "message": record.getMessage(),
        }

        extra_fields = {
            key: value
            for key, value in record.__dict__.items()
            if key not in self._STANDARD_ATTRS
        }
        if extra_fields:
            entry["extra"] = extra_fields

        if record.exc_info and not record.exc_text:
            record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            entry["exception"] = record.exc_text

        return json.dumps(entry, ensure_ascii=False, default=str)


class StructuredLogger:
    """Injectable wrapper around a ``skillswap.*`` ``logging.Logger``.

    Usage::

        log = StructuredLogger(name="repository")
        log.info("User created: %s", user_id, extra={"backend": "file"})

    Components receive an instance through ``__init__`` and keep it as
    ``self._logger``.

    Parameters
    ----------
    name:
        Component name.  Prefixed with ``skillswap.`` unless it already is.
    level:
        Level for this component logger.  Defaults to ``LOG_LEVEL``.
    stream, log_file, max_bytes, backup_count:
        Handler settings.  Only honoured by the first ``StructuredLogger``
        created in the process, which installs the shared handlers;
        ``log_file`` falls back to ``LOG_FILE`` and an empty value means
        console only.
    """

    def __init__(
        self,
        name: str = ROOT_LOGGER_NAME,
        level: Optional[Union[int, str]] = None,
        stream: Optional[TextIO] = None,
        log_file: Optional[str] = None,
        max_bytes: Optional[int] = None,
        backup_count: Optional[int] = None,
    ) -> None:
        # Lazy import: config logs through the stdlib during validation.
        from skillswap.config import get_config
        cfg = get_config()

        resolved_level = _resolve_level(level if level is not None else cfg.LOG_LEVEL)
        self._logger: logging.Logger = logging.getLogger(_qualified_name(name))
        self._logger.setLevel(resolved_level)

        root = logging.getLogger(ROOT_LOGGER_NAME)
        if not root.handlers:
            root.setLevel(min(resolved_level, _resolve_level(cfg.LOG_LEVEL)))
            self._install_handlers(
                root,
                stream=stream or sys.stdout,
                log_file=log_file if log_file is not None else cfg.LOG_FILE,
                max_bytes=max_bytes if max_bytes is not None else cfg.LOG_MAX_BYTES,
                backup_count=backup_count if backup_count is not None else cfg.LOG_BACKUP_COUNT,
            )

    @staticmethod
    def _install_handlers(
        root: logging.Logger,
        stream: TextIO,
        log_file: str,
        max_bytes: int,
        backup_count: int,
    ) -> None:
        formatter = JSONFormatter()

        stream_handler = logging.StreamHandler(stream)
        stream_handler.setFormatter(formatter)
        root.addHandler(stream_handler)

        if not log_file:
            return
        try:
            log_path = Path(log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                filename=str(log_path),
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
            )
        except OSError as exc:
            root.warning(
                "Could not open log file '%s': %s. Logging to console only.",
                log_file,
                exc,
            )
            return
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    @property
    def logger(self) -> logging.Logger:
        """The underlying ``logging.Logger``."""
        return self._logger

    @property
    def name(self) -> str:
        return self._logger.name

    def debug(self, msg: str, *args: object, **kwargs: object) -> None:
        self._logger.debug(msg, *args, **kwargs)

    def info(self, msg: str, *args: object, **kwargs: object) -> None:
        self._logger.info(msg, *args, **kwargs)

    def warning(self, msg: str, *args: object, **kwargs: object) -> None:
        self._logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args: object, **kwargs: object) -> None:
        self._logger.error(msg, *args, **kwargs)

    def exception(self, msg: str, *args: object, **kwargs: object) -> None:
        self._logger.exception(msg, *args, **kwargs)

    def critical(self, msg: str, *args: object, **kwargs: object) -> None:
        self._logger.critical(msg, *args, **kwargs)


def get_logger(name: str = ROOT_LOGGER_NAME) -> StructuredLogger:
    """Component logger with level and handlers taken from ``AppConfig``."""
    return StructuredLogger(name=name)
