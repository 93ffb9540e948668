#!/usr/bin/env python3
"""
Logging configuration for field-relations.

All loggers live under the ``field_relations`` namespace and share the
handlers installed by :func:`setup_logging`: a console handler on stderr
(stdout is reserved for reports) and an optional rotating file.

Analysis runs log through :class:`RunLogger`, which tags every message with
the run number so interleaved output from parallel runs stays readable.
"""
from __future__ import annotations

import functools
import itertools
import logging
import logging.handlers
import sys
import time
from pathlib import Path
from typing import Any, MutableMapping, Optional, Tuple, Union

from .constants import (
    DEFAULT_LOG_FORMAT,
    DEFAULT_LOG_LEVEL,
    LOG_FILE_BACKUP_COUNT,
    MAX_LOG_FILE_SIZE,
)
from .exceptions import ConfigurationError

ROOT_LOGGER_NAME = "field_relations"

LevelLike = Union[str, int]


class ColoredFormatter(logging.Formatter):
    """Console formatter that colors the level name."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        # Color a copy so the file handler still sees the plain level name
        record = logging.makeLogRecord(record.__dict__)
        color = self.COLORS.get(record.levelname)
        if color:
            record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


def coerce_level(level: LevelLike) -> int:
    """
    Turn ``"info"``, ``"INFO"`` or ``logging.INFO`` into a level number.

    Raises:
        ConfigurationError: Unknown level name.
    """
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).strip().upper())
    if not isinstance(value, int):
        raise ConfigurationError(f"Unknown log level {level!r}", config_key="log_level", config_value=level)
    return value


def _console_handler(level: int, format_string: str, colored: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    if colored and sys.stderr.isatty():
        handler.setFormatter(ColoredFormatter(format_string))
    else:
        handler.setFormatter(logging.Formatter(format_string))
    return handler


def _file_handler(
    log_file: Union[str, Path], level: int, format_string: str, max_bytes: int, backup_count: int
) -> logging.Handler:
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        log_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(format_string))
    return handler


class FieldRelationsLogger:
    """Centralized logger configuration for field-relations."""

    _configured = False
    _loggers: dict[str, logging.Logger] = {}

    @classmethod
    def setup_logging(
        cls,
        level: LevelLike = DEFAULT_LOG_LEVEL,
        log_file: Optional[Union[str, Path]] = None,
        console_output: bool = True,
        colored_output: bool = True,
        format_string: Optional[str] = None,
        max_file_size: int = MAX_LOG_FILE_SIZE * 1024 * 1024,
        backup_count: int = LOG_FILE_BACKUP_COUNT,
        force: bool = False,
    ) -> None:
        """
        Install handlers on the ``field_relations`` logger.

        Args:
            level: Level name or number for the logger and its handlers
            log_file: Rotating log file (None disables file logging)
            console_output: Log to stderr
            colored_output: Color level names when stderr is a terminal
            format_string: Record format (defaults to DEFAULT_LOG_FORMAT)
            max_file_size: Bytes before the log file rotates
            backup_count: Rotated files to keep
            force: Replace an existing configuration (the CLI does this once
                it knows the requested level)
        """
        if cls._configured and not force:
            return

        numeric_level = coerce_level(level)
        format_string = format_string or DEFAULT_LOG_FORMAT

        root_logger = logging.getLogger(ROOT_LOGGER_NAME)
        root_logger.setLevel(numeric_level)
        for handler in list(root_logger.handlers):
            root_logger.removeHandler(handler)
            handler.close()

        if console_output:
            root_logger.addHandler(_console_handler(numeric_level, format_string, colored_output))
        if log_file:
            root_logger.addHandler(
                _file_handler(log_file, numeric_level, format_string, max_file_size, backup_count)
            )

        # Library output stays out of the host application's root logger
        root_logger.propagate = False
        cls._configured = True

        cls.get_logger("logging_config").debug(
            "Logging configured - Level: %s, Console: %s, File: %s",
            logging.getLevelName(numeric_level),
            console_output,
            log_file,
        )

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """Logger for ``name``, placed under the field_relations namespace."""
        if not cls._configured:
            cls.setup_logging()

        if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
            logger_name = name
        else:
            logger_name = f"{ROOT_LOGGER_NAME}.{name}"

        if logger_name not in cls._loggers:
            cls._loggers[logger_name] = logging.getLogger(logger_name)
        return cls._loggers[logger_name]

    @classmethod
    def set_level(cls, level: LevelLike) -> None:
        """Change the level of the field_relations logger and its handlers."""
        numeric_level = coerce_level(level)
        root_logger = logging.getLogger(ROOT_LOGGER_NAME)
        root_logger.setLevel(numeric_level)
        for handler in root_logger.handlers:
            handler.setLevel(numeric_level)


class RunLogger(logging.LoggerAdapter):
    """
    Logger adapter that prefixes messages with an analysis run number.

    Example:
        >>> log = RunLogger.start(get_logger(__name__))
        >>> log.info("Scanned %d sources", 12)   # "[run 3] Scanned 12 sources"
    """

    _counter = itertools.count(1)

    @classmethod
    def start(cls, logger: logging.Logger) -> "RunLogger":
        return cls(logger, {"run_id": next(cls._counter)})

    @property
    def run_id(self) -> int:
        return self.extra["run_id"]

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        return f"[run {self.run_id}] {msg}", kwargs


def get_logger(name: str) -> logging.Logger:
    """
    Logger for a module; every module does ``logger = get_logger(__name__)``.
    """
    return FieldRelationsLogger.get_logger(name)


def setup_logging(
    level: LevelLike = DEFAULT_LOG_LEVEL,
    log_file: Optional[Union[str, Path]] = None,
    **kwargs,
) -> None:
    """Configure logging; see :meth:`FieldRelationsLogger.setup_logging`."""
    FieldRelationsLogger.setup_logging(level=level, log_file=log_file, **kwargs)


def log_performance(func):
    """Decorator logging how long ``func`` took (DEBUG), also when it raises."""
    logger = get_logger(func.__module__)

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            logger.debug("%s took %.3f seconds", func.__qualname__, time.perf_counter() - start_time)

    return wrapper


__all__ = [
    "FieldRelationsLogger",
    "ColoredFormatter",
    "RunLogger",
    "coerce_level",
    "get_logger",
    "setup_logging",
    "log_performance",
]
