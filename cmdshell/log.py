"""
Logging for the shell driver.

Extends Python's standard logging with:
- An immutable LogConfig with level resolution from names
- A Logger that carries structured extra fields on its records
- A LogFormatter rendering "[12:34:56,789] [W] message [key:value] [/cmdshell]"
- A LoggerFactory that wires handlers once per logger name

Log records go to stderr so that they never interleave with command
output written to stdout.

Example:
    from cmdshell.log import LogConfig, LoggerFactory

    lg = LoggerFactory.create("/cmdshell", LogConfig.from_params("info"))
    lg.info("found command", extra={"names": ["exit", "quit"]})
    [12:34:56,789] [I] found command [names:exit,quit] [/cmdshell]
"""

from __future__ import annotations

import logging
import sys
import time
from dataclasses import dataclass
from typing import Any, cast

from .exceptions import ShellError

EXTRA_ATTR = "_cmdshell_extra"


class LogConstants:
    """Constants for the logging system."""

    DEFAULT_FORMAT: str = "[%(asctime)s] [%(levelname).1s] %(message)s"
    TIME_FORMAT: str = "%H:%M:%S"

    LEVEL_NAMES: dict[str, int | bool] = {
        "critical": logging.CRITICAL,
        "error": logging.ERROR,
        "warning": logging.WARNING,
        "info": logging.INFO,
        "debug": logging.DEBUG,
        "false": False,  # Disables all logging
    }


class LogError(ShellError):
    """Base exception for logging-related errors."""

    pass


class InvalidLogLevelError(LogError):
    """Raised when an invalid log level is specified."""

    def __init__(self, level: Any) -> None:
        self.level = level
        super().__init__(f"Invalid log level: {level}")


@dataclass(frozen=True)
class LogConfig:
    """
    Immutable logger configuration.

    level is an int for normal levels, or False to disable logging.
    """

    level: int | bool = logging.INFO
    micros: bool = False

    @staticmethod
    def _resolve_level(level: str | int | bool) -> int | bool:
        """Resolve level parameter to int or False."""
        if isinstance(level, bool):
            return False if not level else logging.INFO
        if isinstance(level, str):
            if level.isnumeric():
                return int(level)
            if level.lower() in LogConstants.LEVEL_NAMES:
                return LogConstants.LEVEL_NAMES[level.lower()]
            raise InvalidLogLevelError(level)
        return level

    @classmethod
    def from_params(cls, level: str | int | bool, micros: bool = False) -> LogConfig:
        """
        Create LogConfig from individual parameters.

        Args:
            level: Log level (string name, numeric value, or False to disable logging)
            micros: Whether to show microsecond precision

        Returns:
            LogConfig instance

        Raises:
            InvalidLogLevelError: If level is an unknown name
        """
        return cls(level=cls._resolve_level(level), micros=micros)

    @property
    def effective_level(self) -> int:
        """Numeric level to hand to the logging module."""
        if self.level is False:
            return logging.CRITICAL + 1
        return cast(int, self.level)


class Logger(logging.Logger):
    """
    Logger that keeps extra fields together on the record.

    Extra fields passed through ``extra=`` are stored as a single dict so
    the formatter can render them as ``[key:value]`` pairs after the
    message, instead of scattering them as record attributes.
    """

    def __init__(self, name: str, level: int = logging.NOTSET) -> None:
        super().__init__(name, level)
        self.config: LogConfig = LogConfig()

    def makeRecord(
        self,
        name: str,
        level: int,
        fn: str,
        lno: int,
        msg: object,
        args: Any,
        exc_info: Any,
        func: str | None = None,
        extra: Any = None,
        sinfo: str | None = None,
    ) -> logging.LogRecord:
        record = super().makeRecord(
            name, level, fn, lno, msg, args, exc_info, func, None, sinfo
        )
        if extra:
            setattr(record, EXTRA_ATTR, dict(extra))
        return record


class StderrHandler(logging.StreamHandler):
    """Stream handler that writes to whatever sys.stderr is at emit time."""

    def __init__(self, level: int = logging.NOTSET) -> None:
        logging.Handler.__init__(self, level)

    @property
    def stream(self) -> Any:  # type: ignore[override]
        return sys.stderr


def _format_extra(record: logging.LogRecord) -> str:
    """Format extra fields as sorted [key:value] pairs."""
    extra = getattr(record, EXTRA_ATTR, None)
    if not extra:
        return ""

    parts = []
    for key in sorted(extra):
        value = extra[key]
        if isinstance(value, BaseException):
            parts.append(f"[{key}:{value.__class__.__name__}]")
        elif isinstance(value, (list, tuple)):
            parts.append(f"[{key}:{','.join(map(str, value))}]")
        else:
            parts.append(f"[{key}:{value}]")
    return " " + " ".join(parts)


class LogFormatter(logging.Formatter):
    """Formatter producing single-line records with extra fields and logger name."""

    def __init__(self, config: LogConfig) -> None:
        super().__init__(LogConstants.DEFAULT_FORMAT)
        self._config = config

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        stamp = time.strftime(LogConstants.TIME_FORMAT, self.converter(record.created))
        if self._config.micros:
            return f"{stamp},{int((record.created % 1) * 1_000_000):06d}"
        return f"{stamp},{int(record.msecs):03d}"

    def format(self, record: logging.LogRecord) -> str:
        record.message = record.getMessage()
        record.asctime = self.formatTime(record)
        text = self.formatMessage(record) + _format_extra(record) + f" [{record.name}]"
        if record.exc_info:
            text += "\n" + self.formatException(record.exc_info)
        return text


class LoggerFactory:
    """Factory for creating and configuring loggers."""

    @staticmethod
    def create(name: str, config: LogConfig) -> Logger:
        """
        Create a logger with the specified configuration.

        A logger that already exists under ``name`` is returned unchanged,
        so handlers are attached only once.

        Args:
            name: Logger name (slash path, e.g. "/cmdshell")
            config: Logger configuration

        Returns:
            Configured logger instance
        """
        existing = logging.root.manager.loggerDict.get(name)
        if isinstance(existing, Logger):
            return existing

        previous_class = logging.getLoggerClass()
        logging.setLoggerClass(Logger)
        try:
            lg = cast(Logger, logging.getLogger(name))
        finally:
            logging.setLoggerClass(previous_class)

        lg.addHandler(StderrHandler(config.effective_level))
        return LoggerFactory.reconfigure(lg, config)

    @staticmethod
    def reconfigure(lg: Logger, config: LogConfig) -> Logger:
        """
        Apply a new configuration to an existing logger and its handlers.

        Args:
            lg: Logger created by this factory
            config: Configuration to apply

        Returns:
            The same logger
        """
        lg.config = config
        lg.setLevel(config.effective_level)
        lg.disabled = config.level is False
        for handler in lg.handlers:
            if isinstance(handler, StderrHandler):
                handler.setLevel(config.effective_level)
                handler.setFormatter(LogFormatter(config))
        return lg

    @staticmethod
    def derive(parent: logging.Logger, name: str) -> Logger:
        """
        Create a child logger named ``<parent>/<name>`` sharing the parent's config.

        Example:
            >>> root = LoggerFactory.create("/cmdshell", config)
            >>> LoggerFactory.derive(root, "discovery").name
            '/cmdshell/discovery'
        """
        config = getattr(parent, "config", None) or LogConfig(level=parent.level)
        return LoggerFactory.create(f"{parent.name}/{name}", config)


def create_logger(name: str = "/cmdshell", level: str | int | bool = "warning") -> Logger:
    """Convenience wrapper around LoggerFactory.create()."""
    return LoggerFactory.create(name, LogConfig.from_params(level))
