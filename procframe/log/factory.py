"""
Factory for creating and configuring loggers.

Root loggers own a console handler; derived loggers are views that reuse
their parent's handlers through normal propagation.
"""

import collections
import logging
import sys
from typing import Any, TextIO

from .config import LogConfig
from .formatters import LogFormatter
from .logger import Logger


class LoggerFactory:
    """Factory for creating and configuring loggers."""

    @staticmethod
    def create_root(config: LogConfig, stream: TextIO | None = None) -> Logger:
        """
        Create a root logger with the specified configuration.

        Example:
            >>> config = LogConfig.from_params(level="info", colors=False)
            >>> lg = LoggerFactory.create_root(config)
            >>> lg.info("runner started")
            [12:34:56,789] [I] runner started                 [1234] [/]
        """
        return LoggerFactory.create("/", config, stream=stream)

    @staticmethod
    def _check_existing_logger(name: str) -> Logger | None:
        existing = logging.root.manager.loggerDict.get(name)
        if isinstance(existing, Logger):
            return existing
        return None

    @staticmethod
    def create(
        name: str,
        config: LogConfig,
        extra: dict[str, Any] | collections.OrderedDict | None = None,
        stream: TextIO | None = None,
    ) -> Logger:
        """
        Create a logger with its own console handler.

        Returns the already registered logger when one exists under ``name``.

        Args:
            name: Logger name
            config: Logger configuration
            extra: Pre-populated extra fields to include in all log records
            stream: Output stream for the console handler (default: stdout)

        Example:
            >>> lg = LoggerFactory.create("/worker", config, extra={"job": "build"})
            >>> lg.info("child exited", extra={"exit_code": 0})
            [12:34:56,789] [I] child exited         [exit_code:0] [job:build] [1234] [/worker]
        """
        existing = LoggerFactory._check_existing_logger(name)
        if existing:
            return existing

        lg = Logger(name, config, extra)
        handler = logging.StreamHandler(stream if stream is not None else sys.stdout)
        if config.level is not False:
            handler.setLevel(config.level)
        handler.setFormatter(LogFormatter(config))
        lg.addHandler(handler)
        lg.propagate = False
        lg.parent = logging.root

        logging.root.manager.loggerDict[name] = lg
        return lg

    @staticmethod
    def derive(parent: Logger, tags: str | list[str]) -> Logger:
        """
        Derive a "view" logger that uses the parent's handlers.

        Examples:
            >>> derived = LoggerFactory.derive(root, ["procframe", "process"])
            >>> derived.name
            '/procframe/process'
        """
        if isinstance(tags, str):
            tags = [tags]

        prefix = parent.name if parent.name == "/" else parent.name + "/"
        name = prefix + "/".join(tags)

        existing = LoggerFactory._check_existing_logger(name)
        if existing:
            return existing

        lg = Logger(name, parent.config, parent.extra)
        lg.setLevel(logging.NOTSET)
        lg.parent = parent
        lg.propagate = True
        logging.root.manager.loggerDict[name] = lg
        return lg


def get_logger(name: str) -> Logger:
    """
    Get the library logger for ``name``.

    Library loggers have no handlers of their own and propagate to the stdlib
    root logger, so output is controlled by the host application.
    """
    existing = LoggerFactory._check_existing_logger(name)
    if existing:
        return existing

    lg = Logger(name, LogConfig(level=logging.NOTSET))
    lg.parent = logging.root
    lg.propagate = True
    logging.root.manager.loggerDict[name] = lg
    return lg
