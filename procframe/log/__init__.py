"""
Logging for procframe.

Extends Python's standard logging with:
- A TRACE level below DEBUG (used for realtime stream chunks)
- Structured extra fields rendered as ``[key:value]`` after the message
- Optional ANSI colors and sub-second timestamps
- A factory for root loggers and derived "view" loggers

Log Level Control:
- Use standard levels: debug, info, warning, error, critical
- Use the custom level: trace
- Disable logging completely: False or "false"
"""

import logging

from .config import LogConfig
from .constants import LogConstants
from .exceptions import InvalidLogLevelError, LogError
from .factory import LoggerFactory, get_logger
from .formatters import LogFormatter
from .logger import Logger

logging.addLevelName(LogConstants.CUSTOM_LEVELS["TRACE"], "TRACE")


def create_root_lg(level: str | int = "info", micros: bool = False) -> Logger:
    """
    Create a root logger with the specified configuration.

    Args:
        level: Log level name or number
        micros: Whether to show sub-second precision

    Returns:
        Configured root logger
    """
    return LoggerFactory.create_root(LogConfig.from_params(level, micros=micros))


__all__ = [
    "InvalidLogLevelError",
    "LogConfig",
    "LogConstants",
    "LogError",
    "LogFormatter",
    "Logger",
    "LoggerFactory",
    "create_root_lg",
    "get_logger",
]
