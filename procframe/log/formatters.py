"""
Log formatter for the procframe logging system.

Output shape::

    [12:34:56,789] [D] spawned process        [command:php -v] [pid:4242] [1234] [/procframe/process]
"""

import collections
import logging
from typing import Any

from .config import LogConfig
from .constants import LogConstants
from .logger import EXTRA_ATTR


def _ordered_items(extra: dict[str, Any]) -> list[tuple[str, Any]]:
    """Extra fields in insertion order for OrderedDict, sorted otherwise."""
    if isinstance(extra, collections.OrderedDict):
        return list(extra.items())
    return sorted(extra.items())


def _format_value(value: Any) -> str:
    if isinstance(value, BaseException):
        return value.__class__.__name__
    if isinstance(value, (list, tuple)):
        return ",".join(str(v) for v in value)
    return str(value)


class LogFormatter(logging.Formatter):
    """
    Formatter rendering message, extra fields, pid and logger name.

    Colors are applied per level when ``config.colors`` is set.
    """

    def __init__(self, config: LogConfig) -> None:
        super().__init__(LogConstants.DEFAULT_FORMAT)
        self._config = config

    @property
    def config(self) -> LogConfig:
        return self._config

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        s = super().formatTime(record, "%H:%M:%S")
        if self._config.micros:
            s += f",{int(record.msecs):03d}{int((record.created % 1) * 1000000) % 1000:03d}"
        else:
            s += f",{int(record.msecs):03d}"
        return s

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        exc_text = ""
        if "\n" in line and (record.exc_info or record.exc_text or record.stack_info):
            line, _, exc_text = line.partition("\n")

        rule = (
            LogConstants.MICRO_RULE_WIDTH
            if self._config.micros
            else LogConstants.DEFAULT_RULE_WIDTH
        )
        line += " " * max(1, rule - len(line))

        extra = getattr(record, EXTRA_ATTR, None) or {}
        fields = [f"[{k}:{_format_value(v)}]" for k, v in _ordered_items(extra)]
        meta = f"[{record.process}] [{record.name}]"

        if self._config.colors:
            col = LogConstants.LEVEL_COLORS.get(record.levelno, "")
            line = col + line + LogConstants.RESET
            if fields:
                line += col + " ".join(fields) + LogConstants.RESET + " "
            line += LogConstants.GRAY + meta + LogConstants.RESET
        else:
            if fields:
                line += " ".join(fields) + " "
            line += meta

        if exc_text:
            line += "\n" + exc_text
        return line
