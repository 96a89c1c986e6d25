"""
Configuration for the procframe logging system.

``LogConfig`` is immutable so a logger's settings cannot drift after creation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class LogConfig:
    """
    Immutable logger configuration.

    Attributes:
        level: Numeric log level, or False to disable logging entirely
        micros: Whether timestamps carry sub-second precision
        colors: Whether console output uses ANSI colors
    """

    level: int | bool = logging.INFO
    micros: bool = False
    colors: bool = True

    @staticmethod
    def resolve_level(level: str | int | bool) -> int | bool:
        """
        Resolve a level given as name, number or boolean.

        Raises:
            InvalidLogLevelError: If the level name is unknown
        """
        from .constants import LogConstants
        from .exceptions import InvalidLogLevelError

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
    def from_params(
        cls,
        level: str | int | bool = "info",
        micros: bool = False,
        colors: bool = True,
    ) -> LogConfig:
        """
        Create LogConfig from individual parameters.

        Args:
            level: Log level (string name, numeric value, or False to disable logging)
            micros: Whether to show sub-second precision
            colors: Whether to enable colored output

        Returns:
            LogConfig instance
        """
        return cls(level=cls.resolve_level(level), micros=micros, colors=colors)

    @classmethod
    def from_config(cls, config_dict: dict[str, Any], section: str = "logging") -> LogConfig:
        """
        Create LogConfig from a configuration dictionary.

        Args:
            config_dict: Configuration dictionary (e.g., from ``load_config``)
            section: Dotted path of the logging section (default: "logging")

        Example:
            config = load_config("etc/procframe.yaml")
            log_config = LogConfig.from_config(config, "logging")
        """
        current: Any = config_dict
        for part in section.split("."):
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                current = {}
                break
        if not isinstance(current, dict):
            current = {}

        level = current.get("level", "info")
        if level == "false":
            level = False
        colors = current.get("colors", True)
        if isinstance(colors, dict):
            colors = colors.get("enabled", True)

        return cls.from_params(
            level=level,
            micros=bool(current.get("microseconds", current.get("micros", False))),
            colors=bool(colors),
        )
