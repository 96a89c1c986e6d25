"""
Constants for the procframe logging system.

Format strings, rule widths, custom level values and ANSI codes shared by the
logger, the formatter and the config resolution.
"""

import logging


class LogConstants:
    """Constants for the logging system."""

    DEFAULT_FORMAT: str = "[%(asctime)s] [%(levelname).1s] %(message)s"

    # Messages are padded to this width before extra fields are appended
    DEFAULT_RULE_WIDTH: int = 60
    MICRO_RULE_WIDTH: int = 64

    # TRACE is used for per-chunk realtime stream events
    CUSTOM_LEVELS: dict[str, int] = {"TRACE": 5}

    LEVEL_NAMES: dict[str, int | bool] = {
        "critical": logging.CRITICAL,
        "error": logging.ERROR,
        "warning": logging.WARNING,
        "info": logging.INFO,
        "debug": logging.DEBUG,
        "trace": 5,
        "false": False,  # Special value to disable all logging
    }

    RESET: str = "\x1b[0m"
    GRAY: str = "\x1b[38;5;244m"

    LEVEL_COLORS: dict[int, str] = {
        5: "\x1b[38;5;240m",
        logging.DEBUG: "\x1b[38;5;246m",
        logging.INFO: "\x1b[37m",
        logging.WARNING: "\x1b[33m",
        logging.ERROR: "\x1b[31m",
        logging.CRITICAL: "\x1b[35m",
    }
