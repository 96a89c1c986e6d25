"""
Configuration loading for procframe.

Settings live in a YAML file with one section per concern::

    logging:
      level: debug
      colors: false
    process:
      encoding: utf-8
      chunk_size: 65536
      poll_interval: 0.05

Any value can be overridden from the environment using the ``PROCFRAME_``
prefix, with ``__`` separating path components so key names may contain
underscores::

    PROCFRAME_LOGGING__LEVEL=debug
    PROCFRAME_PROCESS__CHUNK_SIZE=4096
"""

from __future__ import annotations

import codecs
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .exceptions import ConfigError

DEFAULT_ENV_PREFIX = "PROCFRAME_"


def _convert_env_value(value: str) -> bool | int | float | str | None:
    """Convert an environment variable string to the matching scalar type."""
    if value.lower() in ("null", "none", ""):
        return None

    if value.lower() in ("true", "false"):
        return value.lower() == "true"

    try:
        if "." in value:
            return float(value)
        return int(value)
    except ValueError:
        pass

    return value


def _set_nested_value(data: dict[str, Any], path: list[str], value: Any) -> None:
    current = data
    for part in path[:-1]:
        if not isinstance(current.get(part), dict):
            current[part] = {}
        current = current[part]
    current[path[-1]] = value


def apply_env_overrides(
    config_data: dict[str, Any],
    env_prefix: str = DEFAULT_ENV_PREFIX,
    environ: dict[str, str] | None = None,
) -> dict[str, Any]:
    """
    Apply environment variable overrides to configuration data.

    Args:
        config_data: Configuration dictionary, modified in place
        env_prefix: Prefix selecting the variables to apply
        environ: Environment mapping (default: ``os.environ``)

    Returns:
        The updated configuration dictionary
    """
    environ = os.environ if environ is None else environ
    for key, raw in environ.items():
        if not key.startswith(env_prefix):
            continue
        path = [p for p in key[len(env_prefix) :].lower().split("__") if p]
        if not path:
            continue
        _set_nested_value(config_data, path, _convert_env_value(raw))
    return config_data


def load_config(
    fname: str | Path,
    env_prefix: str = DEFAULT_ENV_PREFIX,
    enable_env_overrides: bool = True,
) -> dict[str, Any]:
    """
    Load a YAML configuration file.

    Args:
        fname: Path to the YAML file
        env_prefix: Prefix for environment variable overrides
        enable_env_overrides: Whether to apply environment overrides

    Returns:
        Configuration dictionary

    Raises:
        ConfigError: If the file is missing, malformed, or not a mapping
    """
    path = Path(fname)
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise ConfigError("config file not found", path=str(path)) from e
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML: {e}", path=str(path)) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError("config root must be a mapping", path=str(path))

    if enable_env_overrides:
        data = apply_env_overrides(data, env_prefix)
    return data


@dataclass(frozen=True)
class ProcessConfig:
    """
    Immutable settings for process handles.

    Attributes:
        encoding: Text encoding used to decode pipe output and encode str writes
        errors: Codec error handler for decoding (e.g. "replace", "strict")
        chunk_size: Maximum bytes read per realtime read
        poll_interval: Seconds to wait for pipe readiness before re-checking liveness
    """

    encoding: str = "utf-8"
    errors: str = "replace"
    chunk_size: int = 65536
    poll_interval: float = 0.05

    @classmethod
    def from_params(
        cls,
        encoding: str = "utf-8",
        errors: str = "replace",
        chunk_size: int = 65536,
        poll_interval: float = 0.05,
    ) -> ProcessConfig:
        """
        Create a validated ProcessConfig.

        Raises:
            ConfigError: If any value is invalid
        """
        try:
            codecs.lookup(encoding)
        except LookupError as e:
            raise ConfigError("unknown encoding", encoding=encoding) from e
        try:
            codecs.lookup_error(errors)
        except LookupError as e:
            raise ConfigError("unknown codec error handler", errors=errors) from e
        if isinstance(chunk_size, bool) or not isinstance(chunk_size, int) or chunk_size <= 0:
            raise ConfigError("chunk_size must be a positive integer", chunk_size=chunk_size)
        if isinstance(poll_interval, bool) or not isinstance(poll_interval, (int, float)):
            raise ConfigError("poll_interval must be a number", poll_interval=poll_interval)
        if poll_interval <= 0:
            raise ConfigError("poll_interval must be positive", poll_interval=poll_interval)

        return cls(
            encoding=encoding,
            errors=errors,
            chunk_size=chunk_size,
            poll_interval=float(poll_interval),
        )

    @classmethod
    def from_config(cls, config_dict: dict[str, Any], section: str = "process") -> ProcessConfig:
        """
        Create ProcessConfig from a configuration dictionary.

        Missing keys take their defaults; a missing section yields the defaults.
        """
        current = config_dict.get(section) or {}
        if not isinstance(current, dict):
            raise ConfigError("config section must be a mapping", section=section)

        defaults = cls()
        return cls.from_params(
            encoding=current.get("encoding", defaults.encoding),
            errors=current.get("errors", defaults.errors),
            chunk_size=current.get("chunk_size", defaults.chunk_size),
            poll_interval=current.get("poll_interval", defaults.poll_interval),
        )
