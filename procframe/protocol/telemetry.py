"""Telemetry collected alongside a response."""

import sys
from collections.abc import Mapping
from typing import Any

from .constants import MEMORY_PEAK_USAGE

try:
    import resource
except ImportError:  # Windows
    resource = None  # type: ignore[assignment]


def peak_memory_usage() -> int:
    """Peak resident memory of the current process in bytes (0 if unknown)."""
    if resource is None:
        return 0
    peak = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
    # ru_maxrss is bytes on macOS, kilobytes elsewhere
    return int(peak) if sys.platform == "darwin" else int(peak) * 1024


def collect_telemetry(telemetry: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """
    Return a copy of ``telemetry`` with the default measurements filled in.

    Values already present are kept.
    """
    collected = dict(telemetry or {})
    collected.setdefault(MEMORY_PEAK_USAGE, peak_memory_usage())
    return collected
