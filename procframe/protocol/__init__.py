"""
Response protocol carried on a child's stderr.

Writer side: ``write_response`` / ``run_and_report``.
Reader side: ``Response.from_stderr``.
"""

from .codec import CloudpickleCodec, Codec, default_codec
from .constants import MEMORY_PEAK_USAGE, PROTOCOL_VERSION, STDERR_VALUE_SEPARATOR
from .diagnostics import recognize
from .errors import SerializableError, is_error_value
from .response import Response, default_exit_value
from .telemetry import collect_telemetry, peak_memory_usage
from .writer import run_and_report, write_response

__all__ = [
    "MEMORY_PEAK_USAGE",
    "PROTOCOL_VERSION",
    "STDERR_VALUE_SEPARATOR",
    "CloudpickleCodec",
    "Codec",
    "Response",
    "SerializableError",
    "collect_telemetry",
    "default_codec",
    "default_exit_value",
    "is_error_value",
    "peak_memory_usage",
    "recognize",
    "run_and_report",
    "write_response",
]
