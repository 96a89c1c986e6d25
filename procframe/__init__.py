"""
procframe: run work in throwaway child processes and recover its result.

The parent spawns a child with ``spawn`` (or ``run`` for the whole round
trip), the child reports through ``run_and_report`` / ``write_response``, and
the parent rebuilds the outcome with ``Response.from_stderr``.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("procframe")
except PackageNotFoundError:
    # Package not installed, use fallback (development mode)
    __version__ = "0.1.0-dev"

from .command import build_command_line, escape_arg
from .config import ProcessConfig, load_config
from .exceptions import (
    ConfigError,
    InvalidCallbackError,
    PipeCloseError,
    ProcessStateError,
    ProcframeError,
    ProtocolError,
    RemoteError,
    SpawnError,
    StatusError,
)
from .process import Channel, Process, ProcessState, ProcessStatus, spawn
from .protocol import (
    STDERR_VALUE_SEPARATOR,
    CloudpickleCodec,
    Codec,
    Response,
    SerializableError,
    run_and_report,
    write_response,
)
from .runner import RunResult, run

__all__ = [
    "__version__",
    # Command line
    "build_command_line",
    "escape_arg",
    # Process handle
    "Channel",
    "Process",
    "ProcessState",
    "ProcessStatus",
    "spawn",
    # Protocol
    "STDERR_VALUE_SEPARATOR",
    "CloudpickleCodec",
    "Codec",
    "Response",
    "SerializableError",
    "run_and_report",
    "write_response",
    # Runner
    "RunResult",
    "run",
    # Config
    "ProcessConfig",
    "load_config",
    # Exceptions
    "ProcframeError",
    "SpawnError",
    "StatusError",
    "PipeCloseError",
    "InvalidCallbackError",
    "ProcessStateError",
    "ProtocolError",
    "RemoteError",
    "ConfigError",
]
