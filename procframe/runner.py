"""
One-shot execution: run a child to completion and parse its response.

Example:
    result = run([sys.executable, "job.py"], input=b"payload")
    if result.response.is_error:
        result.response.raise_for_error()
    print(result.response.return_value)
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from .command import build_command_line
from .config import ProcessConfig
from .exceptions import InvalidCallbackError
from .log import Logger, get_logger
from .process import RealtimeCallback, spawn
from .protocol import Codec, Response


@dataclass(frozen=True)
class RunResult:
    """
    Outcome of ``run``: exit code, captured output and parsed response.

    ``stderr`` is decoded for display; the response is parsed from
    ``raw_stderr``, the bytes exactly as the child wrote them.
    """

    exit_code: int
    stdout: str
    stderr: str
    response: Response
    raw_stderr: bytes = b""

    @property
    def ok(self) -> bool:
        return self.exit_code == 0 and not self.response.is_error


def run(
    command: str | Sequence[Any],
    *,
    input: bytes | str | None = None,
    cwd: str | None = None,
    env: Mapping[str, Any] | None = None,
    on_output: RealtimeCallback | None = None,
    codec: Codec | None = None,
    config: ProcessConfig | None = None,
    lg: Logger | None = None,
) -> RunResult:
    """
    Run a command to completion and parse the response from its stderr.

    The command goes through ``build_command_line``; a string command is then
    run through the shell, a list command directly. ``input`` is fed to
    stdin while both output pipes are drained as data arrives, and stdin is
    closed once it is written. A child writing a lot to either stream, or
    echoing a large input back, cannot stall.

    Args:
        command: Command string or argument list
        input: Data written to the child's stdin
        cwd: Working directory, or None for the current one
        env: Environment variables, or None to inherit the current ones
        on_output: Optional ``callback(channel, chunk)`` receiving chunks live
        codec: Response payload codec
        config: Process settings
        lg: Logger (default: the ``/procframe/runner`` library logger)

    Raises:
        InvalidCallbackError: If ``on_output`` is given but not callable
        SpawnError: If the process cannot be started
    """
    if on_output is not None and not callable(on_output):
        raise InvalidCallbackError("output callback should be callable")

    lg = lg or get_logger("/procframe/runner")
    args = build_command_line(command)
    proc = spawn(
        " ".join(args) if isinstance(command, str) else args,
        cwd,
        env,
        config=config,
        lg=lg,
    )

    with proc:
        exit_code, stdout, stderr = proc.communicate(input, on_output)

    response = Response.from_stderr(stderr, codec=codec, lg=lg)
    lg.debug(
        "run finished",
        extra={"exit_code": exit_code, "exit_value": response.exit_value},
    )
    encoding, errors = proc.config.encoding, proc.config.errors
    return RunResult(
        exit_code=exit_code,
        stdout=stdout.decode(encoding, errors),
        stderr=stderr.decode(encoding, errors),
        response=response,
        raw_stderr=stderr,
    )
