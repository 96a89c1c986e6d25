"""
Process handle: spawn one child process and talk to it through its pipes.

A ``Process`` owns the OS process and its three standard streams from spawn
until ``close()``. Reads either drain a pipe to end-of-stream (``read`` and
``read_error``) or consume both output pipes progressively as data arrives
(``stream_realtime``).

Example:
    proc = spawn([sys.executable, "worker.py"])
    proc.write(request)
    proc.close_input()
    output = proc.read()
    errors = proc.read_error()
    exit_code = proc.close()
    response = Response.from_stderr(errors)

Note:
    ``read`` blocks until the child closes its stdout. A child that fills its
    stderr pipe while the parent is blocked on stdout will stall; use
    ``communicate`` or ``stream_realtime`` for children that write a lot to
    both streams or echo a large input back.
"""

from __future__ import annotations

import codecs
import os
import select
import selectors
import subprocess
from collections.abc import Callable, Mapping, Sequence
from dataclasses import asdict, dataclass
from enum import Enum
from typing import IO, Any

from .config import ProcessConfig
from .exceptions import (
    InvalidCallbackError,
    PipeCloseError,
    ProcessStateError,
    SpawnError,
    StatusError,
)
from .log import Logger, get_logger


class Channel(str, Enum):
    """Kind of the pipe a realtime chunk was read from."""

    OUTPUT = "output"
    ERROR = "error"


class ProcessState(Enum):
    """Lifecycle of a process handle."""

    CREATED = "created"
    RUNNING = "running"
    CLOSED = "closed"


@dataclass(frozen=True)
class ProcessStatus:
    """
    Snapshot of a process status as reported by the OS.

    ``exitcode`` is None while the process runs; a negative value means the
    process was terminated by the signal ``-exitcode``.
    """

    command: str
    pid: int
    running: bool
    signaled: bool
    exitcode: int | None
    termsig: int

    def get(self, key: str, default: Any = None) -> Any:
        """Map-style access to a status field."""
        return self.as_dict().get(key, default)

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


RealtimeCallback = Callable[[Channel, str], Any]

_PIPE_BUF = getattr(select, "PIPE_BUF", 512)


def _display_command(command: str | Sequence[str]) -> str:
    return command if isinstance(command, str) else " ".join(command)


class Process:
    """
    Handle on one spawned child process.

    The handle moves through ``CREATED -> RUNNING -> CLOSED``. Stream
    operations are valid only while running; ``close()`` must be called
    exactly once to release the pipes and reap the exit code, either directly,
    through ``stream_realtime``, or by leaving a ``with`` block.

    A string command is run through the shell and must already be escaped
    (see ``build_command_line``); a list command is executed directly.
    """

    def __init__(
        self,
        command: str | Sequence[str],
        cwd: str | None = None,
        env: Mapping[str, Any] | None = None,
        *,
        config: ProcessConfig | None = None,
        lg: Logger | None = None,
    ) -> None:
        """
        Initialize the handle without starting the process.

        Args:
            command: Command string (shell) or argument list
            cwd: Working directory, or None for the current one
            env: Environment variables, or None to inherit the current ones
            config: Process settings (encoding, realtime chunk size, poll interval)
            lg: Logger (default: the ``/procframe/process`` library logger)
        """
        self._command = command if isinstance(command, str) else list(command)
        self._cwd = cwd
        self._env = None if env is None else {str(k): str(v) for k, v in env.items()}
        self._config = config or ProcessConfig()
        self._lg = lg or get_logger("/procframe/process")
        self._proc: subprocess.Popen[bytes] | None = None
        self._state = ProcessState.CREATED

    @property
    def command(self) -> str | list[str]:
        return self._command

    @property
    def state(self) -> ProcessState:
        return self._state

    @property
    def pid(self) -> int | None:
        """OS process id, or None before the process is started."""
        return self._proc.pid if self._proc is not None else None

    @property
    def config(self) -> ProcessConfig:
        return self._config

    def start(self) -> Process:
        """
        Start the process.

        Returns:
            self, now running

        Raises:
            ProcessStateError: If the process was already started
            SpawnError: If the OS cannot create the process
        """
        if self._state is not ProcessState.CREATED:
            raise ProcessStateError("process already started", state=self._state.value)

        display = _display_command(self._command)
        if not self._command:
            raise SpawnError("process could not be started: empty command")
        self._lg.debug("running command", extra={"command": display, "cwd": self._cwd})
        try:
            self._proc = subprocess.Popen(
                self._command,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                cwd=self._cwd,
                env=self._env,
                shell=isinstance(self._command, str),
                bufsize=0,
            )
        except (OSError, ValueError) as e:
            self._lg.error(
                "process could not be started",
                extra={"command": display, "error": str(e)},
            )
            raise SpawnError(f'process "{display}" could not be started', error=str(e)) from e

        self._state = ProcessState.RUNNING
        self._lg.debug("process started", extra={"pid": self._proc.pid})
        return self

    def _running_proc(self) -> subprocess.Popen[bytes]:
        if self._state is not ProcessState.RUNNING or self._proc is None:
            raise ProcessStateError("process is not running", state=self._state.value)
        return self._proc

    def _pipe(self, name: str) -> IO[bytes]:
        pipe = getattr(self._running_proc(), name)
        if pipe is None or pipe.closed:
            raise ProcessStateError(f"process {name} pipe is closed", stream=name)
        return pipe

    def _decode(self, data: bytes) -> str:
        return data.decode(self._config.encoding, self._config.errors)

    def write(self, data: bytes | str) -> int:
        """
        Write to the process stdin.

        The pipe is unbuffered: the data goes straight to the OS, which may
        accept only part of it; no retry is attempted.

        Args:
            data: Bytes, or text encoded with the configured encoding

        Returns:
            Number of bytes written

        Raises:
            ProcessStateError: If the process is not running or stdin is closed
            BrokenPipeError: If the child closed its end of the pipe
        """
        pipe = self._pipe("stdin")
        if isinstance(data, str):
            data = data.encode(self._config.encoding)
        return pipe.write(data) or 0

    def close_input(self) -> None:
        """Close stdin so a child reading its input to EOF can proceed."""
        proc = self._running_proc()
        if proc.stdin is not None and not proc.stdin.closed:
            proc.stdin.close()

    def _read_pipe(self, name: str, max_length: int | None) -> str:
        pipe = self._pipe(name)
        if not max_length:
            return self._decode(pipe.read() or b"")

        data = bytearray()
        while len(data) < max_length:
            chunk = os.read(pipe.fileno(), max_length - len(data))
            if not chunk:
                break
            data += chunk
        return self._decode(bytes(data))

    def read(self, max_length: int | None = None) -> str:
        """
        Read the process stdout until end-of-stream.

        Args:
            max_length: Stop after this many bytes; None or 0 reads everything

        Returns:
            The decoded output
        """
        return self._read_pipe("stdout", max_length)

    def read_error(self, max_length: int | None = None) -> str:
        """
        Read the process stderr until end-of-stream.

        Args:
            max_length: Stop after this many bytes; None or 0 reads everything

        Returns:
            The decoded error output
        """
        return self._read_pipe("stderr", max_length)

    def status(self) -> ProcessStatus:
        """
        Query the OS for the process status.

        Raises:
            StatusError: If the process was never started, was already
                reaped by ``close()``, or the OS cannot report its status
        """
        if self._state is not ProcessState.RUNNING or self._proc is None:
            raise StatusError(
                "failed to gather the process current status", state=self._state.value
            )
        try:
            returncode = self._proc.poll()
        except OSError as e:
            raise StatusError(
                "failed to gather the process current status", pid=self._proc.pid
            ) from e

        signaled = returncode is not None and returncode < 0
        return ProcessStatus(
            command=_display_command(self._command),
            pid=self._proc.pid,
            running=returncode is None,
            signaled=signaled,
            exitcode=returncode,
            termsig=-returncode if signaled and returncode is not None else 0,
        )

    def stream_realtime(
        self, callback: RealtimeCallback, *, input: bytes | str | None = None
    ) -> int:
        """
        Consume stderr and stdout as data arrives, then close the process.

        ``callback(channel, chunk)`` is invoked for every non-empty chunk;
        within one readiness batch stderr is delivered before stdout. The loop
        waits on pipe readiness (up to ``poll_interval`` seconds at a time) and
        ends once the process has exited and no pipe has data left.

        When ``input`` is given it is fed to stdin from the same loop, a slice
        at a time whenever the pipe can take it, and stdin is closed once it
        has all been written. A child echoing a large input back therefore
        never blocks on a full stdout pipe.

        Args:
            callback: Called with the ``Channel`` and the decoded chunk
            input: Data for stdin, or None to leave stdin as it is

        Returns:
            The process exit code, as returned by ``close()``

        Raises:
            InvalidCallbackError: If ``callback`` is not callable; raised
                before the process is touched
        """
        if not callable(callback):
            raise InvalidCallbackError("realtime callback should be callable")

        def forward(channel: Channel, chunk: bytes, text: str) -> None:
            if text:
                callback(channel, text)

        self._pump(forward, input)
        return self.close()

    def communicate(
        self, input: bytes | str | None = None, on_output: RealtimeCallback | None = None
    ) -> tuple[int, bytes, bytes]:
        """
        Feed ``input``, collect both output pipes, then close the process.

        stdin is closed once the input is written, or straight away when
        there is none. Decoded chunks are forwarded to ``on_output`` as in
        ``stream_realtime``; the collected output is returned undecoded.

        Returns:
            Tuple of (exit code, stdout bytes, stderr bytes)
        """
        if on_output is not None and not callable(on_output):
            raise InvalidCallbackError("output callback should be callable")

        chunks: dict[Channel, list[bytes]] = {Channel.OUTPUT: [], Channel.ERROR: []}

        def collect(channel: Channel, chunk: bytes, text: str) -> None:
            chunks[channel].append(chunk)
            if text and on_output is not None:
                on_output(channel, text)

        self._pump(collect, b"" if input is None else input)
        exit_code = self.close()
        return exit_code, b"".join(chunks[Channel.OUTPUT]), b"".join(chunks[Channel.ERROR])

    def _pump(
        self, on_data: Callable[[Channel, bytes, str], Any], input: bytes | str | None
    ) -> None:
        proc = self._running_proc()
        config = self._config
        decoders = {}
        pending = memoryview(b"")

        with selectors.DefaultSelector() as selector:
            if input is not None:
                if isinstance(input, str):
                    input = input.encode(config.encoding)
                pending = memoryview(input)
                if pending:
                    selector.register(self._pipe("stdin"), selectors.EVENT_WRITE, None)
                else:
                    self.close_input()

            for channel, pipe in ((Channel.ERROR, proc.stderr), (Channel.OUTPUT, proc.stdout)):
                if pipe is None or pipe.closed:
                    continue
                selector.register(pipe, selectors.EVENT_READ, channel)
                decoders[channel] = codecs.getincrementaldecoder(config.encoding)(config.errors)

            while selector.get_map():
                running = self.status().running
                events = selector.select(timeout=config.poll_interval)
                events.sort(key=lambda event: event[0].data is not Channel.ERROR)

                for key, _ in events:
                    channel = key.data
                    if channel is None:
                        pending = self._feed(key.fd, pending)
                        if not pending:
                            selector.unregister(key.fileobj)
                            self.close_input()
                        continue

                    chunk = os.read(key.fd, config.chunk_size)
                    if not chunk:
                        selector.unregister(key.fileobj)
                    text = decoders[channel].decode(chunk, final=not chunk)
                    if chunk or text:
                        self._lg.trace(
                            "stream chunk", extra={"channel": channel.value, "size": len(chunk)}
                        )
                        on_data(channel, chunk, text)

                if not running and not events:
                    break

            if pending:
                self.close_input()

    def _feed(self, fd: int, pending: memoryview) -> memoryview:
        # writes up to PIPE_BUF bytes never block once the pipe reports writable
        try:
            written = os.write(fd, pending[:_PIPE_BUF])
        except BrokenPipeError:
            self._lg.debug(
                "child closed its input early",
                extra={"pid": self._running_proc().pid, "pending": len(pending)},
            )
            return memoryview(b"")
        return pending[written:]

    def close(self) -> int:
        """
        Close the pipes (stdin, stdout, stderr, in that order) and reap the process.

        Returns:
            The process exit code (negative if terminated by a signal)

        Raises:
            PipeCloseError: If a pipe cannot be closed; the remaining pipes
                are left open and the process is not reaped
            ProcessStateError: If the process is not running (never started
                or already closed)
        """
        proc = self._running_proc()

        for name in ("stdin", "stdout", "stderr"):
            pipe = getattr(proc, name)
            if pipe is None:
                continue
            try:
                pipe.close()
            except OSError as e:
                raise PipeCloseError(
                    f"could not close the process {name.upper()} pipe", stream=name
                ) from e

        exit_code = proc.wait()
        self._state = ProcessState.CLOSED
        self._lg.debug("process closed", extra={"pid": proc.pid, "exit_code": exit_code})
        return exit_code

    def __enter__(self) -> Process:
        if self._state is ProcessState.CREATED:
            self.start()
        return self

    def __exit__(self, *args: object) -> None:
        if self._state is ProcessState.RUNNING:
            self.close()

    def __repr__(self) -> str:
        return (
            f"Process(command={_display_command(self._command)!r}, "
            f"pid={self.pid}, state={self._state.value})"
        )


def spawn(
    command: str | Sequence[str],
    cwd: str | None = None,
    env: Mapping[str, Any] | None = None,
    *,
    config: ProcessConfig | None = None,
    lg: Logger | None = None,
) -> Process:
    """
    Start a process and return its running handle.

    Raises:
        SpawnError: If the OS cannot create the process
    """
    return Process(command, cwd, env, config=config, lg=lg).start()
