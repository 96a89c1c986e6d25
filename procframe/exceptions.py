"""
Exception hierarchy for procframe.

Process lifecycle failures (spawn, status, pipe close) are raised to the caller
as soon as they happen. Protocol anomalies are not raised: the response parser
turns them into a ``ProtocolError`` value carried by the ``Response``.
"""

from typing import Any


class ProcframeError(Exception):
    """
    Base exception for all procframe errors.

    Example:
        try:
            proc = spawn(["php", "worker.php"])
        except ProcframeError as e:
            lg.error("could not run worker", extra={"error": str(e)})
    """

    def __init__(self, message: str, **context: Any) -> None:
        """
        Initialize the exception with a message and optional context.

        Args:
            message: Human-readable error message
            **context: Additional context information (stored in self.context)
        """
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        """String representation with context if available."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


class SpawnError(ProcframeError):
    """
    The operating system could not create the process.

    Examples:
        - Executable not found
        - Permission denied
        - Resource exhaustion (fork failed)
    """

    pass


class StatusError(ProcframeError):
    """The operating system could not report the process status."""

    pass


class PipeCloseError(ProcframeError):
    """
    Closing one of the process pipes failed.

    The failing pipe is available as ``context["stream"]`` (one of
    ``"stdin"``, ``"stdout"``, ``"stderr"``).
    """

    @property
    def stream(self) -> str | None:
        return self.context.get("stream")


class InvalidCallbackError(ProcframeError, TypeError):
    """Realtime streaming was requested without a callable callback."""

    pass


class ProcessStateError(ProcframeError):
    """An operation was attempted in the wrong lifecycle state."""

    pass


class ConfigError(ProcframeError):
    """
    Configuration-related errors.

    Examples:
        - Config file not found
        - Invalid YAML syntax
        - Invalid configuration value type or range
    """

    pass


class ProtocolError(ProcframeError):
    """
    A child's error stream could not be turned into a response.

    Never raised by the parser: it is used as the response return value,
    carrying the raw diagnostic text as its message.
    """

    pass


class RemoteError(ProcframeError):
    """
    An error raised in a child process whose native type is not available.

    Rebuilt from a ``SerializableError`` by ``SerializableError.to_exception()``.
    """

    def __init__(
        self,
        message: str,
        category: str = "Exception",
        location: str | None = None,
        frames: list[str] | None = None,
    ) -> None:
        context: dict[str, Any] = {"category": category}
        if location:
            context["location"] = location
        super().__init__(message, **context)
        self.category = category
        self.location = location
        self.frames = list(frames or [])
