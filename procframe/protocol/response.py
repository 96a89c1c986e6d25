"""
Response: the structured outcome of a child process.

A cooperating child ends its run by writing a response frame to stderr::

    <noise> STDERR_VALUE_SEPARATOR <encoded payload> <noise>

The payload encodes ``(wrapped return value, telemetry)`` and, only when it
differs from the default, the exit value as a third item. The return value is
wrapped in a closure so values of any kind, callables included, survive the
trip unchanged.

``Response.from_stderr`` reverses this on the parent side. It never raises:
a child that crashed before writing its frame is a routine outcome, so
unparsable output becomes an error return value instead.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from ..exceptions import ProtocolError, RemoteError
from ..log import Logger, get_logger
from .codec import Codec, default_codec
from .constants import STDERR_VALUE_SEPARATOR
from .diagnostics import recognize
from .errors import SerializableError, is_error_value
from .telemetry import collect_telemetry


def default_exit_value(return_value: Any) -> int:
    """Exit value implied by a return value: 1 for errors, 0 otherwise."""
    return 1 if is_error_value(return_value) else 0


def _wrap(value: Any) -> Callable[[], Any]:
    def return_value() -> Any:
        return value

    return return_value


def _to_bytes(buffer: bytes | bytearray | str) -> bytes:
    if isinstance(buffer, str):
        return buffer.encode("utf-8", "surrogateescape")
    return bytes(buffer)


class Response:
    """
    Return value, exit value and telemetry of one child run.

    Example:
        >>> Response("done").exit_value
        0
        >>> Response(ValueError("bad input")).exit_value
        1
    """

    def __init__(
        self,
        return_value: Any = None,
        exit_value: int | None = None,
        telemetry: Mapping[str, Any] | None = None,
        stderr_length: int = 0,
    ) -> None:
        """
        Args:
            return_value: Application value, or an exception / SerializableError
            exit_value: Explicit exit value; defaults to 1 for error values, else 0
            telemetry: Informational measurements (e.g. ``memoryPeakUsage``)
            stderr_length: Bytes of noise that preceded the frame in stderr
        """
        self._return_value = return_value
        self._exit_value = (
            default_exit_value(return_value) if exit_value is None else int(exit_value)
        )
        self._telemetry = dict(telemetry or {})
        self._stderr_length = stderr_length

    @property
    def return_value(self) -> Any:
        return self._return_value

    @property
    def exit_value(self) -> int:
        return self._exit_value

    @property
    def telemetry(self) -> dict[str, Any]:
        return dict(self._telemetry)

    @property
    def stderr_length(self) -> int:
        """Byte length of the stderr output preceding the response frame."""
        return self._stderr_length

    @property
    def is_error(self) -> bool:
        return self._exit_value != 0

    def raise_for_error(self) -> None:
        """
        Raise the error this response carries, if any.

        Native exceptions are raised as-is, ``SerializableError`` values are
        rebuilt with ``to_exception()``, and a non-zero exit value with a
        non-error return value raises ``RemoteError``.
        """
        if not self.is_error:
            return
        value = self._return_value
        if isinstance(value, SerializableError):
            raise value.to_exception()
        if isinstance(value, BaseException):
            raise value
        raise RemoteError(
            f"child reported exit value {self._exit_value}", category="ExitValue"
        )

    def get_payload(self, codec: Codec | None = None) -> bytes:
        """
        Encode this response the way a child writes it after the separator.

        Exceptions are converted to ``SerializableError`` so the parent does
        not need their types, and ``memoryPeakUsage`` is measured now when the
        telemetry does not carry it.
        """
        codec = codec or default_codec()
        value = self._return_value
        if isinstance(value, BaseException):
            value = SerializableError.from_exception(value)

        telemetry = collect_telemetry(self._telemetry)
        payload: tuple[Any, ...] = (_wrap(value), telemetry)
        if self._exit_value != default_exit_value(value):
            payload += (self._exit_value,)
        return codec.encode(payload)

    def frame(self, codec: Codec | None = None) -> bytes:
        """Separator followed by the encoded payload."""
        return STDERR_VALUE_SEPARATOR + self.get_payload(codec)

    @staticmethod
    def _decode_frame(data: bytes, codec: Codec) -> tuple[Any, dict[str, Any], int]:
        try:
            decoded = codec.decode(data)
        except ProtocolError:
            raise
        except Exception as e:
            raise ProtocolError("response payload could not be decoded", error=str(e)) from e

        if not isinstance(decoded, tuple) or len(decoded) not in (2, 3):
            raise ProtocolError("response payload is not a 2 or 3 item tuple")

        wrapper, telemetry = decoded[0], decoded[1]
        if not callable(wrapper):
            raise ProtocolError("response return value is not wrapped in a callable")
        if not isinstance(telemetry, dict):
            raise ProtocolError("response telemetry is not a mapping")

        try:
            return_value = wrapper()
        except Exception as e:
            raise ProtocolError(
                "response return value could not be unwrapped", error=str(e)
            ) from e

        if len(decoded) == 3:
            exit_value = decoded[2]
            if isinstance(exit_value, bool) or not isinstance(exit_value, int):
                raise ProtocolError("response exit value is not an integer")
        else:
            exit_value = default_exit_value(return_value)
        return return_value, telemetry, exit_value

    @classmethod
    def from_stderr(
        cls,
        buffer: bytes | bytearray | str,
        *,
        codec: Codec | None = None,
        lg: Logger | None = None,
    ) -> Response:
        """
        Build a response from the whole stderr output of a child.

        The first occurrence of the separator marks the frame; later
        occurrences are part of the payload region and ignored by the codec.
        Without a separator the output is matched against known fatal-error
        shapes, falling back to a ``ProtocolError`` carrying the raw text.

        Args:
            buffer: Captured stderr, as bytes or decoded text
            codec: Payload codec (default: ``CloudpickleCodec``)
            lg: Logger (default: the ``/procframe/protocol`` library logger)

        Returns:
            The response; never raises for malformed output
        """
        lg = lg or get_logger("/procframe/protocol")
        data = _to_bytes(buffer)
        pos = data.find(STDERR_VALUE_SEPARATOR)

        if pos == -1:
            text = data.decode("utf-8", "replace")
            error: SerializableError | ProtocolError | None = recognize(text)
            if error is None:
                if text:
                    lg.warning(
                        "unrecognized child error output", extra={"length": len(data)}
                    )
                error = ProtocolError(text)
            else:
                lg.debug("child crashed", extra={"error": str(error)})
            return cls(error, 1, {})

        try:
            return_value, telemetry, exit_value = cls._decode_frame(
                data[pos + len(STDERR_VALUE_SEPARATOR) :], codec or default_codec()
            )
        except ProtocolError as e:
            lg.warning(
                "undecodable response frame",
                extra={"error": str(e), "stderr_length": pos},
            )
            return cls(e, 1, {}, stderr_length=pos)

        return cls(return_value, exit_value, telemetry, stderr_length=pos)

    def __eq__(self, other: object) -> bool:
        # stderr_length is diagnostic only
        if not isinstance(other, Response):
            return NotImplemented
        return (
            self._return_value == other._return_value
            and self._exit_value == other._exit_value
            and self._telemetry == other._telemetry
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"Response(return_value={self._return_value!r}, "
            f"exit_value={self._exit_value}, telemetry={self._telemetry!r})"
        )
