"""
Value codec for response frames.

The codec turns a value into ASCII bytes that can be written to a text stream
and back. ``CloudpickleCodec`` handles plain values, closures and exceptions;
any object implementing the ``Codec`` protocol can replace it.
"""

import base64
import re
from typing import Any, Protocol, runtime_checkable

import cloudpickle

from ..exceptions import ProtocolError

# The payload ends where the base64 alphabet does, so bytes written after it
# by something else sharing the stream are left out.
_BASE64_RUN = re.compile(rb"[A-Za-z0-9+/]*={0,2}")


@runtime_checkable
class Codec(Protocol):
    """Encode/decode pair used for response payloads."""

    def encode(self, value: Any) -> bytes:
        """Encode a value to bytes."""
        ...

    def decode(self, data: bytes) -> Any:
        """
        Decode a value from bytes.

        Must ignore trailing bytes after the end of the encoded value and
        raise ``ProtocolError`` for data it cannot decode.
        """
        ...


class CloudpickleCodec:
    """
    Codec pickling values with cloudpickle and armoring them in base64.

    Decoding tolerates trailing noise twice over: the base64 run stops at
    the first character outside the alphabet, and pickle ignores any bytes
    past its STOP opcode when noise happens to look like base64.
    """

    def __init__(self, protocol: int | None = None) -> None:
        """
        Args:
            protocol: Pickle protocol (default: cloudpickle's default)
        """
        self._protocol = protocol

    def encode(self, value: Any) -> bytes:
        return base64.b64encode(cloudpickle.dumps(value, protocol=self._protocol))

    def decode(self, data: bytes) -> Any:
        match = _BASE64_RUN.match(data)
        encoded = match.group(0) if match else b""
        encoded = encoded[: len(encoded) - len(encoded) % 4]
        if not encoded:
            raise ProtocolError("empty response payload")
        try:
            return cloudpickle.loads(base64.b64decode(encoded))
        except Exception as e:
            # Corrupt data can fail anywhere inside the unpickler
            raise ProtocolError(
                "malformed response payload", error=f"{type(e).__name__}: {e}"
            ) from e


_default_codec = CloudpickleCodec()


def default_codec() -> Codec:
    """The codec used when none is given."""
    return _default_codec
