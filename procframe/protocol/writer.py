"""
Child-side helpers writing the response frame.

A child script reports its outcome with::

    from procframe.protocol import run_and_report

    sys.exit(run_and_report(main))
"""

import sys
from collections.abc import Callable
from typing import Any, BinaryIO

from .codec import Codec
from .response import Response


def write_response(
    response: Response,
    stream: BinaryIO | None = None,
    codec: Codec | None = None,
) -> None:
    """
    Write the response frame to ``stream`` (default: the process stderr).

    Text already buffered in ``sys.stderr`` is flushed first so it lands
    before the frame.
    """
    if stream is None:
        sys.stderr.flush()
        stream = sys.stderr.buffer
    stream.write(response.frame(codec))
    stream.flush()


def run_and_report(
    fn: Callable[..., Any],
    *args: Any,
    stream: BinaryIO | None = None,
    codec: Codec | None = None,
    **kwargs: Any,
) -> int:
    """
    Call ``fn`` and write its outcome as a response frame.

    An exception raised by ``fn`` becomes the response's return value.

    Returns:
        The response exit value, meant for ``sys.exit``
    """
    try:
        response = Response(fn(*args, **kwargs))
    except Exception as e:
        response = Response(e)
    write_response(response, stream, codec)
    return response.exit_value
