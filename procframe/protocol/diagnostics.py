"""
Recognizers for fatal-error text written by a crashing child.

When a child dies before writing its response, its stderr holds whatever the
runtime printed. Each recognizer looks for one well-known shape and turns it
into a ``SerializableError``; ``recognize`` tries them in order.
"""

import re
from collections.abc import Callable

from .errors import SerializableError

Recognizer = Callable[[str], SerializableError | None]

_TRACEBACK_HEADER = "Traceback (most recent call last):"
_FRAME_LINE = re.compile(r'^\s+File "(?P<file>[^"]+)", line (?P<line>\d+)', re.MULTILINE)
_EXCEPTION_LINE = re.compile(r"^(?P<category>[A-Za-z_][\w.]*)(?::\s?(?P<message>.*))?$")
# Compile errors are reported without a traceback header
_HEADERLESS_CATEGORIES = ("SyntaxError", "IndentationError", "TabError")

_TIMESTAMPED_FATAL = re.compile(
    r"^\[(?P<timestamp>[^\]]+)\]\s+"
    r"(?:(?P<runtime>[A-Za-z]+)\s+)?"
    r"(?P<kind>Parse|Fatal|Syntax|Compile|Core)\s+error:\s+"
    r"(?P<message>.*?)\s+in\s+(?P<file>\S+?)(?:\s+on\s+line\s+|:)(?P<line>\d+)",
    re.MULTILINE,
)


def recognize_python_traceback(text: str) -> SerializableError | None:
    """
    Recognize a Python traceback or compile error report.

    The category and message come from the exception line that follows the
    innermost ``File "...", line N`` entry; that entry is the location.
    """
    frames = list(_FRAME_LINE.finditer(text))
    if not frames:
        return None

    last = frames[-1]
    for line in text[last.end() :].splitlines():
        if not line or line[0].isspace():
            continue
        match = _EXCEPTION_LINE.match(line.rstrip())
        if match:
            break
    else:
        return None

    category = match.group("category")
    if _TRACEBACK_HEADER not in text and category.rsplit(".", 1)[-1] not in _HEADERLESS_CATEGORIES:
        return None

    return SerializableError(
        category=category,
        message=match.group("message") or "",
        location=f"{last.group('file')}:{last.group('line')}",
        frames=[f"{f.group('file')}:{f.group('line')}" for f in frames],
    )


def recognize_timestamped_fatal(text: str) -> SerializableError | None:
    """
    Recognize a timestamped runtime fatal line.

    Example:
        [17-Mar-2023 16:54:06 Europe/Paris] PHP Parse error:  Expected T_CLASS
        or string, got foo in Unknown on line 0

    yields category ``ParseError`` and location ``Unknown:0``.
    """
    match = _TIMESTAMPED_FATAL.search(text)
    if not match:
        return None
    location = f"{match.group('file')}:{match.group('line')}"
    return SerializableError(
        category=f"{match.group('kind')}Error",
        message=match.group("message"),
        location=location,
        frames=[location],
    )


RECOGNIZERS: tuple[Recognizer, ...] = (
    recognize_python_traceback,
    recognize_timestamped_fatal,
)


def recognize(text: str) -> SerializableError | None:
    """Return the first recognizer match for ``text``, or None."""
    for recognizer in RECOGNIZERS:
        error = recognizer(text)
        if error is not None:
            return error
    return None
