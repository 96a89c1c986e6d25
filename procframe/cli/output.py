"""
Output writers for the procframe CLI.

Commands write through an ``OutputWriter`` so tests can capture what they
print without redirecting stdout.
"""

import sys
from typing import Protocol, TextIO


class OutputWriter(Protocol):
    """Protocol for CLI output writing."""

    def write(self, text: str = "") -> None:
        """Write text with trailing newline."""
        ...

    def write_raw(self, text: str) -> None:
        """Write text without trailing newline."""
        ...

    def flush(self) -> None:
        """Flush pending output."""
        ...


class ConsoleOutput:
    """
    Output writer for a text stream (stdout by default).

    Example:
        out = ConsoleOutput()
        out.write("exit value: 0")
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream if stream is not None else sys.stdout

    def write(self, text: str = "") -> None:
        print(text, file=self._stream)

    def write_raw(self, text: str) -> None:
        print(text, end="", file=self._stream)
        self._stream.flush()

    def flush(self) -> None:
        self._stream.flush()


class BufferedOutput:
    """
    Output writer capturing lines in memory.

    Raw writes are joined and prefixed to the next line.

    Example:
        out = BufferedOutput()
        out.write_raw("chunk ")
        out.write("done")
        assert out.lines == ["chunk done"]
    """

    def __init__(self) -> None:
        self._lines: list[str] = []
        self._raw_parts: list[str] = []

    def write(self, text: str = "") -> None:
        if self._raw_parts:
            prefix = "".join(self._raw_parts)
            self._raw_parts.clear()
            self._lines.append(prefix + text)
        else:
            self._lines.append(text)

    def write_raw(self, text: str) -> None:
        self._raw_parts.append(text)

    def flush(self) -> None:
        if self._raw_parts:
            self._lines.append("".join(self._raw_parts))
            self._raw_parts.clear()

    @property
    def lines(self) -> list[str]:
        return self._lines.copy()

    @property
    def text(self) -> str:
        self.flush()
        return "\n".join(self._lines) + ("\n" if self._lines else "")
