"""Tests for CLI output writers."""

import io

import pytest

from procframe.cli.output import BufferedOutput, ConsoleOutput, OutputWriter


@pytest.mark.unit
class TestConsoleOutput:
    """Test ConsoleOutput."""

    def test_write_adds_newline(self):
        """Test lines end with a newline."""
        stream = io.StringIO()
        ConsoleOutput(stream).write("exit value: 0")
        assert stream.getvalue() == "exit value: 0\n"

    def test_write_raw(self):
        """Test raw writes are passed through unchanged."""
        stream = io.StringIO()
        out = ConsoleOutput(stream)
        out.write_raw("chunk")
        out.write_raw(" more")
        assert stream.getvalue() == "chunk more"

    def test_is_output_writer(self):
        """Test ConsoleOutput provides the writer methods."""
        writer: OutputWriter = ConsoleOutput(io.StringIO())
        writer.flush()


@pytest.mark.unit
class TestBufferedOutput:
    """Test BufferedOutput."""

    def test_lines(self):
        """Test lines are captured."""
        out = BufferedOutput()
        out.write("one")
        out.write()
        assert out.lines == ["one", ""]

    def test_raw_prefixes_next_line(self):
        """Test raw writes join the next line."""
        out = BufferedOutput()
        out.write_raw("chunk ")
        out.write("done")
        assert out.lines == ["chunk done"]

    def test_flush_keeps_raw_text(self):
        """Test flush turns pending raw text into a line."""
        out = BufferedOutput()
        out.write_raw("partial")
        out.flush()
        out.flush()
        assert out.lines == ["partial"]

    def test_text(self):
        """Test text joins all lines."""
        out = BufferedOutput()
        out.write("a")
        out.write_raw("b")
        assert out.text == "a\nb\n"
        assert BufferedOutput().text == ""
