"""Command line interface for procframe."""

from .cli import build_parser, main
from .output import BufferedOutput, ConsoleOutput, OutputWriter

__all__ = ["BufferedOutput", "ConsoleOutput", "OutputWriter", "build_parser", "main"]
