#!/usr/bin/env python3
"""
procframe CLI - run a child and inspect its response.

Usage:
    procframe run -- python worker.py
    procframe run --input request.bin --cwd /srv/jobs "php job.php --id=12"
    procframe parse captured-stderr.log
"""

import argparse
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

from .. import __version__
from ..config import ProcessConfig, load_config
from ..exceptions import ProcframeError, ProtocolError
from ..log import LogConfig, Logger, LoggerFactory
from ..process import Channel
from ..protocol import Response, SerializableError
from ..runner import run
from .output import ConsoleOutput, OutputWriter

Handler = Callable[[argparse.Namespace, OutputWriter, ProcessConfig, Logger], int]

_MAX_ERROR_TEXT = 200


def _describe_error(value: Any) -> str:
    if isinstance(value, SerializableError):
        return str(value)
    if isinstance(value, ProtocolError):
        text = value.message.strip().splitlines()
        last = text[-1] if text else "empty error output"
        return f"ProtocolError: {last[:_MAX_ERROR_TEXT]}"
    return f"{type(value).__name__}: {value}"


def write_summary(response: Response, out: OutputWriter) -> None:
    """Write a human readable summary of a response."""
    out.write(f"exit value: {response.exit_value}")
    value = response.return_value
    if isinstance(value, (BaseException, SerializableError)):
        out.write(f"error: {_describe_error(value)}")
    else:
        out.write(f"return value: {value!r}")
    if response.telemetry:
        fields = ", ".join(f"{k}={v}" for k, v in sorted(response.telemetry.items()))
        out.write(f"telemetry: {fields}")
    if response.stderr_length:
        out.write(f"stderr noise: {response.stderr_length} bytes")


def _exit_status(exit_code: int) -> int:
    # Shell convention for children killed by a signal
    return exit_code if exit_code >= 0 else 128 - exit_code


def _cmd_run(
    args: argparse.Namespace, out: OutputWriter, config: ProcessConfig, lg: Logger
) -> int:
    command = list(args.command)
    if command and command[0] == "--":
        command = command[1:]
    if not command:
        print("Error: no command given", file=sys.stderr)
        return 2

    input_data = None
    if args.input:
        path = Path(args.input)
        try:
            input_data = path.read_bytes()
        except OSError as e:
            print(f"Error: cannot read {path}: {e}", file=sys.stderr)
            return 2

    def echo(channel: Channel, chunk: str) -> None:
        if channel is Channel.OUTPUT or args.show_stderr:
            out.write_raw(chunk)

    result = run(
        command[0] if len(command) == 1 else command,
        input=input_data,
        cwd=args.cwd,
        on_output=echo,
        config=config,
        lg=LoggerFactory.derive(lg, "run"),
    )
    out.flush()
    write_summary(result.response, out)
    return _exit_status(result.exit_code)


def _cmd_parse(
    args: argparse.Namespace, out: OutputWriter, config: ProcessConfig, lg: Logger
) -> int:
    path = Path(args.file)
    try:
        data = path.read_bytes()
    except OSError as e:
        print(f"Error: cannot read {path}: {e}", file=sys.stderr)
        return 2
    response = Response.from_stderr(data, lg=LoggerFactory.derive(lg, "parse"))
    write_summary(response, out)
    return response.exit_value


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all commands registered."""
    parser = argparse.ArgumentParser(
        prog="procframe",
        description="Run child processes and recover their structured response",
    )
    parser.add_argument("--config", help="YAML configuration file")
    parser.add_argument("--log-level", help="log level (trace, debug, info, ...)")
    parser.add_argument(
        "-v", "--version", action="version", version=f"procframe {__version__}"
    )
    tools = parser.add_subparsers(dest="tool", required=True)

    run_parser = tools.add_parser("run", help="run a command and print its response")
    run_parser.add_argument("--cwd", help="working directory of the child")
    run_parser.add_argument("--input", help="file written to the child's stdin")
    run_parser.add_argument(
        "--show-stderr",
        action="store_true",
        help="echo the child's stderr along with its stdout",
    )
    run_parser.add_argument("command", nargs=argparse.REMAINDER, help="command to run")
    run_parser.set_defaults(handler=_cmd_run)

    parse_parser = tools.add_parser("parse", help="parse a captured stderr file")
    parse_parser.add_argument("file", help="file holding a child's stderr output")
    parse_parser.set_defaults(handler=_cmd_parse)

    return parser


def _setup(args: argparse.Namespace) -> tuple[ProcessConfig, Logger]:
    config = load_config(args.config) if args.config else {}
    log_config = LogConfig.from_config(config)
    if args.log_level:
        log_config = LogConfig.from_params(
            args.log_level, micros=log_config.micros, colors=log_config.colors
        )
    lg = LoggerFactory.create_root(log_config, stream=sys.stderr)
    return ProcessConfig.from_config(config), lg


def main(argv: list[str] | None = None, out: OutputWriter | None = None) -> int:
    """Main entry point for the procframe CLI."""
    args = build_parser().parse_args(argv)
    out = out or ConsoleOutput()

    try:
        config, lg = _setup(args)
    except ProcframeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    handler: Handler = args.handler
    try:
        return handler(args, out, config, lg)
    except ProcframeError as e:
        lg.error("command failed", extra={"tool": args.tool, "error": str(e)})
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
