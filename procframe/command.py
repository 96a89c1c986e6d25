"""
Command line formatting.

Turns a command given either as a string or as a list of arguments into a
list of arguments, each one safe to use as a single shell word.

Example:
    >>> build_command_line("git log --format='%h %s' -n 5")
    ["'git'", "'log'", "--format='%h %s'", "'-n'", "'5'"]
    >>> build_command_line(["php", "", "0", "-v"])
    ['php', '0', '-v']
"""

import re
from collections.abc import Sequence
from typing import Any

# Alternatives are tried in order at each position, so the quoted assignment
# forms must come before the unquoted ones.
_TOKEN_PATTERN = re.compile(
    r"-{1,2}[A-Za-z0-9_-]+='(?:\\'|[^'])*'"  # --opt='foo \'esc\' bar' -o='foo'
    r'|-{1,2}[A-Za-z0-9_-]+="(?:\\"|[^"])*"'  # --opt="foo \"esc\" bar" -o="foo"
    r"|-{1,2}[A-Za-z0-9_-]+=\S+"  # -o=val --opt=val
    r"|-{1,2}[A-Za-z0-9_-]+"  # -f --flag
    r"""|[^\s"']+"""  # command
    r'|"(?:\\"|[^"])+"'  # "some \"esc\" value"
    r"|'(?:\\'|[^'])+'"  # 'some \'esc\' value'
)

_SINGLE_QUOTED = re.compile(r"^'(?:\\'|[^'])*'$")
_DOUBLE_QUOTED = re.compile(r'^"(?:\\"|[^"])*"$')


def escape_arg(arg: str) -> str:
    """
    Quote a string so a POSIX shell reads it back as exactly one word.

    The value is always wrapped in single quotes; embedded single quotes are
    closed, escaped and reopened.

    Example:
        >>> escape_arg("it's")
        "'it'\\\\''s'"
    """
    return "'" + arg.replace("'", "'\\''") + "'"


def _is_numeric(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _format_token(token: str) -> str:
    """Escape one token, trusting the caller's quoting of `key='value'` forms."""
    if "=" in token:
        key, value = token.split("=", 1)
        if _SINGLE_QUOTED.match(value) or _DOUBLE_QUOTED.match(value):
            return f"{key}={value}"
    return escape_arg(token)


def build_command_line(command: str | Sequence[Any] | None) -> list[str]:
    """
    Build a list format command line from a string or list command line.

    List input is kept as-is except for empty fragments, which are dropped;
    numeric values such as ``0`` are kept (and converted to ``str``). String
    input is tokenized and each token escaped for the shell; option
    assignments whose value is already single or double quoted are kept
    untouched.

    Args:
        command: The command line to parse

    Returns:
        The command line as a list of arguments; empty for empty input
    """
    if not command:
        return []

    if not isinstance(command, str):
        return [
            arg if isinstance(arg, str) else str(arg)
            for arg in command
            if arg or _is_numeric(arg)
        ]

    return [
        _format_token(match.group(0))
        for match in _TOKEN_PATTERN.finditer(command)
        if match.group(0)
    ]
