"""
Child process fixtures.

Children are short Python programs run with the current interpreter. The ones
that report a response import procframe, so they get the repository root on
their ``PYTHONPATH``.
"""

import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]

# Copies stdin to stdout as it arrives, without waiting for end-of-input
ECHO_CODE = (
    "import sys\n"
    "while True:\n"
    "    chunk = sys.stdin.buffer.read1(65536)\n"
    "    if not chunk:\n"
    "        break\n"
    "    sys.stdout.buffer.write(chunk)\n"
    "    sys.stdout.buffer.flush()\n"
)


def python_command(code: str) -> list[str]:
    """Command running ``code`` with the current interpreter."""
    return [sys.executable, "-c", code]


def reporting_child(body: str) -> list[str]:
    """
    Command for a child reporting ``main()``'s outcome with ``run_and_report``.

    ``body`` must define ``main``.
    """
    code = (
        "import sys\n"
        "from procframe.protocol import run_and_report\n"
        f"{body}\n"
        "sys.exit(run_and_report(main))\n"
    )
    return python_command(code)


@pytest.fixture
def child_env() -> dict[str, str]:
    """Environment letting children import procframe from the repository."""
    env = dict(os.environ)
    existing = env.get("PYTHONPATH")
    env["PYTHONPATH"] = str(ROOT) + (os.pathsep + existing if existing else "")
    return env
