"""
End-to-end tests: parent and child on both sides of the protocol.

Each child is a script file using the public procframe API, run through
``spawn`` or ``run`` exactly as an application would.
"""

import os
import signal
import sys
import textwrap

import pytest

from procframe import Channel, ProtocolError, Response, run, spawn


def write_script(temp_dir, name, source):
    path = temp_dir / name
    path.write_text(textwrap.dedent(source))
    return path


@pytest.mark.e2e
class TestChildRoundTrip:
    """Test complete parent/child exchanges."""

    def test_callable_return_value(self, temp_dir, child_env):
        """Test a closure built in the child runs in the parent."""
        script = write_script(
            temp_dir,
            "make_adder.py",
            """
            import sys
            from procframe import run_and_report

            def main(step):
                def add(x):
                    return x + step
                return add

            sys.exit(run_and_report(main, int(sys.argv[1])))
            """,
        )
        result = run([sys.executable, str(script), 5], env=child_env)
        assert result.ok
        assert result.response.return_value(10) == 15

    def test_noise_around_frame(self, temp_dir, child_env):
        """Test diagnostics before and after the frame are tolerated."""
        script = write_script(
            temp_dir,
            "noisy.py",
            """
            import sys
            from procframe import Response, write_response

            sys.stderr.write("DeprecationWarning: old call\\n")
            write_response(Response({"rows": 3}, telemetry={"elapsed": 0.5}))
            sys.stderr.write("atexit: cleanup done\\n")
            """,
        )
        result = run([sys.executable, str(script)], env=child_env)
        response = result.response
        assert response.return_value == {"rows": 3}
        assert response.telemetry["elapsed"] == 0.5
        assert response.stderr_length == len(b"DeprecationWarning: old call\n")

    def test_explicit_exit_value(self, temp_dir, child_env):
        """Test a child can report a partial failure with a plain value."""
        script = write_script(
            temp_dir,
            "partial.py",
            """
            import sys
            from procframe import Response, write_response

            write_response(Response(["a.csv"], exit_value=2))
            sys.exit(2)
            """,
        )
        result = run([sys.executable, str(script)], env=child_env)
        assert result.exit_code == 2
        assert result.response.return_value == ["a.csv"]
        assert result.response.exit_value == 2

    def test_manual_handle(self, temp_dir, child_env):
        """Test the process handle used step by step."""
        script = write_script(
            temp_dir,
            "echo_request.py",
            """
            import sys
            from procframe import run_and_report

            def main():
                request = sys.stdin.read()
                print("received", len(request))
                return request[::-1]

            sys.exit(run_and_report(main))
            """,
        )
        proc = spawn([sys.executable, str(script)], env=child_env)
        proc.write("abc")
        proc.close_input()
        output = proc.read()
        errors = proc.read_error()
        assert proc.close() == 0
        assert output == "received 3\n"
        assert Response.from_stderr(errors).return_value == "cba"

    def test_realtime_progress(self, temp_dir, child_env):
        """Test progress lines arrive before the response."""
        script = write_script(
            temp_dir,
            "progress.py",
            """
            import sys
            import time
            from procframe import run_and_report

            def main():
                for i in range(3):
                    print(f"step {i}", flush=True)
                    time.sleep(0.05)
                return "finished"

            sys.exit(run_and_report(main))
            """,
        )
        events = []
        result = run(
            [sys.executable, str(script)],
            env=child_env,
            on_output=lambda channel, chunk: events.append((channel, chunk)),
        )
        assert result.response.return_value == "finished"
        output = [chunk for channel, chunk in events if channel is Channel.OUTPUT]
        assert "".join(output) == "step 0\nstep 1\nstep 2\n"
        first_error = next(i for i, (channel, _) in enumerate(events) if channel is Channel.ERROR)
        assert first_error > 0

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX signals")
    def test_child_killed_before_reporting(self, temp_dir):
        """Test a child killed by a signal yields a ProtocolError."""
        script = write_script(
            temp_dir,
            "suicide.py",
            """
            import os
            import signal

            os.kill(os.getpid(), signal.SIGKILL)
            """,
        )
        result = run([sys.executable, str(script)])
        assert result.exit_code == -signal.SIGKILL
        assert isinstance(result.response.return_value, ProtocolError)
        assert result.response.exit_value == 1

    def test_cwd_and_env(self, temp_dir, child_env):
        """Test the child sees the requested directory and variables."""
        script = write_script(
            temp_dir,
            "context.py",
            """
            import os
            import sys
            from procframe import run_and_report

            sys.exit(run_and_report(lambda: (os.getcwd(), os.environ["JOB_ID"])))
            """,
        )
        workdir = temp_dir / "work"
        workdir.mkdir()
        result = run(
            [sys.executable, str(script)],
            cwd=str(workdir),
            env={**child_env, "JOB_ID": 17},
        )
        cwd, job_id = result.response.return_value
        assert os.path.realpath(cwd) == os.path.realpath(workdir)
        assert job_id == "17"
