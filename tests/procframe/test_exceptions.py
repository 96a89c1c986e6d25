"""
Tests for the procframe exception hierarchy.

Tests key exception features including:
- Base ProcframeError with context
- Specific exception classes and their extra attributes
- Exception inheritance
"""

import pytest

from procframe.exceptions import (
    ConfigError,
    InvalidCallbackError,
    PipeCloseError,
    ProcessStateError,
    ProcframeError,
    ProtocolError,
    RemoteError,
    SpawnError,
    StatusError,
)
from procframe.log import InvalidLogLevelError, LogError

# =============================================================================
# Test ProcframeError Base Class
# =============================================================================


@pytest.mark.unit
class TestProcframeError:
    """Test ProcframeError base class."""

    def test_message_only(self):
        """Test error with a simple message."""
        error = ProcframeError("Test error")
        assert str(error) == "Test error"
        assert error.message == "Test error"
        assert error.context == {}

    def test_with_context(self):
        """Test context is stored and rendered."""
        error = ProcframeError("spawn failed", command="php -v", code=127)
        assert error.context == {"command": "php -v", "code": 127}
        assert str(error) == "spawn failed (command=php -v, code=127)"


# =============================================================================
# Test Specific Exceptions
# =============================================================================


@pytest.mark.unit
class TestSpecificErrors:
    """Test specific exception classes."""

    @pytest.mark.parametrize(
        "cls",
        [
            SpawnError,
            StatusError,
            PipeCloseError,
            InvalidCallbackError,
            ProcessStateError,
            ConfigError,
            ProtocolError,
            LogError,
        ],
    )
    def test_inherits_base(self, cls):
        """Test all errors derive from ProcframeError."""
        assert issubclass(cls, ProcframeError)

    def test_invalid_callback_is_type_error(self):
        """Test InvalidCallbackError can be caught as TypeError."""
        with pytest.raises(TypeError):
            raise InvalidCallbackError("callback should be callable")

    def test_pipe_close_error_stream(self):
        """Test PipeCloseError exposes the failing stream."""
        error = PipeCloseError("could not close", stream="stderr")
        assert error.stream == "stderr"
        assert PipeCloseError("could not close").stream is None

    def test_invalid_log_level(self):
        """Test InvalidLogLevelError keeps the level."""
        error = InvalidLogLevelError("loud")
        assert error.level == "loud"
        assert "loud" in str(error)


# =============================================================================
# Test RemoteError
# =============================================================================


@pytest.mark.unit
class TestRemoteError:
    """Test RemoteError attributes."""

    def test_attributes(self):
        """Test category, location and frames are kept."""
        error = RemoteError(
            "gone", category="jobs.MissingError", location="job.py:3", frames=["job.py:3 in main"]
        )
        assert error.message == "gone"
        assert error.category == "jobs.MissingError"
        assert error.location == "job.py:3"
        assert error.frames == ["job.py:3 in main"]
        assert str(error) == "gone (category=jobs.MissingError, location=job.py:3)"

    def test_without_location(self):
        """Test location is left out of the context when unknown."""
        error = RemoteError("gone", category="X")
        assert str(error) == "gone (category=X)"
        assert error.frames == []
