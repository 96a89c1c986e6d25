"""Property-based tests for the response protocol."""

import pytest
from hypothesis import assume, given, settings
from hypothesis import strategies as st

from procframe.exceptions import ProtocolError
from procframe.protocol import MEMORY_PEAK_USAGE, STDERR_VALUE_SEPARATOR, Response

scalars = (
    st.none()
    | st.booleans()
    | st.integers()
    | st.floats(allow_nan=False)
    | st.text(max_size=20)
    | st.binary(max_size=20)
)
values = st.recursive(
    scalars,
    lambda children: st.lists(children, max_size=4)
    | st.dictionaries(st.text(max_size=8), children, max_size=4),
    max_leaves=10,
)
telemetries = st.dictionaries(
    st.text(min_size=1, max_size=10), st.integers(min_value=0), max_size=3
).map(lambda t: {**t, MEMORY_PEAK_USAGE: 1})


@pytest.mark.property
@pytest.mark.unit
class TestResponseProperties:
    """Property-based tests for Response framing and parsing."""

    @given(value=values, telemetry=telemetries, exit_value=st.integers(0, 255))
    @settings(max_examples=50)
    def test_frame_round_trip(self, value, telemetry, exit_value):
        """Parsing a frame gives back an equal response."""
        response = Response(value, exit_value, telemetry)
        assert Response.from_stderr(response.frame()) == response

    @given(value=values, noise=st.binary(max_size=40))
    @settings(max_examples=50)
    def test_trailing_noise_ignored(self, value, noise):
        """Bytes written after the frame never change the result."""
        frame = Response(value, 0, {MEMORY_PEAK_USAGE: 1}).frame()
        assert Response.from_stderr(frame + noise) == Response.from_stderr(frame)

    @given(prefix=st.binary(max_size=60))
    @settings(max_examples=50)
    def test_stderr_length_is_prefix_length(self, prefix):
        """stderr_length counts the bytes before the first separator."""
        data = prefix + Response("x", 0, {MEMORY_PEAK_USAGE: 1}).frame()
        assume(data.find(STDERR_VALUE_SEPARATOR) == len(prefix))
        response = Response.from_stderr(data)
        assert response.stderr_length == len(prefix)
        assert response.return_value == "x"

    @given(data=st.binary(max_size=200))
    @settings(max_examples=100)
    def test_arbitrary_output_never_raises(self, data):
        """Any stderr content yields a response; garbage is an error value."""
        response = Response.from_stderr(data)
        if STDERR_VALUE_SEPARATOR not in data:
            assert response.exit_value == 1

    @given(payload=st.binary(max_size=100))
    @settings(max_examples=100)
    def test_garbage_payload_is_protocol_error(self, payload):
        """A separator followed by random bytes never raises."""
        response = Response.from_stderr(STDERR_VALUE_SEPARATOR + payload)
        if isinstance(response.return_value, ProtocolError):
            assert response.exit_value == 1
