"""Constants shared by both ends of the response protocol."""

PROTOCOL_VERSION = 1

# Everything before the first occurrence of this marker in a child's stderr is
# noise; everything after it is the encoded response.
STDERR_VALUE_SEPARATOR: bytes = b"#|procframe:response:v%d|#" % PROTOCOL_VERSION

MEMORY_PEAK_USAGE = "memoryPeakUsage"
