"""Logging filters that route records to stdout or stderr."""

import logging


class StreamRoutingFilter(logging.Filter):
    """Pass only records destined for one output stream.

    Records logged with ``extra={"stream": "stdout"}`` go to stdout; every
    other record goes to stderr, keeping stdout free for command output.

    Parameters
    ----------
    stream : str
        Stream handled by the filtered handler: "stdout" or "stderr"
    """

    def __init__(self, stream: str) -> None:
        if stream not in ("stdout", "stderr"):
            raise ValueError(f"stream must be 'stdout' or 'stderr', got {stream!r}")
        super().__init__()
        self.stream = stream

    def filter(self, record: logging.LogRecord) -> bool:
        return getattr(record, "stream", "stderr") == self.stream
