"""Unit tests for ec2ssh logging helpers."""

import io
import logging

import pytest

from ec2ssh.logging import StreamFormatter, StreamRoutingFilter


def make_record(level: int, msg: str, **extra) -> logging.LogRecord:
    record = logging.LogRecord("ec2ssh.test", level, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.mark.parametrize(
    "level,expected",
    [
        (logging.DEBUG, "message"),
        (logging.INFO, "message"),
        (logging.WARNING, "Warning: message"),
        (logging.ERROR, "Error: message"),
        (logging.CRITICAL, "Error: message"),
    ],
)
def test_stream_formatter_prefixes(level: int, expected: str) -> None:
    """Test warnings and errors carry a severity prefix."""
    formatter = StreamFormatter("%(message)s")

    assert formatter.format(make_record(level, "message")) == expected


def test_routing_filter_defaults_to_stderr() -> None:
    """Test records without a stream go to stderr only."""
    record = make_record(logging.INFO, "hello")

    assert StreamRoutingFilter("stderr").filter(record)
    assert not StreamRoutingFilter("stdout").filter(record)


def test_routing_filter_stdout_records() -> None:
    """Test records tagged for stdout go to stdout only."""
    record = make_record(logging.INFO, "hello", stream="stdout")

    assert StreamRoutingFilter("stdout").filter(record)
    assert not StreamRoutingFilter("stderr").filter(record)


def test_routing_filter_rejects_unknown_stream() -> None:
    """Test only stdout and stderr can be routed."""
    with pytest.raises(ValueError):
        StreamRoutingFilter("stdlog")


def test_handlers_route_records() -> None:
    """Test a pair of filtered handlers splits output by stream."""
    out, err = io.StringIO(), io.StringIO()
    logger = logging.getLogger("ec2ssh.test.routing")
    logger.propagate = False
    logger.setLevel(logging.INFO)

    for stream, target in (("stdout", out), ("stderr", err)):
        handler = logging.StreamHandler(target)
        handler.setFormatter(StreamFormatter("%(message)s"))
        handler.addFilter(StreamRoutingFilter(stream))
        logger.addHandler(handler)

    try:
        logger.info("listing", extra={"stream": "stdout"})
        logger.warning("careful")
    finally:
        logger.handlers.clear()

    assert out.getvalue() == "listing\n"
    assert err.getvalue() == "Warning: careful\n"
