"""logprobe package.

This package helps tests assert on the structured (JSON lines) log records
an application logger writes. Hand a sink to the logger under test, then
await one of the waiters to check what it logged:

- `once` matches the next record;
- `consecutive` matches the next records, in order;
- `wait_for` skips records until one matches, bounded by a timeout and a
  budget of non-matching records.

Every waiter first checks the record envelope (``time`` not in the future,
``pid`` of the current process, ``hostname`` of the current host), then
compares the remaining fields to a literal mapping or hands them to a
predicate.

Quick Start:
    ```python
    import logging

    import pytest
    from logprobe import WaitForOptions, create_sink, once, wait_for

    @pytest.mark.asyncio
    async def test_server_logs(json_formatter: logging.Formatter) -> None:
        sink = create_sink()
        handler = logging.StreamHandler(sink)
        handler.setFormatter(json_formatter)
        logger = logging.getLogger("app")
        logger.addHandler(handler)

        logger.info("hello world")
        await once(sink, {"msg": "hello world", "level": 30})

        logger.debug("setting up server")
        logger.info("server started")
        await wait_for(
            sink,
            lambda log: log["msg"] == "server started",
            WaitForOptions(timeout_ms=500),
        )
    ```
"""

__version__ = "1.0.0"

from .exceptions import (
    EnvelopeError,
    LogProbeError,
    MaxMessagesError,
    RecordDecodeError,
    SinkClosedError,
    SourceExhaustedError,
    WaitForError,
    WaitForTimeoutError,
)
from .expectations import (
    Expectation,
    LiteralExpectation,
    PredicateExpectation,
    as_expectation,
)
from .models import Envelope, Record, WaitForOptions
from .parsers import RecordParser
from .streams import RecordSink, SinkState, Subscription, create_sink
from .utils import enable_debug
from .validator import check, deep_strict_equal, partial_deep_equal, validate_envelope
from .waiters import consecutive, once, wait_for

__all__ = [
    "create_sink",
    "once",
    "consecutive",
    "wait_for",
    "check",
    "validate_envelope",
    "deep_strict_equal",
    "partial_deep_equal",
    "RecordSink",
    "Subscription",
    "SinkState",
    "RecordParser",
    "Record",
    "Envelope",
    "WaitForOptions",
    "Expectation",
    "LiteralExpectation",
    "PredicateExpectation",
    "as_expectation",
    "enable_debug",
    "LogProbeError",
    "RecordDecodeError",
    "SinkClosedError",
    "EnvelopeError",
    "SourceExhaustedError",
    "WaitForError",
    "WaitForTimeoutError",
    "MaxMessagesError",
]
