"""Asynchronous waiters matching the records delivered by a sink.

Each waiter attaches a subscription to the sink, suspends until the
records it needs arrive, and releases the subscription on every exit path,
including cancellation of the awaiting task.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from .exceptions import MaxMessagesError, SourceExhaustedError, WaitForTimeoutError
from .expectations import Expectation, as_expectation
from .models import EqualityFunction, Record, WaitForOptions
from .streams import RecordSink
from .streams.common import reject, resolve
from .validator import check, deep_strict_equal

# Configure module logger
logger = logging.getLogger(__name__)

# Type definitions
ExpectedRecord = Expectation | Mapping[str, Any] | Callable[[Record], Any]


async def once(
    sink: RecordSink,
    expected: ExpectedRecord,
    equal: EqualityFunction = deep_strict_equal,
) -> None:
    """Assert that the next record matches.

    There is no timeout: if nothing is ever written, the call waits
    forever. Wrap it in `asyncio.wait_for` to bound it.

    Args:
        sink: The sink the logger writes to.
        expected: A mapping, a predicate or an Expectation.
        equal: Equality function for literal expectations.

    Raises:
        EnvelopeError: If the record's envelope is invalid.
        RecordDecodeError: If the sink emits an error event first.
        AssertionError: If the record does not match.

    Examples:
        >>> logger.info("hello world")
        >>> await once(sink, {"msg": "hello world", "level": 30})
    """
    expectation = as_expectation(expected)
    loop = asyncio.get_running_loop()
    received: asyncio.Future[Record] = loop.create_future()

    with sink.subscribe(
        on_record=lambda record: resolve(received, record),
        on_error=lambda error: reject(received, error),
        once=True,
    ):
        record = await received

    check(record, expectation, equal)


async def consecutive(
    sink: RecordSink,
    expecteds: Sequence[ExpectedRecord],
    equal: EqualityFunction = deep_strict_equal,
) -> None:
    """Assert that the next records match, in order.

    Record *i* is matched against ``expecteds[i]``. Reading stops as soon as
    the last expectation matched, so later records stay in the sink.

    Args:
        sink: The sink the logger writes to.
        expecteds: The expected records, in order.
        equal: Equality function for literal expectations.

    Raises:
        SourceExhaustedError: If the sink ends first.
        EnvelopeError: If a record's envelope is invalid.
        AssertionError: If a record does not match.
    """
    expectations = [as_expectation(expected) for expected in expecteds]
    if not expectations:
        return

    matched = 0
    async for record in sink:
        check(record, expectations[matched], equal)
        matched += 1
        if matched == len(expectations):
            return

    raise SourceExhaustedError("Stream ended before all expected logs were received")


async def wait_for(
    sink: RecordSink,
    expected: ExpectedRecord,
    options: WaitForOptions | None = None,
) -> None:
    """Wait for a matching record, skipping the others.

    Non-matching records are discarded until one matches, the timeout
    expires, or more than ``options.max_messages`` records did not match.
    A record with an invalid envelope counts as a non-matching record.

    Args:
        sink: The sink the logger writes to.
        expected: A mapping, a predicate or an Expectation.
        options: Timeout, message budget, debug flag and equality function.

    Raises:
        WaitForTimeoutError: If no record matched in time.
        MaxMessagesError: If too many records did not match.
        RecordDecodeError: If the sink emits an error event.

    Examples:
        >>> logger.debug("setting up server")
        >>> logger.info("server started")
        >>> await wait_for(sink, {"msg": "server started", "level": 30})
    """
    options = options or WaitForOptions()
    equal = options.equal or deep_strict_equal
    expectation = as_expectation(expected)
    identifier = expectation.identifier

    loop = asyncio.get_running_loop()
    matched: asyncio.Future[None] = loop.create_future()
    mismatches = 0

    def settle(error: BaseException | None = None) -> None:
        subscription.close()
        if error is None:
            resolve(matched, None)
        else:
            reject(matched, error)

    def on_record(record: Record) -> None:
        nonlocal mismatches
        if options.debug:
            logger.info("wait_for received %r", record)

        try:
            check(record, expectation, equal)
        except Exception:
            mismatches += 1
            if mismatches > options.max_messages:
                settle(
                    MaxMessagesError(
                        f"Max message count reached on wait_for: {identifier}",
                        identifier,
                    )
                )
            return

        settle()

    subscription = sink.subscribe(on_record=on_record, on_error=settle)
    with subscription:
        try:
            await asyncio.wait_for(matched, timeout=options.timeout)
        except asyncio.TimeoutError:
            raise WaitForTimeoutError(
                f"Timeout on wait_for: {identifier}", identifier
            ) from None
