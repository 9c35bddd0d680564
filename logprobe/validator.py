"""Record validation and the equality functions used for literal expectations."""

from __future__ import annotations

import difflib
import math
import os
import pprint
import socket
from collections.abc import Callable, Mapping
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

from .exceptions import EnvelopeError
from .expectations import Expectation, as_expectation
from .models import Envelope, EqualityFunction, Record, strip_envelope


def _strict_equal(actual: Any, expected: Any) -> bool:
    if type(actual) is not type(expected):
        return False
    if isinstance(actual, dict):
        return actual.keys() == expected.keys() and all(
            _strict_equal(actual[key], expected[key]) for key in actual
        )
    if isinstance(actual, (list, tuple)):
        return len(actual) == len(expected) and all(
            map(_strict_equal, actual, expected)
        )
    if isinstance(actual, float) and math.isnan(actual):
        return math.isnan(expected)
    return actual == expected


def _partial_equal(actual: Any, expected: Any) -> bool:
    if isinstance(expected, dict):
        return isinstance(actual, dict) and all(
            key in actual and _partial_equal(actual[key], value)
            for key, value in expected.items()
        )
    if isinstance(expected, list):
        return (
            isinstance(actual, list)
            and len(actual) == len(expected)
            and all(map(_partial_equal, actual, expected))
        )
    return _strict_equal(actual, expected)


def _diff(actual: Any, expected: Any) -> str:
    """Render a line diff, '+' marking actual lines and '-' expected ones."""
    lines = difflib.ndiff(
        pprint.pformat(expected, width=60).splitlines(),
        pprint.pformat(actual, width=60).splitlines(),
    )
    return "\n".join(line for line in lines if not line.startswith("? "))


def _assert_equal(
    compare: Callable[[Any, Any], bool],
    header: str,
    actual: Any,
    expected: Any,
    message: str | None,
) -> None:
    if compare(actual, expected):
        return
    if message is None:
        message = f"{header}\n+ actual - expected\n\n{_diff(actual, expected)}"
    raise AssertionError(message)


def deep_strict_equal(actual: Any, expected: Any, message: str | None = None) -> None:
    """Assert that two values are structurally equal.

    Values of different types never compare equal, so ``1``, ``1.0`` and
    ``True`` are all distinct. Dicts must have the same keys, sequences the
    same length, and NaN equals NaN.

    Args:
        actual: The value received.
        expected: The value expected.
        message: Replaces the default diff message on failure.

    Raises:
        AssertionError: If the values differ. The default message starts
            with "Expected values to be strictly deep-equal:" followed by a
            line diff.
    """
    _assert_equal(
        _strict_equal,
        "Expected values to be strictly deep-equal:",
        actual,
        expected,
        message,
    )


def partial_deep_equal(actual: Any, expected: Any, message: str | None = None) -> None:
    """Assert that `actual` contains everything in `expected`.

    Only the keys present in expected dicts are compared, recursively;
    everything else follows `deep_strict_equal`.

    Args:
        actual: The value received.
        expected: The subset expected.
        message: Replaces the default diff message on failure.

    Raises:
        AssertionError: If a compared value differs or a key is missing.
    """
    _assert_equal(
        _partial_equal,
        "Expected values to be partially and strictly deep-equal:",
        actual,
        expected,
        message,
    )


def validate_envelope(record: Record) -> Record:
    """Check the envelope fields of a record and strip them.

    Args:
        record: A decoded record.

    Returns:
        A copy of the record without ``time``, ``pid`` and ``hostname``.

    Raises:
        EnvelopeError: If a field is missing or invalid, the timestamp is in
            the future, or the record comes from another process or host.
    """
    try:
        envelope = Envelope.from_record(record)
    except ValidationError as e:
        raise EnvelopeError(f"Invalid record envelope: {e}") from e

    if envelope.aware_time > datetime.now(timezone.utc):
        raise EnvelopeError(
            f"time is greater than now: {envelope.aware_time.isoformat()}"
        )

    pid = os.getpid()
    if envelope.pid != pid:
        raise EnvelopeError(f"pid {envelope.pid} does not match current process {pid}")

    hostname = socket.gethostname()
    if envelope.hostname != hostname:
        raise EnvelopeError(
            f"hostname {envelope.hostname!r} does not match current host {hostname!r}"
        )

    return strip_envelope(record)


def check(
    record: Record,
    expected: Expectation | Mapping[str, Any] | Callable[[Record], Any],
    equal: EqualityFunction = deep_strict_equal,
) -> None:
    """Validate a record against an expectation.

    The envelope is always checked first. The remaining fields are then
    handed to the predicate, or compared to the literal with `equal`.

    Args:
        record: A decoded record.
        expected: A mapping, a predicate or an Expectation.
        equal: Equality function for literal expectations.

    Raises:
        EnvelopeError: If the envelope is invalid.
        Exception: Whatever the predicate or `equal` raised on mismatch.
    """
    expectation = as_expectation(expected)
    remainder = validate_envelope(record)
    expectation.verify(remainder, equal)
