"""Exceptions for logprobe sinks and waiters."""

from __future__ import annotations


class LogProbeError(Exception):
    """Base exception for all logprobe errors.

    Catching this exception allows handling any error originating from a
    sink or a waiter. Expectation mismatches are not wrapped: they surface
    as whatever the equality function or predicate raised.
    """


class RecordDecodeError(LogProbeError):
    """Raised when a line written to a sink cannot be decoded into a record.

    A line fails to decode when it is not valid JSON or when its JSON value
    is not an object. The offending line is kept on the ``line`` attribute.
    """

    def __init__(self, message: str, line: str) -> None:
        super().__init__(message)
        self.line = line


class SinkClosedError(LogProbeError, ValueError):
    """Raised when writing to a sink that was ended or destroyed."""


class EnvelopeError(LogProbeError, AssertionError):
    """Raised when the envelope fields of a record are invalid.

    The envelope is the ``time``, ``pid`` and ``hostname`` triple. A record
    logged in the future, by another process or on another host fails
    `once` and `consecutive` regardless of its body. `wait_for` counts it
    as a non-matching record.
    """


class SourceExhaustedError(LogProbeError):
    """Raised when a sink ends before all expected records were received."""


class WaitForError(LogProbeError):
    """Base exception for the terminal failures of ``wait_for``.

    The ``identifier`` attribute names the pending expectation.
    """

    def __init__(self, message: str, identifier: str) -> None:
        super().__init__(message)
        self.identifier = identifier


class WaitForTimeoutError(WaitForError):
    """Raised when no matching record arrived before the timeout."""


class MaxMessagesError(WaitForError):
    """Raised when more non-matching records arrived than allowed."""
