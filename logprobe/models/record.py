"""Data models for decoded log records."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr

# Type definitions
Record = dict[str, Any]
EqualityFunction = Callable[[Any, Any], Any]

ENVELOPE_FIELDS = ("time", "pid", "hostname")


class Envelope(BaseModel):
    """The identity fields every record carries.

    These fields are validated identically by every waiter and stripped
    from the record before it is compared against an expectation.

    Attributes:
        time: When the record was logged. Accepts epoch seconds, epoch
            milliseconds or an ISO-8601 string. Naive values are read as
            local time.
        pid: Process ID of the logging process.
        hostname: Host name of the machine the logging process runs on.
    """

    model_config = ConfigDict(frozen=True)

    time: datetime
    pid: StrictInt
    hostname: StrictStr

    @classmethod
    def from_record(cls, record: Record) -> Envelope:
        """Build an envelope from the matching keys of a record.

        Missing keys are passed as None so that they fail validation.
        """
        return cls.model_validate({key: record.get(key) for key in ENVELOPE_FIELDS})

    @property
    def aware_time(self) -> datetime:
        """The timestamp as a timezone-aware datetime."""
        if self.time.tzinfo is None:
            return self.time.astimezone()
        return self.time


def strip_envelope(record: Record) -> Record:
    """Return a copy of the record without its envelope fields."""
    return {key: value for key, value in record.items() if key not in ENVELOPE_FIELDS}


class WaitForOptions(BaseModel):
    """Options for the bounded ``wait_for`` waiter.

    Attributes:
        timeout_ms: Maximum time to wait for a matching record, in milliseconds.
        max_messages: Number of non-matching records tolerated before giving up.
        debug: If True, every incoming record is logged at INFO on the
            ``logprobe.waiters`` logger before it is matched. Call
            ``enable_debug()`` to print these messages to stderr.
        equal: Equality function for literal expectations. Defaults to
            ``deep_strict_equal`` when None.
    """

    model_config = ConfigDict(frozen=True)

    timeout_ms: float = Field(default=1000, gt=0)
    max_messages: int = Field(default=100, ge=0)
    debug: bool = False
    equal: EqualityFunction | None = None

    @property
    def timeout(self) -> float:
        """The timeout in seconds."""
        return self.timeout_ms / 1000
