"""Expectations a record is matched against."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from typing import Any

from .models import EqualityFunction, Record


class Expectation(ABC):
    """Abstract base class for the shape a record is expected to have."""

    @abstractmethod
    def verify(self, record: Record, equal: EqualityFunction) -> None:
        """Check a record, without its envelope fields, against this expectation.

        Args:
            record: The record to check.
            equal: Equality function for literal comparisons.

        Raises:
            Exception: Whatever the comparison raises on mismatch,
                usually an AssertionError.
        """
        ...

    @property
    @abstractmethod
    def identifier(self) -> str:
        """Short description used in waiter error messages."""
        ...


class LiteralExpectation(Expectation):
    """Expect the record to equal a literal mapping.

    Examples:
        >>> expectation = LiteralExpectation({"msg": "hello world", "level": 30})
        >>> expectation.identifier
        'hello world'
    """

    def __init__(self, fields: Mapping[str, Any]) -> None:
        self.fields = dict(fields)

    def verify(self, record: Record, equal: EqualityFunction) -> None:
        equal(record, self.fields)

    @property
    def identifier(self) -> str:
        if "msg" in self.fields:
            return str(self.fields["msg"])
        return "[literal]"

    def __repr__(self) -> str:
        return f"LiteralExpectation({self.fields!r})"


class PredicateExpectation(Expectation):
    """Expect a callable to accept the record.

    The predicate signals a mismatch by raising, typically with a plain
    ``assert``, or by returning exactly ``False``. Any other return value,
    ``None`` included, is a match.

    Examples:
        >>> def started(log):
        ...     assert log["msg"].startswith("server started")
        >>> expectation = PredicateExpectation(started)
    """

    def __init__(self, predicate: Callable[[Record], Any]) -> None:
        self.predicate = predicate

    def verify(self, record: Record, equal: EqualityFunction) -> None:
        if self.predicate(record) is False:
            raise AssertionError(f"Predicate rejected record: {record!r}")

    @property
    def identifier(self) -> str:
        return "[function]"

    def __repr__(self) -> str:
        return f"PredicateExpectation({self.predicate!r})"


def as_expectation(value: Expectation | Mapping[str, Any] | Callable[[Record], Any]) -> Expectation:
    """Coerce a mapping, a callable or an expectation into an Expectation.

    Args:
        value: The expected shape.

    Returns:
        The matching Expectation variant.

    Raises:
        TypeError: If `value` is neither a mapping nor callable.
    """
    if isinstance(value, Expectation):
        return value
    if isinstance(value, Mapping):
        return LiteralExpectation(value)
    if callable(value):
        return PredicateExpectation(value)
    raise TypeError(
        f"Expected a mapping or a callable, got {type(value).__name__}"
    )
