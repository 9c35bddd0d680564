"""Common types for record sinks."""

from __future__ import annotations

import asyncio
from enum import Enum, auto
from typing import Any, TypeVar

T = TypeVar("T")


class SinkState(Enum):
    """State of a record sink."""

    OPEN = auto()
    ENDED = auto()
    CLOSED = auto()


class SinkEvent(Enum):
    """Kinds of events a sink delivers to its subscribers."""

    RECORD = auto()
    ERROR = auto()
    END = auto()
    CLOSE = auto()


TERMINAL_EVENTS = frozenset({SinkEvent.END, SinkEvent.CLOSE})


def resolve(future: asyncio.Future[T], value: T) -> None:
    """Set the result of a future unless it already settled."""
    if not future.done():
        future.set_result(value)


def reject(future: asyncio.Future[Any], error: BaseException) -> None:
    """Set the exception of a future unless it already settled."""
    if not future.done():
        future.set_exception(error)
