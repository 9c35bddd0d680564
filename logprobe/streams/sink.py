"""Record sink capturing the JSON lines written by an application logger."""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from collections.abc import Callable
from typing import Any

from ..exceptions import RecordDecodeError, SinkClosedError
from ..models import Record
from ..parsers import LineSplitter, RecordParser
from .common import TERMINAL_EVENTS, SinkEvent, SinkState, reject, resolve

# Configure module logger
logger = logging.getLogger(__name__)

# Type aliases for callbacks
RecordCallback = Callable[[Record], None]
ErrorCallback = Callable[[Exception], None]
LifecycleCallback = Callable[[], None]


class Subscription:
    """Handle to the callbacks a subscriber attached to a RecordSink.

    Closing the subscription detaches its callbacks from the sink. Closing
    twice is a no-op, and the handle is a context manager, so the callbacks
    are released on every exit path:

        with sink.subscribe(on_record=handle_record):
            await done
    """

    def __init__(
        self,
        sink: RecordSink,
        on_record: RecordCallback | None = None,
        on_error: ErrorCallback | None = None,
        on_end: LifecycleCallback | None = None,
        on_close: LifecycleCallback | None = None,
        once: bool = False,
    ) -> None:
        """Initialize the subscription.

        Args:
            sink: The sink the callbacks are attached to.
            on_record: Callback for each decoded record.
            on_error: Callback for each error event.
            on_end: Callback invoked once every record was delivered after `end`.
            on_close: Callback invoked when the sink closes.
            once: Detach after the first delivered event.
        """
        self._sink = sink
        self._callbacks: dict[SinkEvent, Callable[..., None]] = {}
        for kind, callback in (
            (SinkEvent.RECORD, on_record),
            (SinkEvent.ERROR, on_error),
            (SinkEvent.END, on_end),
            (SinkEvent.CLOSE, on_close),
        ):
            if callback is not None:
                self._callbacks[kind] = callback
        self.once = once
        self.active = True
        self.replay_pending = False

    def handles(self, kind: SinkEvent) -> bool:
        """Whether this subscription is active and has a callback for `kind`."""
        return self.active and kind in self._callbacks

    def dispatch(self, kind: SinkEvent, payload: Any = None) -> None:
        """Invoke the callback registered for `kind`."""
        callback = self._callbacks[kind]
        if self.once:
            self.close()

        try:
            if kind in TERMINAL_EVENTS:
                callback()
            else:
                callback(payload)
        except Exception:
            logger.exception(
                "Error in %s callback of sink subscriber", kind.name.lower()
            )

    def close(self) -> None:
        """Detach the callbacks from the sink."""
        if not self.active:
            return
        self.active = False
        self._sink._detach(self)

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()


class RecordSink:
    """Destination stream turning JSON lines into structured records.

    The sink is a writable, file-like object: hand it to a
    `logging.StreamHandler` (or any logger writing JSON lines) and it
    decodes every complete line into a record. Records, errors and the
    end/close lifecycle are queued as events and delivered, in order, to
    the subscribers attached through `subscribe`.

    An event waits in the queue until a subscriber handling its kind is
    attached, so records written before a waiter starts are not lost, and
    a record handed to one waiter is not handed again to a later one.
    Delivery happens on the running event loop via `loop.call_soon`; the
    sink is not thread-safe and must be written from the loop's thread.

    Usage:
        ```python
        import logging
        from logprobe import create_sink, once

        async def test_hello(formatter: logging.Formatter) -> None:
            sink = create_sink()
            handler = logging.StreamHandler(sink)
            handler.setFormatter(formatter)
            logging.getLogger("app").addHandler(handler)

            logging.getLogger("app").info("hello world")
            await once(sink, {"msg": "hello world", "level": 30})
        ```
    """

    def __init__(
        self,
        destroy_on_error: bool = False,
        emit_error_event: bool = False,
    ) -> None:
        """Initialize the RecordSink.

        Args:
            destroy_on_error: Destroy the sink when a line fails to decode.
            emit_error_event: Queue an error event carrying the
                `RecordDecodeError` when a line fails to decode.
        """
        self.destroy_on_error = destroy_on_error
        self.emit_error_event = emit_error_event
        self._splitter = LineSplitter()
        self._parser = RecordParser()
        self._state = SinkState.OPEN
        self._events: deque[tuple[SinkEvent, Any]] = deque()
        self._delivered_terminal: list[SinkEvent] = []
        self._subscriptions: list[Subscription] = []
        self._drain_handle: asyncio.Handle | None = None

    @property
    def state(self) -> SinkState:
        """Current state of the sink."""
        return self._state

    @property
    def closed(self) -> bool:
        """Whether the sink no longer accepts writes."""
        return self._state is not SinkState.OPEN

    @property
    def subscriber_count(self) -> int:
        """Number of active subscriptions."""
        return len(self._subscriptions)

    def writable(self) -> bool:
        return self._state is SinkState.OPEN

    def write(self, chunk: str | bytes) -> int:
        """Write text or UTF-8 bytes to the sink.

        Every line completed by `chunk` is decoded immediately; the
        resulting records are delivered asynchronously.

        Args:
            chunk: The data to write.

        Returns:
            The length of `chunk`.

        Raises:
            SinkClosedError: If the sink was ended or destroyed.
        """
        if self._state is not SinkState.OPEN:
            raise SinkClosedError(f"Cannot write to sink in state {self._state.name}")

        for line in self._splitter.feed(chunk):
            if self._state is SinkState.CLOSED:
                break
            self._process_line(line)
        return len(chunk)

    def flush(self) -> None:
        """No-op. Lines are decoded as soon as they are complete."""

    def end(self, chunk: str | bytes | None = None) -> None:
        """Finish writing.

        Writes the optional final chunk, decodes any unterminated trailing
        text, then queues the end and close events. Calling `end` on a sink
        that is no longer open does nothing.

        Args:
            chunk: Optional data to write before ending.
        """
        if chunk is not None:
            self.write(chunk)
        if self._state is not SinkState.OPEN:
            return

        for line in self._splitter.flush():
            self._process_line(line)

        # Decoding the trailing text may have destroyed the sink.
        if self._state is SinkState.CLOSED:
            return

        self._state = SinkState.ENDED
        self._queue(SinkEvent.END)
        self._queue(SinkEvent.CLOSE)

    def destroy(self) -> None:
        """Close the sink immediately.

        Undelivered records and a pending end event are dropped; queued
        error events are kept and followed by a single close event.
        """
        if self._state is SinkState.CLOSED:
            return
        self._state = SinkState.CLOSED

        self._events = deque(
            event for event in self._events if event[0] is SinkEvent.ERROR
        )
        if SinkEvent.CLOSE not in self._delivered_terminal:
            self._queue(SinkEvent.CLOSE)

    def subscribe(
        self,
        on_record: RecordCallback | None = None,
        on_error: ErrorCallback | None = None,
        on_end: LifecycleCallback | None = None,
        on_close: LifecycleCallback | None = None,
        once: bool = False,
    ) -> Subscription:
        """Attach callbacks to the sink's events.

        End and close are sticky: a subscriber attaching after they were
        delivered receives them right away.

        Args:
            on_record: Callback for each decoded record.
            on_error: Callback for each error event.
            on_end: Callback invoked once every record was delivered after `end`.
            on_close: Callback invoked when the sink closes.
            once: Detach after the first delivered event.

        Returns:
            The subscription handle.
        """
        subscription = Subscription(
            self,
            on_record=on_record,
            on_error=on_error,
            on_end=on_end,
            on_close=on_close,
            once=once,
        )
        subscription.replay_pending = bool(self._delivered_terminal)
        self._subscriptions.append(subscription)
        self._schedule_drain()
        return subscription

    async def read(self) -> Record | None:
        """Wait for the next record.

        Returns:
            The next record, or None once the sink ended or closed.

        Raises:
            Exception: The payload of the next error event, if an error
                event comes before the next record.
        """
        loop = asyncio.get_running_loop()
        result: asyncio.Future[Record | None] = loop.create_future()

        with self.subscribe(
            on_record=lambda record: resolve(result, record),
            on_error=lambda error: reject(result, error),
            on_end=lambda: resolve(result, None),
            on_close=lambda: resolve(result, None),
            once=True,
        ):
            return await result

    def __aiter__(self) -> RecordSink:
        return self

    async def __anext__(self) -> Record:
        record = await self.read()
        if record is None:
            raise StopAsyncIteration
        return record

    def _detach(self, subscription: Subscription) -> None:
        """Remove a subscription. Called by `Subscription.close`."""
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    def _process_line(self, line: str) -> None:
        """Decode a single line and queue the outcome."""
        try:
            record = self._parser.parse(line)
        except RecordDecodeError as e:
            if not (self.emit_error_event or self.destroy_on_error):
                logger.debug("Dropping undecodable line: %r", line)
                return
            if self.emit_error_event:
                self._queue(SinkEvent.ERROR, e)
            if self.destroy_on_error:
                self.destroy()
            return

        self._queue(SinkEvent.RECORD, record)

    def _queue(self, kind: SinkEvent, payload: Any = None) -> None:
        self._events.append((kind, payload))
        self._schedule_drain()

    def _schedule_drain(self) -> None:
        """Schedule delivery of queued events on the running loop."""
        if self._drain_handle is not None or not self._subscriptions:
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No running loop: events stay queued until a subscriber
            # attaches from inside one.
            return
        self._drain_handle = loop.call_soon(self._drain)

    def _drain(self) -> None:
        """Deliver queued events to the subscribers handling them."""
        self._drain_handle = None

        for subscription in list(self._subscriptions):
            if not subscription.replay_pending:
                continue
            subscription.replay_pending = False
            for kind in self._delivered_terminal:
                if subscription.handles(kind):
                    subscription.dispatch(kind)

        while self._events:
            kind, payload = self._events[0]
            receivers = [s for s in self._subscriptions if s.handles(kind)]
            if not receivers:
                break

            self._events.popleft()
            if kind in TERMINAL_EVENTS:
                self._delivered_terminal.append(kind)

            for subscription in receivers:
                # An earlier receiver's callback may have closed it.
                if subscription.handles(kind):
                    subscription.dispatch(kind, payload)


def create_sink(
    *,
    destroy_on_error: bool = False,
    emit_error_event: bool = False,
) -> RecordSink:
    """Create a sink to hand to the logger under test.

    Args:
        destroy_on_error: Destroy the sink when a line fails to decode.
        emit_error_event: Queue an error event when a line fails to decode.

    Returns:
        A new RecordSink.
    """
    return RecordSink(
        destroy_on_error=destroy_on_error,
        emit_error_event=emit_error_event,
    )
