"""Push-style readable stream returned in streaming mode.

The stream emits ``data`` events carrying XML text each time the formatter
signals an interrupt, then ``end`` and ``close`` once the document is
complete. With ``FlushPolicy.DEFERRED_FIRST`` nothing reaches listeners until
the consumer calls ``start()`` (or, inside a running asyncio loop, until the
next loop iteration), which leaves time to attach listeners after ``xml()``
returns. Later events are delivered synchronously.
"""

import asyncio
from collections import deque
from functools import partial
from typing import Any, Callable, Deque, Dict, List, Optional, TextIO

from streaming_xml_serializer.shared import FlushPolicy, get_logger

EVENTS = ("data", "end", "close")

Listener = Callable[..., Any]

_logger = get_logger(__name__, component="stream")


class XMLStream:
    """Event emitter delivering serialized XML chunks.

    Attributes:
        flush_policy: How the first events are delivered
        readable: True until the document has ended
        ended: True once ``end`` has been emitted
        closed: True once ``close`` has been emitted
    """

    def __init__(
        self,
        flush_policy: FlushPolicy = FlushPolicy.DEFERRED_FIRST,
        correlation_id: Optional[str] = None,
    ) -> None:
        self.flush_policy = flush_policy
        self.readable = True
        self.ended = False
        self.closed = False
        self._listeners: Dict[str, List[Listener]] = {event: [] for event in EVENTS}
        self._queued: Deque[Callable[[], None]] = deque()
        self._started = flush_policy is FlushPolicy.IMMEDIATE
        self._logger = _logger.bind(correlation_id)

        if not self._started:
            self._schedule_start()

    def _schedule_start(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        loop.call_soon(self.start)

    @property
    def started(self) -> bool:
        """Whether events are delivered to listeners as they occur."""
        return self._started

    def on(self, event: str, listener: Listener) -> "XMLStream":
        """Register ``listener`` for ``event``; returns the stream for chaining."""
        if event not in self._listeners:
            raise ValueError(f"Unknown stream event {event!r}, expected one of {EVENTS}")
        self._listeners[event].append(listener)
        return self

    def remove_listener(self, event: str, listener: Listener) -> None:
        listeners = self._listeners.get(event, [])
        if listener in listeners:
            listeners.remove(listener)

    def pipe(self, destination: TextIO) -> "XMLStream":
        """Write every chunk to a text file-like object, flushing it at the end."""
        self.on("data", destination.write)
        if hasattr(destination, "flush"):
            self.on("end", destination.flush)
        return self

    def start(self) -> None:
        """Deliver queued events and switch to synchronous delivery."""
        if self._started:
            return
        self._started = True
        self._logger.debug("Stream started", extra={"queued_events": len(self._queued)})
        while self._queued:
            self._queued.popleft()()

    def write(self, chunk: str) -> None:
        """Emit one ``data`` event; empty chunks are dropped."""
        if chunk:
            self._deliver(partial(self._emit, "data", chunk))

    def finish(self, chunk: str = "") -> None:
        """Emit the final chunk followed by ``end`` and ``close``."""
        self.write(chunk)
        self._deliver(partial(self._emit, "end"))
        self._deliver(self._mark_unreadable)
        self._deliver(partial(self._emit, "close"))

    def _deliver(self, event: Callable[[], None]) -> None:
        if self._started:
            event()
        else:
            self._queued.append(event)

    def _mark_unreadable(self) -> None:
        self.readable = False

    def _emit(self, event: str, *args: Any) -> None:
        if event == "end":
            self.ended = True
        elif event == "close":
            self.closed = True
        for listener in list(self._listeners[event]):
            listener(*args)
