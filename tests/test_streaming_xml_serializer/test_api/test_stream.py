"""Tests for the push-style XMLStream."""

import asyncio
import io

import pytest

from streaming_xml_serializer.api.stream import EVENTS, XMLStream
from streaming_xml_serializer.shared import FlushPolicy


def record(stream):
    """Register listeners for every event and return the shared event log."""
    events = []
    stream.on("data", lambda chunk: events.append(("data", chunk)))
    stream.on("end", lambda: events.append(("end",)))
    stream.on("close", lambda: events.append(("close",)))
    return events


class TestImmediatePolicy:
    """Test synchronous delivery."""

    def test_events_are_delivered_synchronously(self):
        # Arrange
        stream = XMLStream(FlushPolicy.IMMEDIATE)
        events = record(stream)

        # Act
        stream.write("<a>")
        stream.finish("</a>")

        # Assert
        assert events == [("data", "<a>"), ("data", "</a>"), ("end",), ("close",)]
        assert stream.started is True

    def test_readable_flag(self):
        stream = XMLStream(FlushPolicy.IMMEDIATE)
        seen_at_end = []
        stream.on("end", lambda: seen_at_end.append(stream.readable))
        assert stream.readable is True
        stream.finish()
        assert seen_at_end == [True]
        assert stream.readable is False
        assert stream.ended is True
        assert stream.closed is True

    def test_empty_chunks_are_dropped(self):
        stream = XMLStream(FlushPolicy.IMMEDIATE)
        events = record(stream)
        stream.write("")
        stream.finish("")
        assert events == [("end",), ("close",)]


class TestDeferredFirstPolicy:
    """Test delivery deferred until the consumer starts the stream."""

    def test_events_wait_for_start(self):
        # Arrange
        stream = XMLStream(FlushPolicy.DEFERRED_FIRST)
        stream.write("<a>")
        events = record(stream)

        # Act
        before = list(events)
        stream.start()

        # Assert
        assert before == []
        assert events == [("data", "<a>")]
        assert stream.started is True

    def test_later_events_are_synchronous(self):
        stream = XMLStream()
        events = record(stream)
        stream.start()
        stream.write("x")
        assert events == [("data", "x")]

    def test_completed_document_replays_in_order(self):
        stream = XMLStream()
        stream.write("<a>")
        stream.finish("</a>")
        assert stream.readable is True
        events = record(stream)
        stream.start()
        assert events == [("data", "<a>"), ("data", "</a>"), ("end",), ("close",)]
        assert stream.readable is False

    def test_start_is_idempotent(self):
        stream = XMLStream()
        events = record(stream)
        stream.write("x")
        stream.start()
        stream.start()
        assert events == [("data", "x")]

    def test_starts_on_next_loop_iteration(self):
        """Test that a running asyncio loop starts the stream on its next iteration."""
        async def scenario():
            stream = XMLStream()
            stream.write("<a>")
            events = record(stream)
            started_immediately = stream.started
            await asyncio.sleep(0)
            return started_immediately, stream.started, events

        started_immediately, started_later, events = asyncio.run(scenario())

        assert started_immediately is False
        assert started_later is True
        assert events == [("data", "<a>")]


class TestListeners:
    """Test listener management."""

    def test_unknown_event(self):
        with pytest.raises(ValueError, match="Unknown stream event"):
            XMLStream().on("error", print)

    def test_events_constant(self):
        assert EVENTS == ("data", "end", "close")

    def test_remove_listener(self):
        stream = XMLStream(FlushPolicy.IMMEDIATE)
        chunks = []
        stream.on("data", chunks.append)
        stream.remove_listener("data", chunks.append)
        stream.write("x")
        assert chunks == []

    def test_on_returns_stream(self):
        stream = XMLStream()
        assert stream.on("data", print) is stream

    def test_pipe(self):
        stream = XMLStream()
        destination = io.StringIO()
        stream.pipe(destination).start()
        stream.write("<a>")
        stream.finish("</a>")
        assert destination.getvalue() == "<a></a>"
