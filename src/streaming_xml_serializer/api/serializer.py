"""Serializer driver with progressive disclosure.

Level 1 is the ``xml()`` function returning a string (or a stream when
``stream=True``). Level 2 is the ``XMLSerializer`` class, which exposes the
stream before any text is produced so listeners can be attached up front and
keeps metrics for the run.
"""

import logging
import time
from collections.abc import Iterator
from typing import Any, List, Optional, Union

from streaming_xml_serializer.formatting import Formatter, PendingTable
from streaming_xml_serializer.shared import (
    SerializationMetrics,
    SerializerConfig,
    SerializerError,
    get_logger,
)
from streaming_xml_serializer.tree import resolve

from .stream import XMLStream

MS_PER_SECOND = 1000  # Milliseconds per second conversion
CHUNK_PREVIEW_LENGTH = 40

_logger = get_logger(__name__, component="serializer")


class XMLSerializer:
    """Serializes one JSON-shaped document to XML text or a stream.

    Args:
        config: Serializer configuration; defaults to compact string output
        table: Pending table deferred elements in the input register in;
            each serializer creates its own by default
    """

    def __init__(
        self,
        config: Optional[SerializerConfig] = None,
        table: Optional[PendingTable] = None,
    ) -> None:
        self.config = config or SerializerConfig()
        self.metrics = SerializationMetrics()
        self._logger = _logger.bind(self.config.correlation_id)
        self._table = table if table is not None else PendingTable()
        self._formatter = Formatter(self._table, self.metrics, self.config.correlation_id)
        self._buffer: List[str] = []
        self._stream = (
            XMLStream(self.config.flush_policy, self.config.correlation_id)
            if self.config.stream
            else None
        )
        self._used = False
        self._finished = False
        self._start_time = 0.0

    @property
    def stream(self) -> Optional[XMLStream]:
        """Output stream in streaming mode, None in string mode."""
        return self._stream

    @property
    def table(self) -> PendingTable:
        """Pending table holding the deferred elements not yet closed."""
        return self._table

    @property
    def finished(self) -> bool:
        """Whether the whole document, including deferred content, was emitted."""
        return self._finished

    def serialize(self, data: Any) -> Union[str, XMLStream]:
        """Serialize ``data``.

        A list, tuple or iterator at the top level is a sequence of root
        nodes; roots are resolved lazily, one after the other finishes.

        Args:
            data: JSON-shaped input value or sequence of root values

        Returns:
            The XML text in string mode, the XMLStream in streaming mode. In
            string mode text after a still-open deferred element is missing.

        Raises:
            SerializerError: If this serializer was already used
        """
        if self._used:
            raise SerializerError("An XMLSerializer serializes a single document")
        self._used = True
        self._start_time = time.time()

        self._logger.debug(
            "Starting serialization",
            extra={
                "input_type": type(data).__name__,
                "indent": self.config.indent.name,
                "stream": self.config.stream,
            },
        )

        if self.config.declaration is not None:
            self._append(
                self.config.declaration.render() + ("\n" if self.config.indent_unit else "")
            )

        self._add_roots(_roots(data))

        if self._stream is not None:
            return self._stream

        if not self._finished:
            self._logger.warning(
                "Returning partial document, deferred elements are still open",
                extra={"open_elements": self._table.pending_ids()},
            )
        return "".join(self._buffer)

    def getvalue(self) -> str:
        """Text emitted so far and not yet flushed to the stream.

        In string mode this is the document, including content pushed to
        deferred elements after ``serialize`` returned.
        """
        return "".join(self._buffer)

    def _append(self, text: str = "", interrupt: bool = False) -> None:
        if text:
            self._buffer.append(text)
        if interrupt and self._stream is not None:
            self._flush()

    def _flush(self) -> None:
        if not self._buffer:
            return
        chunk = "".join(self._buffer)
        self._buffer.clear()
        self.metrics.record_chunk(chunk)
        if self._logger.is_enabled_for(logging.DEBUG):
            self._logger.debug(
                "Flushing chunk",
                extra={"length": len(chunk), "preview": chunk[:CHUNK_PREVIEW_LENGTH]},
            )
        self._stream.write(chunk)

    def _add_roots(self, roots: Iterator[Any]) -> None:
        """Format roots in order, continuing from ``on_finish`` after a suspension."""
        unit = self.config.indent_unit
        for root in roots:
            waiting = False
            finished = False

            def resume() -> None:
                nonlocal finished
                if waiting:
                    self._add_roots(roots)
                else:
                    finished = True

            self._formatter.format(
                self._append, resolve(root, unit, 0, self._table), on_finish=resume
            )
            if not finished:
                waiting = True
                return
        self._end()

    def _end(self) -> None:
        self._finished = True
        self.metrics.processing_time_ms = (time.time() - self._start_time) * MS_PER_SECOND

        self._logger.debug(
            "Serialization finished",
            extra={
                "elements": self.metrics.elements_formatted,
                "suspensions": self.metrics.suspensions,
                "processing_time_ms": self.metrics.processing_time_ms,
            },
        )

        if self._stream is not None:
            chunk = "".join(self._buffer)
            self._buffer.clear()
            if chunk:
                self.metrics.record_chunk(chunk)
            self._stream.finish(chunk)


def _roots(data: Any) -> Iterator[Any]:
    if isinstance(data, (list, tuple)):
        return iter(data)
    if isinstance(data, Iterator):
        return data
    return iter((data,))


def xml(
    data: Any = None,
    options: Optional[SerializerConfig] = None,
    **overrides: Any,
) -> Union[str, XMLStream]:
    """Generate XML from specially formatted JSON-shaped data.

    Args:
        data: Input value, or a list of root values
        options: Serializer configuration
        **overrides: Configuration fields to override, e.g. ``indent="space"``
            or ``stream=True``

    Returns:
        XML text, or an XMLStream when streaming

    Examples:
        >>> xml({"nested": [{"keys": [{"fun": "hi"}]}]})
        '<nested><keys><fun>hi</fun></keys></nested>'
        >>> xml({"a": [{"_attr": {"attributes": "are fun"}}, 1]})
        '<a attributes="are fun">1</a>'
    """
    config = options or SerializerConfig()
    if overrides:
        config = config.override(**overrides)
    return XMLSerializer(config).serialize(data)

