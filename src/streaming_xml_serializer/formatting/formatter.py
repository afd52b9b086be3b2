"""Depth-first formatter emitting parsed nodes as XML text.

The formatter writes fragments through an ``append(text, interrupt=False)``
callback. Ordinary content is emitted synchronously; at a deferred element it
emits the opening tag, stores its continuation in the pending table, signals
an interrupt and returns. Every ancestor of a suspended node suspends with
it, so nothing that follows the deferred element in document order is
emitted before the element is closed.
"""

from functools import partial
from typing import Callable, Optional, Union

from streaming_xml_serializer.shared import (
    FormatterError,
    SerializationMetrics,
    get_logger,
)
from streaming_xml_serializer.tree import ParsedNode

from .pending import Appender, ElementState, PendingTable

OnFinish = Optional[Callable[[], object]]

_logger = get_logger(__name__, component="formatter")


class Formatter:
    """Walks ParsedNode trees and emits XML fragments.

    Attributes:
        table: Pending table consulted when a deferred element is reached
        metrics: Counters updated while formatting
    """

    def __init__(
        self,
        table: Optional[PendingTable] = None,
        metrics: Optional[SerializationMetrics] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        self.table = table if table is not None else PendingTable()
        self.metrics = metrics if metrics is not None else SerializationMetrics()
        self.correlation_id = correlation_id
        self._logger = _logger.bind(correlation_id)

    def format(
        self,
        append: Appender,
        node: Union[str, ParsedNode],
        on_finish: OnFinish = None,
    ) -> bool:
        """Emit ``node`` through ``append``.

        Args:
            append: Output callback taking ``(text, interrupt=False)``
            node: Parsed node, or plain text emitted as is
            on_finish: Called once the node has been emitted completely,
                possibly later when a suspended descendant is closed

        Returns:
            True if the node was emitted completely, False if it suspended

        Raises:
            FormatterError: If the node was already formatted or its deferred
                element is unknown to the pending table
        """
        if isinstance(node, str):
            append(node)
            if on_finish is not None:
                on_finish()
            return True

        if node.consumed:
            raise FormatterError(f"Node {node.name!r} has already been formatted")
        node.consumed = True
        if node.name:
            self.metrics.elements_formatted += 1

        size = node.size
        append(self._opening(node, size))

        if size == 0:
            if node.indenting and node.name:
                append("\n")
            if on_finish is not None:
                on_finish()
            return True

        if node.is_pending:
            self._suspend(append, node, on_finish)
            return False

        return self._drain(append, node, on_finish)

    def _drain(self, append: Appender, node: ParsedNode, on_finish: OnFinish) -> bool:
        """Emit remaining content from the cursor on, then the closing tag."""
        while True:
            entry = node.next_entry()
            if entry is None:
                break
            if isinstance(entry, str):
                append(entry)
            elif not self._format_child(append, node, entry, on_finish):
                return False

        append(self._closing(node))
        if on_finish is not None:
            on_finish()
        return True

    def _format_child(
        self,
        append: Appender,
        parent: ParsedNode,
        child: ParsedNode,
        on_finish: OnFinish,
    ) -> bool:
        """Format ``child``; if it suspends, its completion resumes ``parent``.

        Returns True when the child finished before this call returned, in
        which case the caller keeps draining ``parent`` itself.
        """
        waiting = False
        finished = False

        def resume() -> None:
            nonlocal finished
            if waiting:
                self._drain(append, parent, on_finish)
            else:
                finished = True

        self.format(append, child, on_finish=resume)
        if finished:
            return True
        waiting = True
        return False

    def _suspend(self, append: Appender, node: ParsedNode, on_finish: OnFinish) -> None:
        slot = self.table.get(node.pending_id)
        if slot is None:
            raise FormatterError(
                f"Deferred element {node.pending_id} is not registered in the pending table"
            )

        slot.append = append
        slot.resume = partial(self._drain, append, node, on_finish)
        slot.formatter = self
        slot.state = ElementState.WIRED
        self.metrics.suspensions += 1

        self._logger.debug(
            "Suspended at deferred element",
            extra={"element_id": node.pending_id, "tag": node.name},
        )
        append("", interrupt=True)

    @staticmethod
    def _opening(node: ParsedNode, size: int) -> str:
        if not node.name:
            return node.indent_prefix if size == 1 else ""

        parts = [node.indent_prefix, "<", node.name]
        if node.attributes:
            parts.append(" " + " ".join(node.attributes))
        parts.append(">" if size else "/>")
        if node.indenting and size > 1:
            parts.append("\n")
        return "".join(parts)

    @staticmethod
    def _closing(node: ParsedNode) -> str:
        if not node.name:
            return ""

        parts = []
        if node.size > 1:
            parts.append(node.indent_prefix)
        parts.append(f"</{node.name}>")
        if node.indenting:
            parts.append("\n")
        return "".join(parts)
