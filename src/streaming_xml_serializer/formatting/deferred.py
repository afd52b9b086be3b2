"""Deferred element handles for streaming content into a started document.

A producer creates a handle before its content exists, places it in the input
tree, and feeds children with ``push`` once the formatter has reached it.
``close`` resumes the suspended traversal so the closing tag and the
following siblings are emitted.

Example:
    >>> rows = element({"_attr": {"table": "users"}})
    >>> stream = xml({"rows": rows}, stream=True)
    >>> rows.push({"row": "alice"})
    >>> rows.close()
"""

import uuid
from typing import Any, Optional, Tuple

from streaming_xml_serializer.shared import (
    ClosedElementError,
    DeferredElementError,
    UnattachedElementError,
    get_logger,
)
from streaming_xml_serializer.tree import ParsedNode, PendingSource, resolve

from .pending import ElementState, PendingSlot, PendingTable

_logger = get_logger(__name__, component="deferred_element")


class DeferredElement(PendingSource):
    """Handle supplying an element's content after formatting has started.

    The handle registers in a pending table only when it is grafted into a
    tree, normally the table of the serializer whose input holds it.

    Args:
        *initial: Content known up front (attribute markers, text, children).
            It is emitted when the element is closed, after pushed content.
        table: Pending table used when the handle is resolved without one,
            e.g. by calling ``resolve`` directly
        correlation_id: Optional correlation ID for log messages; defaults to
            the ID of the document the handle is serving
    """

    def __init__(
        self,
        *initial: Any,
        table: Optional[PendingTable] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        self.initial: Tuple[Any, ...] = initial
        self.element_id = uuid.uuid4().hex
        self._table = table
        self._slot: Optional[PendingSlot] = None
        self._owner: Optional[ParsedNode] = None
        self._closed = False
        self._logger = _logger.bind(correlation_id)

    def __repr__(self) -> str:
        return f"<DeferredElement id={self.element_id} state={self.state.name}>"

    @property
    def state(self) -> ElementState:
        if self._slot is None:
            return ElementState.PENDING
        return self._slot.state

    @property
    def owner(self) -> Optional[ParsedNode]:
        """Node this element supplies content for, once grafted into a tree."""
        return self._owner

    @property
    def attached(self) -> bool:
        """Whether a formatter has reached this element."""
        return self._slot is not None and self._slot.wired

    @property
    def closed(self) -> bool:
        return self._closed

    def bind(self, node: ParsedNode, table: Optional[PendingTable] = None) -> None:
        """Attach the handle to the node the resolver built for it.

        Raises:
            ClosedElementError: If the element was already closed
            DeferredElementError: If the element is already part of a tree
        """
        if self._closed:
            raise ClosedElementError(
                f"Element {self.element_id} is closed and cannot be placed in a tree",
                self.element_id,
            )
        if self._owner is not None:
            raise DeferredElementError(
                f"Element {self.element_id} is already part of a tree", self.element_id
            )
        if table is not None:
            self._table = table
        elif self._table is None:
            self._table = PendingTable()
        self._slot = self._table.register(self.element_id)
        self._owner = node

    def push(self, value: Any) -> None:
        """Format ``value`` as the next child and signal a flush.

        Raises:
            UnattachedElementError: If no formatter has reached this element
            ClosedElementError: If the element was already closed
            DeferredElementError: If previously pushed content is still suspended
        """
        slot = self._require_open("push")
        if slot.inflight:
            raise DeferredElementError(
                f"Cannot push to element {self.element_id} while earlier content is pending",
                self.element_id,
            )
        self._feed(slot, value)

    def close(self, value: Any = None) -> None:
        """Optionally push ``value``, then resume the suspended traversal.

        If pushed content is itself still suspended, the close takes effect as
        soon as that content finishes.
        """
        slot = self._require_open("close")
        if value is not None:
            self.push(value)
        if slot.inflight:
            slot.close_requested = True
            return
        self._finish(slot)

    def _require_open(self, operation: str) -> PendingSlot:
        if self._closed:
            self._logger.warning(
                "Operation on closed deferred element",
                extra={"element_id": self.element_id, "operation": operation},
            )
            raise ClosedElementError(
                f"Cannot {operation}: element {self.element_id} is closed",
                self.element_id,
            )
        if not self.attached:
            self._logger.warning(
                "Operation on unattached deferred element",
                extra={"element_id": self.element_id, "operation": operation},
            )
            raise UnattachedElementError(
                f"Cannot {operation}: element {self.element_id} has not been "
                f"reached by a formatter",
                self.element_id,
            )
        if self._logger.correlation_id is None:
            self._logger = self._logger.bind(_formatter_correlation_id(self._slot))
        return self._slot

    def _feed(self, slot: PendingSlot, value: Any) -> None:
        owner = self._owner
        child = resolve(value, owner.indent_unit, owner.indent_level + 1, self._table)
        slot.state = ElementState.FED
        slot.pushes += 1
        slot.inflight += 1

        def finished() -> None:
            slot.inflight -= 1
            slot.append("", interrupt=True)
            if slot.close_requested and not slot.inflight:
                self._finish(slot)

        self._logger.debug(
            "Pushing content to deferred element",
            extra={"element_id": self.element_id, "push": slot.pushes},
        )
        slot.formatter.format(slot.append, child, on_finish=finished)

    def _finish(self, slot: PendingSlot) -> None:
        self._closed = True
        slot.state = ElementState.CLOSED
        resume, slot.resume = slot.resume, None
        self._table.discard(self.element_id)

        self._logger.debug(
            "Closing deferred element",
            extra={"element_id": self.element_id, "pushes": slot.pushes},
        )
        if resume is not None:
            resume()


def _formatter_correlation_id(slot: PendingSlot) -> Optional[str]:
    """Correlation ID of the formatter waiting on ``slot``."""
    return getattr(slot.formatter, "correlation_id", None)


def element(*initial: Any, **kwargs: Any) -> DeferredElement:
    """Create a deferred element handle.

    Example:
        >>> toys = element({"_attr": {"decade": "80s"}})
        >>> stream = xml({"toys": toys}, stream=True)
        >>> toys.push({"toy": "Transformers"})
        >>> toys.close()
    """
    return DeferredElement(*initial, **kwargs)
