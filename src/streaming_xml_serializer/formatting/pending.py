"""Table of placeholders whose content is supplied after formatting starts.

Parsed nodes refer to their deferred element by id only. The continuation the
formatter leaves behind when it suspends lives in the slot registered under
that id, so the set of open placeholders can be listed at any time. Each
serializer owns its table; a handle registers in it when it is grafted into
the serializer's input.
"""

import uuid
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Callable, Dict, Iterator, List, Optional

from streaming_xml_serializer.shared import DeferredElementError

Appender = Callable[..., None]


class ElementState(Enum):
    """Lifecycle of a deferred element."""

    PENDING = auto()  # Created, not yet reached by a formatter
    WIRED = auto()    # Formatter suspended on it
    FED = auto()      # At least one value pushed
    CLOSED = auto()   # Traversal resumed past it


@dataclass(eq=False)
class PendingSlot:
    """Continuation state for one deferred element."""

    element_id: str
    state: ElementState = ElementState.PENDING
    append: Optional[Appender] = None
    resume: Optional[Callable[[], Any]] = None
    formatter: Optional[Any] = None
    pushes: int = 0
    inflight: int = 0
    close_requested: bool = False

    @property
    def wired(self) -> bool:
        """Whether a formatter has reached the element and left a continuation."""
        return self.append is not None


class PendingTable:
    """Maps generated placeholder ids to their continuation state."""

    def __init__(self) -> None:
        self._slots: Dict[str, PendingSlot] = {}

    def register(self, element_id: Optional[str] = None) -> PendingSlot:
        """Create a slot under a fresh or given id."""
        element_id = element_id or uuid.uuid4().hex
        if element_id in self._slots:
            raise DeferredElementError(
                f"Placeholder id already registered: {element_id}", element_id
            )
        slot = PendingSlot(element_id=element_id)
        self._slots[element_id] = slot
        return slot

    def get(self, element_id: str) -> Optional[PendingSlot]:
        return self._slots.get(element_id)

    def discard(self, element_id: str) -> None:
        self._slots.pop(element_id, None)

    def pending_ids(self) -> List[str]:
        """Ids of every element not yet closed, in creation order."""
        return list(self._slots)

    def suspended(self) -> List[PendingSlot]:
        """Slots a formatter is currently waiting on."""
        return [slot for slot in self._slots.values() if slot.wired]

    def clear(self) -> None:
        self._slots.clear()

    def __len__(self) -> int:
        return len(self._slots)

    def __contains__(self, element_id: object) -> bool:
        return element_id in self._slots

    def __iter__(self) -> Iterator[PendingSlot]:
        return iter(list(self._slots.values()))

