"""Input classification and the parsed node representation.

Input values are JSON-shaped: scalars, ``None``, mappings, sequences and
deferred element handles. ``classify`` decides which variant a value is once,
at the boundary, so the resolver only switches on a closed set of tags.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, List, Optional, Tuple, Union

ATTRIBUTES_KEY = "_attr"
CDATA_KEY = "_cdata"
RESERVED_KEYS = frozenset({ATTRIBUTES_KEY, CDATA_KEY})


class InputKind(Enum):
    """Variants of input values understood by the resolver."""

    NULL = auto()        # None, resolves to an empty node
    SCALAR = auto()      # Text, number or boolean
    ATTRIBUTES = auto()  # {"_attr": {...}}
    CDATA = auto()       # {"_cdata": "..."}
    ELEMENT = auto()     # {"tag": value}
    LIST = auto()        # Ordered children, attribute markers and text
    DEFERRED = auto()    # Handle whose content is supplied later


class PendingSource(ABC):
    """Base for values whose content is supplied after formatting starts.

    Subclasses expose ``element_id`` and ``initial``, the content known when
    the handle was created.
    """

    element_id: str
    initial: Tuple[Any, ...]

    @abstractmethod
    def bind(self, node: "ParsedNode", table: Any = None) -> None:
        """Attach the handle to the node resolved for it.

        ``table`` is the pending table of the document being resolved, if any.
        """


def classify(value: Any) -> InputKind:
    """Decide which input variant ``value`` is.

    Mappings are classified by their first key. Objects that are not
    recognized containers are scalars and render through ``str()``.
    """
    if value is None:
        return InputKind.NULL
    if isinstance(value, PendingSource):
        return InputKind.DEFERRED
    if isinstance(value, dict):
        if not value:
            return InputKind.NULL
        first_key = next(iter(value))
        if first_key == ATTRIBUTES_KEY:
            return InputKind.ATTRIBUTES
        if first_key == CDATA_KEY:
            return InputKind.CDATA
        return InputKind.ELEMENT
    if isinstance(value, (list, tuple)):
        return InputKind.LIST
    return InputKind.SCALAR


def scalar_text(value: Any) -> str:
    """Render a scalar as unescaped text."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    return str(value)


Content = Union[str, "ParsedNode"]


@dataclass(eq=False)
class ParsedNode:
    """Internal ordered representation of one XML element.

    ``content`` is fixed once the resolver returns. Formatting walks it with
    ``cursor`` so each node is emitted exactly once while staying inspectable.
    """

    name: Optional[str] = None
    attributes: List[str] = field(default_factory=list)
    content: Tuple[Content, ...] = ()
    indent_level: int = 0
    indent_unit: str = ""
    pending_id: Optional[str] = None
    cursor: int = 0
    consumed: bool = False

    @property
    def indent_prefix(self) -> str:
        """Whitespace written before this node's opening and closing tags."""
        return self.indent_unit * self.indent_level

    @property
    def indenting(self) -> bool:
        return bool(self.indent_unit)

    @property
    def size(self) -> int:
        """Number of content entries, including empty block markers."""
        return len(self.content)

    @property
    def is_pending(self) -> bool:
        """Whether this node belongs to a deferred element."""
        return self.pending_id is not None

    @property
    def is_anonymous(self) -> bool:
        return not self.name

    @property
    def remaining(self) -> Tuple[Content, ...]:
        """Content entries not yet emitted."""
        return self.content[self.cursor:]

    @property
    def children(self) -> List["ParsedNode"]:
        """Nested element nodes in document order."""
        return [entry for entry in self.content if isinstance(entry, ParsedNode)]

    def next_entry(self) -> Optional[Content]:
        """Return the entry under the cursor and advance, or None when drained."""
        if self.cursor >= len(self.content):
            return None
        entry = self.content[self.cursor]
        self.cursor += 1
        return entry
