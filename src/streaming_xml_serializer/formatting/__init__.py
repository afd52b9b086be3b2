"""Formatting layer: depth-first emission with cooperative suspension.

Key Components:
    Formatter: Emits ParsedNode trees through an append callback
    DeferredElement: Producer handle feeding content into a suspended traversal
    PendingTable: Placeholder id to continuation state mapping
"""

from .pending import (
    Appender,
    ElementState,
    PendingSlot,
    PendingTable,
)
from .formatter import Formatter
from .deferred import DeferredElement, element

__all__ = [
    "Appender",
    "DeferredElement",
    "ElementState",
    "Formatter",
    "PendingSlot",
    "PendingTable",
    "element",
]
