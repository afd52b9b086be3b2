"""Tree layer: input classification and resolution into parsed nodes.

Key Components:
    classify: Decides the InputKind of a JSON-shaped value
    resolve: Builds a ParsedNode tree with escaped text and attribute fragments
    ParsedNode: Ordered, cursor-traversed representation of one element
"""

from .nodes import (
    ATTRIBUTES_KEY,
    CDATA_KEY,
    InputKind,
    ParsedNode,
    PendingSource,
    classify,
    scalar_text,
)
from .resolver import BLOCK_MARKER, resolve

__all__ = [
    "ATTRIBUTES_KEY",
    "BLOCK_MARKER",
    "CDATA_KEY",
    "InputKind",
    "ParsedNode",
    "PendingSource",
    "classify",
    "resolve",
    "scalar_text",
]
