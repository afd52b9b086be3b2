"""Streaming XML Serializer.

Converts nested JSON-shaped values into well-formed XML text, either as one
string or as an incrementally flushed stream. Deferred elements let a producer
supply a sub-tree's children after the surrounding document has started
emitting, so large documents never have to be held in memory.

Progressive API Disclosure:
- Level 1: Simple function - xml()
- Level 2: Configured serializer - XMLSerializer with SerializerConfig
- Level 3: Streaming - element() handles fed through push()/close()
"""

__version__ = "0.1.0"
__author__ = "Streaming XML Serializer Team"

# Progressive API disclosure - Level 1 and 2
from .api import XMLSerializer, XMLStream, xml

# Level 3: Deferred content
from .formatting import DeferredElement, ElementState, PendingTable, element

# Configuration classes for advanced usage
from .shared.config import (
    Declaration,
    FlushPolicy,
    Indent,
    SerializerConfig,
    Standalone,
)
from .shared.errors import (
    ClosedElementError,
    DeferredElementError,
    SerializerError,
    UnattachedElementError,
)
from .character import escape_for_xml

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple serialization function
    "xml",

    # Level 2: Configured serializer and its stream
    "XMLSerializer",
    "XMLStream",

    # Level 3: Deferred content
    "DeferredElement",
    "ElementState",
    "PendingTable",
    "element",

    # Configuration classes
    "Declaration",
    "FlushPolicy",
    "Indent",
    "SerializerConfig",
    "Standalone",

    # Errors
    "ClosedElementError",
    "DeferredElementError",
    "SerializerError",
    "UnattachedElementError",

    # Utilities
    "escape_for_xml",
]
