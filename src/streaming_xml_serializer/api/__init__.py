"""API layer: the serializer driver and the output stream."""

from .serializer import XMLSerializer, xml
from .stream import EVENTS, XMLStream

__all__ = [
    "EVENTS",
    "XMLSerializer",
    "XMLStream",
    "xml",
]
