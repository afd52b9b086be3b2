"""Character layer: escaping tables and CDATA wrapping."""

from .escaping import (
    XML_ESCAPES,
    escape_for_xml,
    format_attribute,
    wrap_cdata,
)

__all__ = [
    "XML_ESCAPES",
    "escape_for_xml",
    "format_attribute",
    "wrap_cdata",
]
