"""Character escaping for XML text, attribute values and CDATA sections.

Escaping is applied exactly once per string. It is not idempotent: escaping
already escaped text escapes the ampersands again.
"""

import re
from typing import Dict

XML_ESCAPES: Dict[str, str] = {
    "&": "&amp;",
    '"': "&quot;",
    "'": "&apos;",
    "<": "&lt;",
    ">": "&gt;",
}

_ESCAPE_PATTERN = re.compile(r"[&\"'<>]")

CDATA_OPEN = "<![CDATA["
CDATA_CLOSE = "]]>"
# Splits a literal terminator across two adjoining sections
CDATA_SPLIT = "]]]]><![CDATA[>"


def escape_for_xml(text: str) -> str:
    """Replace the five XML special characters with their named entities.

    Args:
        text: Raw character data

    Returns:
        Escaped text safe for element content and quoted attribute values

    Examples:
        >>> escape_for_xml('a < b & "c"')
        'a &lt; b &amp; &quot;c&quot;'
    """
    if not text:
        return text
    return _ESCAPE_PATTERN.sub(lambda match: XML_ESCAPES[match.group(0)], text)


def wrap_cdata(text: str) -> str:
    """Wrap raw text in a CDATA section.

    Any ``]]>`` inside ``text`` is split into two abutting sections so the
    result stays a valid sequence of CDATA sections whose contents concatenate
    back to ``text``.
    """
    return CDATA_OPEN + text.replace(CDATA_CLOSE, CDATA_SPLIT) + CDATA_CLOSE


def format_attribute(key: str, value: str) -> str:
    """Render one ``key="value"`` attribute fragment with an escaped value."""
    return f'{key}="{escape_for_xml(value)}"'
