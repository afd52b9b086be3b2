"""Resolver turning JSON-shaped input into ParsedNode trees.

The resolver is deterministic and performs no I/O. Text is escaped here, once,
so the formatter only ever concatenates ready fragments.
"""

from typing import Any, Dict, Iterable, List, Optional

from streaming_xml_serializer.character import (
    escape_for_xml,
    format_attribute,
    wrap_cdata,
)

from .nodes import (
    ATTRIBUTES_KEY,
    CDATA_KEY,
    Content,
    InputKind,
    ParsedNode,
    PendingSource,
    classify,
    scalar_text,
)

# Brackets element-only content so it is sized and emitted as a block
BLOCK_MARKER = ""


class _ContentBuilder:
    """Accumulates attributes and content entries for one node."""

    def __init__(self) -> None:
        self.attributes: List[str] = []
        self.entries: List[Content] = []
        self.has_text = False
        self.has_children = False
        self._last_was_text = False

    def add_attributes(self, attributes: Any) -> None:
        if not isinstance(attributes, dict):
            return
        for key, value in attributes.items():
            if value is None:
                continue
            self.attributes.append(format_attribute(str(key), scalar_text(value)))

    def add_text(self, text: str) -> None:
        # Adjacent text coalesces into one entry
        if self._last_was_text:
            self.entries[-1] = self.entries[-1] + text
        else:
            self.entries.append(text)
        self.has_text = True
        self._last_was_text = True

    def add_child(self, node: ParsedNode) -> None:
        self.entries.append(node)
        self.has_children = True
        self._last_was_text = False

    def build(
        self,
        name: Optional[str],
        indent_unit: str,
        indent_level: int,
        block: bool = False,
    ) -> ParsedNode:
        content = list(self.entries)
        if block or (self.has_children and not self.has_text):
            content = [BLOCK_MARKER] + content + [BLOCK_MARKER]
        return ParsedNode(
            name=name,
            attributes=list(self.attributes),
            content=tuple(content),
            indent_level=indent_level,
            indent_unit=indent_unit,
        )


def resolve(
    data: Any,
    indent_unit: str = "",
    indent_level: int = 0,
    table: Any = None,
) -> ParsedNode:
    """Resolve an input value into a ParsedNode.

    A single-key mapping becomes a named element; any other value becomes an
    anonymous node whose content is emitted without surrounding tags.

    Args:
        data: JSON-shaped input value
        indent_unit: Whitespace per nesting level, empty for no indentation
        indent_level: Nesting level of the resulting node
        table: Pending table deferred elements in ``data`` register in

    Returns:
        ParsedNode ready for formatting

    Examples:
        >>> node = resolve({"a": [{"_attr": {"x": "1"}}, "hi"]})
        >>> node.name, node.attributes, node.content
        ('a', ['x="1"'], ('hi',))
    """
    context = _Context(indent_unit, table)
    kind = classify(data)

    if kind is InputKind.ELEMENT:
        name = next(iter(data))
        return _resolve_named(context, str(name), data[name], indent_level)
    if kind is InputKind.DEFERRED:
        return _graft(context, None, data, indent_level)

    builder = _ContentBuilder()
    _collect_value(context, builder, kind, data, indent_level)
    return builder.build(None, indent_unit, indent_level)


class _Context:
    """Settings shared by every node of one resolve call."""

    __slots__ = ("indent_unit", "table")

    def __init__(self, indent_unit: str, table: Any) -> None:
        self.indent_unit = indent_unit
        self.table = table


def _resolve_named(
    context: _Context, name: str, values: Any, indent_level: int
) -> ParsedNode:
    kind = classify(values)
    if kind is InputKind.DEFERRED:
        return _graft(context, name, values, indent_level)

    builder = _ContentBuilder()
    _collect_value(context, builder, kind, values, indent_level)
    return builder.build(name, context.indent_unit, indent_level)


def _graft(
    context: _Context, name: Optional[str], handle: PendingSource, indent_level: int
) -> ParsedNode:
    """Resolve a deferred element's initial content in place and bind the handle."""
    builder = _ContentBuilder()
    _collect_items(context, builder, handle.initial, indent_level)
    node = builder.build(name, context.indent_unit, indent_level, block=True)
    node.pending_id = handle.element_id
    handle.bind(node, context.table)
    return node


def _collect_value(
    context: _Context,
    builder: _ContentBuilder,
    kind: InputKind,
    values: Any,
    indent_level: int,
) -> None:
    """Collect the value found under a tag name."""
    if kind is InputKind.NULL:
        return
    if kind is InputKind.SCALAR:
        builder.add_text(escape_for_xml(scalar_text(values)))
    elif kind is InputKind.LIST:
        _collect_items(context, builder, values, indent_level)
    elif kind is InputKind.DEFERRED:
        # Anonymous: pushed children land at the enclosing element's child level
        builder.add_child(_graft(context, None, values, indent_level))
    else:
        _collect_mapping(context, builder, values, indent_level)


def _collect_items(
    context: _Context,
    builder: _ContentBuilder,
    items: Iterable[Any],
    indent_level: int,
) -> None:
    for item in items:
        _collect_value(context, builder, classify(item), item, indent_level)


def _collect_mapping(
    context: _Context,
    builder: _ContentBuilder,
    mapping: Dict[Any, Any],
    indent_level: int,
) -> None:
    """Collect reserved markers and child elements from a mapping, in key order."""
    for key, value in mapping.items():
        if key == ATTRIBUTES_KEY:
            builder.add_attributes(value)
        elif key == CDATA_KEY:
            if value is not None:
                builder.add_text(wrap_cdata(scalar_text(value)))
        else:
            builder.add_child(_resolve_named(context, str(key), value, indent_level + 1))
