"""Configuration classes for streaming XML serialization.

This module provides configuration objects for the serializer driver,
controlling indentation, the XML declaration, output mode and stream flushing.
"""

from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import Any, Dict, Optional

from .logging import get_logger

DEFAULT_ENCODING = "UTF-8"
XML_VERSION = "1.0"

# Indentation units
SPACE_INDENT_WIDTH = 4
TAB_INDENT = "\t"


class Indent(Enum):
    """Indentation mode options."""

    NONE = "none"      # No whitespace added
    SPACE = "space"    # Four-space indentation unit
    TAB = "tab"        # One-tab indentation unit

    @property
    def unit(self) -> str:
        """Whitespace added per nesting level."""
        if self is Indent.SPACE:
            return " " * SPACE_INDENT_WIDTH
        if self is Indent.TAB:
            return TAB_INDENT
        return ""


class Standalone(Enum):
    """Values for the ``standalone`` pseudo-attribute of the declaration."""

    YES = "yes"
    NO = "no"


class FlushPolicy(Enum):
    """When stream chunks reach listeners."""

    IMMEDIATE = auto()       # Every flush is delivered synchronously
    DEFERRED_FIRST = auto()  # Delivery starts once the consumer is ready


class ConfigError(Exception):
    """Exception raised when configuration is structurally invalid."""

    def __init__(self, message: str, field_name: Optional[str] = None) -> None:
        super().__init__(message)
        self.field_name = field_name


@dataclass
class Declaration:
    """Configuration for the ``<?xml ...?>`` declaration."""

    encoding: str = DEFAULT_ENCODING
    standalone: Optional[Standalone] = None

    def __post_init__(self) -> None:
        """Fall back to defaults for unusable values."""
        if not self.encoding or not isinstance(self.encoding, str):
            self.encoding = DEFAULT_ENCODING
        if self.standalone is not None and not isinstance(self.standalone, Standalone):
            self.standalone = _coerce_standalone(self.standalone)

    def render(self) -> str:
        """Render the declaration text without trailing whitespace."""
        parts = [f'version="{XML_VERSION}"', f'encoding="{self.encoding}"']
        if self.standalone is not None:
            parts.append(f'standalone="{self.standalone.value}"')
        return "<?xml " + " ".join(parts) + "?>"


@dataclass
class SerializerConfig:
    """Complete configuration for one serializer invocation."""

    indent: Indent = Indent.NONE
    declaration: Optional[Declaration] = None
    stream: bool = False
    flush_policy: FlushPolicy = FlushPolicy.DEFERRED_FIRST
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate and normalize configuration."""
        if not isinstance(self.indent, Indent):
            self.indent = _coerce_indent(self.indent)
        if self.declaration is True:
            self.declaration = Declaration()
        elif self.declaration is False:
            self.declaration = None
        if not isinstance(self.flush_policy, FlushPolicy):
            self.flush_policy = _coerce_flush_policy(self.flush_policy)
        if self.declaration is not None and not isinstance(self.declaration, Declaration):
            raise ConfigError(
                "declaration must be a Declaration or None",
                field_name="declaration",
            )

    @property
    def indent_unit(self) -> str:
        """Whitespace unit for one nesting level."""
        return self.indent.unit

    @classmethod
    def compact(cls) -> "SerializerConfig":
        """Create configuration producing a single line without declaration."""
        return cls()

    @classmethod
    def pretty(cls) -> "SerializerConfig":
        """Create configuration for human-readable documents."""
        return cls(indent=Indent.SPACE, declaration=Declaration())

    @classmethod
    def streaming(cls, flush_policy: FlushPolicy = FlushPolicy.DEFERRED_FIRST) -> "SerializerConfig":
        """Create configuration returning an incrementally flushed stream."""
        return cls(stream=True, flush_policy=flush_policy)

    def override(self, **kwargs: Any) -> "SerializerConfig":
        """Create a new configuration with specific overrides.

        Args:
            **kwargs: Keyword arguments for configuration fields to override

        Returns:
            New SerializerConfig instance with overrides applied
        """
        return replace(self, **kwargs)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SerializerConfig":
        """Build configuration from plain data such as a JSON config file.

        Unrecognized indentation, encoding, standalone and flush policy values
        fall back to their defaults rather than failing.

        Args:
            data: Mapping with optional keys ``indent``, ``declaration``,
                ``encoding``, ``standalone``, ``stream``, ``flush_policy`` and
                ``correlation_id``

        Returns:
            SerializerConfig instance
        """
        if not isinstance(data, dict):
            raise ConfigError("configuration data must be a mapping")

        declaration = None
        wants_declaration = data.get("declaration", False)
        if wants_declaration or "encoding" in data or "standalone" in data:
            source = wants_declaration if isinstance(wants_declaration, dict) else data
            declaration = Declaration(
                encoding=source.get("encoding") or DEFAULT_ENCODING,
                standalone=_coerce_standalone(source.get("standalone")),
            )

        return cls(
            indent=_coerce_indent(data.get("indent")),
            declaration=declaration,
            stream=bool(data.get("stream", False)),
            flush_policy=data.get("flush_policy", FlushPolicy.DEFERRED_FIRST),
            correlation_id=data.get("correlation_id"),
        )


_logger = get_logger(__name__, component="config")


def _coerce_indent(value: Any) -> Indent:
    """Map user supplied indentation values onto Indent, defaulting to NONE."""
    if isinstance(value, Indent):
        return value
    if value is None or value is False:
        return Indent.NONE
    if value is True:
        return Indent.SPACE
    if isinstance(value, str):
        lowered = value.lower()
        for mode in Indent:
            if mode.value == lowered:
                return mode
        if value == TAB_INDENT:
            return Indent.TAB
        if value and value.strip(" ") == "":
            return Indent.SPACE
    _logger.warning("Unrecognized indent mode, using none", extra={"value": value})
    return Indent.NONE


def _coerce_standalone(value: Any) -> Optional[Standalone]:
    """Map user supplied standalone values onto Standalone, defaulting to None."""
    if value is None or isinstance(value, Standalone):
        return value
    if value is True:
        return Standalone.YES
    if value is False:
        return Standalone.NO
    if isinstance(value, str):
        try:
            return Standalone(value.lower())
        except ValueError:
            pass
    _logger.warning("Unrecognized standalone value, omitting", extra={"value": value})
    return None


def _coerce_flush_policy(value: Any) -> FlushPolicy:
    """Map a policy name such as ``"immediate"`` onto FlushPolicy.

    Unknown names fall back to DEFERRED_FIRST; values that are not names at
    all are rejected.
    """
    if isinstance(value, FlushPolicy):
        return value
    if not isinstance(value, str):
        raise ConfigError(
            f"flush_policy must be a FlushPolicy or its name, got {value!r}",
            field_name="flush_policy",
        )
    try:
        return FlushPolicy[value.strip().upper()]
    except KeyError:
        _logger.warning("Unknown flush policy, using default", extra={"value": value})
        return FlushPolicy.DEFERRED_FIRST
