"""Exception hierarchy for streaming XML serialization."""

from typing import Optional


class SerializerError(Exception):
    """Base exception for serialization errors."""


class FormatterError(SerializerError):
    """Raised when a parsed node cannot be formatted, e.g. it was already consumed."""


class DeferredElementError(SerializerError):
    """Raised when a deferred element handle is misused."""

    def __init__(self, message: str, element_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.element_id = element_id


class UnattachedElementError(DeferredElementError):
    """Content was fed to a handle the formatter has not reached yet."""


class ClosedElementError(DeferredElementError):
    """Content was fed to a handle after it was closed."""
