"""Shared utilities for streaming XML serialization.

This module provides configuration objects, metrics, the exception hierarchy
and logging helpers used across all layers.
"""

from .logging import (
    CorrelationLogger,
    get_logger,
)
from .errors import (
    ClosedElementError,
    DeferredElementError,
    FormatterError,
    SerializerError,
    UnattachedElementError,
)
from .result import SerializationMetrics
from .config import (
    ConfigError,
    Declaration,
    FlushPolicy,
    Indent,
    SerializerConfig,
    Standalone,
)

__all__ = [
    "CorrelationLogger",
    "get_logger",
    "ClosedElementError",
    "DeferredElementError",
    "FormatterError",
    "SerializerError",
    "UnattachedElementError",
    "SerializationMetrics",
    "ConfigError",
    "Declaration",
    "FlushPolicy",
    "Indent",
    "SerializerConfig",
    "Standalone",
]
