"""Metrics collected while serializing documents.

The driver and the formatter share one SerializationMetrics instance per
invocation so callers can inspect how a document was emitted.
"""

from dataclasses import dataclass


@dataclass
class SerializationMetrics:
    """Counters for one serialization run."""

    elements_formatted: int = 0
    suspensions: int = 0
    chunks_emitted: int = 0
    characters_emitted: int = 0
    processing_time_ms: float = 0.0

    @property
    def average_chunk_size(self) -> float:
        """Average number of characters per emitted chunk."""
        if self.chunks_emitted == 0:
            return 0.0
        return self.characters_emitted / self.chunks_emitted

    @property
    def characters_per_second(self) -> float:
        """Calculate characters emitted per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.characters_emitted * 1000.0) / self.processing_time_ms

    def record_chunk(self, chunk: str) -> None:
        """Account for one flushed chunk."""
        self.chunks_emitted += 1
        self.characters_emitted += len(chunk)
