"""The five memory layers."""

from __future__ import annotations

from enum import Enum

from core.errors import UnknownLayerError


class MemoryLayer(str, Enum):
    """Closed set of independently indexed memory partitions."""

    SHORT_TERM = "short_term"
    LONG_TERM = "long_term"
    WORKING = "working"
    EPISODIC = "episodic"
    SEMANTIC = "semantic"

    @classmethod
    def parse(cls, value: str | MemoryLayer) -> MemoryLayer:
        """Return the layer for a name, raising UnknownLayerError otherwise."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise UnknownLayerError(value) from None


ALL_LAYERS: tuple[MemoryLayer, ...] = tuple(MemoryLayer)
