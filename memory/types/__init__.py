"""Typed memory payload models."""

from memory.types.record import MemoryRecord

__all__ = ["MemoryRecord"]
