"""Stored memory record model."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from memory.layers import MemoryLayer


class MemoryRecord(BaseModel):
    """Immutable unit of stored content belonging to exactly one layer."""

    model_config = ConfigDict(frozen=True)

    id: str
    content: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    layer: MemoryLayer
    entity_id: str | None = None
    preferred_llm_provider: str | None = None

    def to_public_dict(self) -> dict[str, Any]:
        """JSON-ready mapping."""
        return self.model_dump(mode="json")
