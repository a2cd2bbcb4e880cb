"""Five-layer memory store with one full-text index per layer."""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from pathlib import Path

from memory.layers import ALL_LAYERS, MemoryLayer
from memory.stores.layer_index import LayerIndex
from memory.types.record import MemoryRecord

logger = logging.getLogger("cm.memory")


class MemoryStore:
    """Routes writes and searches to the index of the selected layer.

    Each layer lives in ``<data_dir>/<layer name>/`` and is opened once.
    Reopening an existing ``data_dir`` resumes serving its records.
    """

    def __init__(self, data_dir: Path, cache_size: int = 256) -> None:
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self._indices: dict[MemoryLayer, LayerIndex] = {
            layer: LayerIndex(layer, self.data_dir / layer.value, cache_size=cache_size)
            for layer in ALL_LAYERS
        }
        logger.info("Memory store opened at %s", self.data_dir)

    def index(self, layer: MemoryLayer | str) -> LayerIndex:
        return self._indices[MemoryLayer.parse(layer)]

    def store(
        self,
        layer: MemoryLayer | str,
        content: str,
        entity_id: str | None = None,
        preferred_llm_provider: str | None = None,
    ) -> MemoryRecord:
        """Persist ``content`` in ``layer`` and return the new record."""
        record = self.index(layer).add(
            content,
            entity_id=entity_id,
            preferred_llm_provider=preferred_llm_provider,
        )
        logger.debug("Stored memory %s in %s", record.id, record.layer.value)
        return record

    def search(self, layer: MemoryLayer | str, query: str, limit: int = 10) -> list[MemoryRecord]:
        """Up to ``limit`` records of ``layer`` ranked by relevance to ``query``."""
        return self.index(layer).search(query, limit)

    def recent(self, layer: MemoryLayer | str, limit: int = 10) -> list[MemoryRecord]:
        return self.index(layer).recent(limit)

    def get_entity_memories(self, entity_id: str, limit: int = 10) -> list[MemoryRecord]:
        """Records linked to an entity across all layers, newest first."""
        records: list[MemoryRecord] = []
        for index in self._indices.values():
            records.extend(index.by_entity(entity_id, limit))
        records.sort(key=lambda record: record.timestamp, reverse=True)
        return records[:limit]

    def count(self, layer: MemoryLayer | str) -> int:
        return self.index(layer).count()

    def get_index_size(self, layer: MemoryLayer | str) -> int:
        """Bytes on disk for one layer."""
        return self.index(layer).size_bytes()

    def get_all_index_sizes(self) -> dict[str, int]:
        return {layer.value: index.size_bytes() for layer, index in self._indices.items()}

    def prune_old_memories(self, layer: MemoryLayer | str, older_than: timedelta) -> int:
        """Delete records of ``layer`` older than ``older_than``."""
        cutoff = datetime.now(UTC) - older_than
        index = self.index(layer)
        deleted = index.prune_before(cutoff)
        if deleted:
            logger.info("Pruned %d old memories from layer %s", deleted, index.layer.value)
        return deleted

    def close(self) -> None:
        for index in self._indices.values():
            index.close()
