"""Full-text index for a single memory layer, backed by SQLite FTS5."""

from __future__ import annotations

import logging
import re
import threading
import uuid
from datetime import UTC, datetime
from pathlib import Path

from sqlalchemy import select, text
from sqlalchemy.exc import SQLAlchemyError

from core.errors import StorageError
from core.sql_store import SQLStore
from memory.layers import MemoryLayer
from memory.schemas import Base, MemoryRow, create_fts
from memory.stores.cache import Cache
from memory.types.record import MemoryRecord

logger = logging.getLogger("cm.memory.index")

INDEX_FILENAME = "index.db"

_TERM_RE = re.compile(r"[^\W_]+", re.UNICODE)

_SEARCH_SQL = text(
    """
    SELECT memories.pk, memories.id, memories.content, memories.timestamp,
           memories.entity_id, memories.llm_provider
    FROM memories_fts
    JOIN memories ON memories.pk = memories_fts.rowid
    WHERE memories_fts MATCH :query
    ORDER BY bm25(memories_fts) ASC, memories.timestamp DESC
    LIMIT :limit
    """
).columns(*MemoryRow.__table__.c)


def query_terms(query: str) -> tuple[str, ...]:
    """Distinct lowercase word terms of a free-text query, in order."""
    seen: dict[str, None] = {}
    for match in _TERM_RE.finditer(query):
        seen.setdefault(match.group(0).lower(), None)
    return tuple(seen)


def build_match_expression(terms: tuple[str, ...]) -> str:
    """OR-combine quoted terms so FTS5 operators in user text stay literal."""
    return " OR ".join(f'"{term}"' for term in terms)


class LayerIndex:
    """Owns the on-disk index of one layer.

    Writes are serialized by a per-index lock. Reads run without it; WAL
    mode lets them see either the pre- or post-commit state.
    """

    def __init__(self, layer: MemoryLayer, layer_dir: Path, cache_size: int = 256) -> None:
        self.layer = layer
        self.layer_dir = layer_dir
        self.layer_dir.mkdir(parents=True, exist_ok=True)
        self.sql_store = SQLStore(layer_dir / INDEX_FILENAME, base=Base)
        self._write_lock = threading.Lock()
        self._generation = 0
        self._cache = Cache(max_entries=cache_size)
        try:
            self.sql_store.create_all()
            create_fts(self.sql_store.engine)
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to open index for layer {layer.value}: {exc}") from exc

    def add(
        self,
        content: str,
        entity_id: str | None = None,
        preferred_llm_provider: str | None = None,
    ) -> MemoryRecord:
        """Commit a new record and return it once it is searchable."""
        record = MemoryRecord(
            id=uuid.uuid4().hex,
            content=content,
            timestamp=datetime.now(UTC),
            layer=self.layer,
            entity_id=entity_id,
            preferred_llm_provider=preferred_llm_provider,
        )
        row = MemoryRow(
            id=record.id,
            content=record.content,
            timestamp=record.timestamp,
            entity_id=record.entity_id,
            llm_provider=record.preferred_llm_provider,
        )
        with self._write_lock:
            try:
                with self.sql_store.session() as sess:
                    sess.add(row)
            except SQLAlchemyError as exc:
                raise StorageError(f"Failed to store memory in {self.layer.value}: {exc}") from exc
            self._bump_generation()
        return record

    def search(self, query: str, limit: int) -> list[MemoryRecord]:
        """Relevance-ranked records whose content matches any query term."""
        terms = query_terms(query)
        if not terms or limit <= 0:
            return []

        key = (terms, limit)
        generation = self._generation
        cached = self._cache.get(key)
        if cached is not None and cached[0] == generation:
            return list(cached[1])

        try:
            with self.sql_store.session() as sess:
                rows = (
                    sess.execute(
                        select(MemoryRow).from_statement(_SEARCH_SQL),
                        {"query": build_match_expression(terms), "limit": int(limit)},
                    )
                    .scalars()
                    .all()
                )
                records = [self._row_to_record(row) for row in rows]
        except SQLAlchemyError as exc:
            raise StorageError(f"Search failed in {self.layer.value}: {exc}") from exc

        self._cache.set(key, (generation, tuple(records)))
        return records

    def recent(self, limit: int) -> list[MemoryRecord]:
        """Newest records first."""
        return self._select_newest(None, limit)

    def by_entity(self, entity_id: str, limit: int) -> list[MemoryRecord]:
        """Newest records linked to ``entity_id``."""
        return self._select_newest(entity_id, limit)

    def count(self) -> int:
        try:
            with self.sql_store.session() as sess:
                return sess.query(MemoryRow.pk).count()
        except SQLAlchemyError as exc:
            raise StorageError(f"Count failed in {self.layer.value}: {exc}") from exc

    def prune_before(self, cutoff: datetime) -> int:
        """Delete records stamped before ``cutoff``; return how many."""
        with self._write_lock:
            try:
                with self.sql_store.session() as sess:
                    deleted = (
                        sess.query(MemoryRow)
                        .filter(MemoryRow.timestamp < cutoff)
                        .delete(synchronize_session=False)
                    )
            except SQLAlchemyError as exc:
                raise StorageError(f"Prune failed in {self.layer.value}: {exc}") from exc
            if deleted:
                self._bump_generation()
        return int(deleted)

    def size_bytes(self) -> int:
        """Bytes used by the index files on disk."""
        if not self.layer_dir.exists():
            return 0
        return sum(path.stat().st_size for path in self.layer_dir.iterdir() if path.is_file())

    def close(self) -> None:
        self._cache.clear()
        self.sql_store.dispose()

    def _bump_generation(self) -> None:
        self._generation += 1
        self._cache.clear()

    def _select_newest(self, entity_id: str | None, limit: int) -> list[MemoryRecord]:
        if limit <= 0:
            return []
        try:
            with self.sql_store.session() as sess:
                query = sess.query(MemoryRow)
                if entity_id is not None:
                    query = query.filter(MemoryRow.entity_id == entity_id)
                rows = (
                    query.order_by(MemoryRow.timestamp.desc(), MemoryRow.pk.desc())
                    .limit(limit)
                    .all()
                )
                return [self._row_to_record(row) for row in rows]
        except SQLAlchemyError as exc:
            raise StorageError(f"Read failed in {self.layer.value}: {exc}") from exc

    def _row_to_record(self, row: MemoryRow) -> MemoryRecord:
        timestamp = row.timestamp
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=UTC)
        return MemoryRecord(
            id=row.id,
            content=row.content,
            timestamp=timestamp,
            layer=self.layer,
            entity_id=row.entity_id,
            preferred_llm_provider=row.llm_provider,
        )
