"""SQLAlchemy schema for a single memory layer index."""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    """Return UTC datetime for default timestamps."""
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Declarative base."""


class MemoryRow(Base):
    """Memory records of one layer."""

    __tablename__ = "memories"

    pk: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(32), unique=True, index=True)
    content: Mapped[str] = mapped_column(Text)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, index=True)
    entity_id: Mapped[str | None] = mapped_column(String(128), nullable=True, index=True)
    llm_provider: Mapped[str | None] = mapped_column(String(128), nullable=True)


FTS_TOKENIZER = "unicode61 remove_diacritics 2"

# External-content FTS5 table mirroring memories.content. Rows are never
# updated, so insert and delete triggers keep the index in sync.
FTS_DDL: tuple[str, ...] = (
    f"""
    CREATE VIRTUAL TABLE IF NOT EXISTS memories_fts USING fts5(
        content,
        content='memories',
        content_rowid='pk',
        tokenize='{FTS_TOKENIZER}'
    )
    """,
    """
    CREATE TRIGGER IF NOT EXISTS memories_ai AFTER INSERT ON memories BEGIN
        INSERT INTO memories_fts(rowid, content) VALUES (new.pk, new.content);
    END
    """,
    """
    CREATE TRIGGER IF NOT EXISTS memories_ad AFTER DELETE ON memories BEGIN
        INSERT INTO memories_fts(memories_fts, rowid, content)
        VALUES ('delete', old.pk, old.content);
    END
    """,
)


def create_fts(engine: Engine) -> None:
    """Create the FTS5 table and sync triggers if missing."""
    with engine.begin() as conn:
        for statement in FTS_DDL:
            conn.exec_driver_sql(statement)
