"""SQLite SQLAlchemy store wrapper."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker


class SQLStore:
    """Provides SQLAlchemy session management for one SQLite database file."""

    def __init__(
        self,
        db_path: Path,
        base: type[DeclarativeBase] | None = None,
        busy_timeout_ms: int = 5000,
    ) -> None:
        self.db_path = db_path
        self.base = base
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.engine = create_engine(
            f"sqlite+pysqlite:///{self.db_path}",
            future=True,
            connect_args={"check_same_thread": False},
        )
        event.listen(self.engine, "connect", self._pragmas(busy_timeout_ms))
        self._session_factory = sessionmaker(bind=self.engine, future=True, expire_on_commit=False)

    @staticmethod
    def _pragmas(busy_timeout_ms: int) -> Any:
        def _on_connect(dbapi_conn: Any, _record: Any) -> None:
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute(f"PRAGMA busy_timeout={int(busy_timeout_ms)}")
            cursor.close()

        return _on_connect

    def create_all(self) -> None:
        """Create all schema tables if missing."""
        if self.base is not None:
            self.base.metadata.create_all(self.engine)

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Context manager that commits on success and rolls back on error."""
        sess = self._session_factory()
        try:
            yield sess
            sess.commit()
        except Exception:
            sess.rollback()
            raise
        finally:
            sess.close()

    def dispose(self) -> None:
        """Release pooled connections."""
        self.engine.dispose()
