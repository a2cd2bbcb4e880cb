"""Durable storage for moral rules."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from sqlalchemy.exc import SQLAlchemyError

from conscience.rules import MoralRule
from conscience.schemas import MoralRuleRecord, RulesBase
from core.errors import StorageError
from core.sql_store import SQLStore

logger = logging.getLogger("cm.conscience.repository")


class RuleRepository:
    """Persists rules in the ``moral_rules`` table of an SQLite database."""

    def __init__(self, db_path: Path) -> None:
        self.sql_store = SQLStore(db_path, base=RulesBase)
        self.sql_store.create_all()

    def load(self) -> list[MoralRule]:
        """Return persisted rules in insertion order."""
        try:
            with self.sql_store.session() as sess:
                rows = sess.query(MoralRuleRecord).order_by(MoralRuleRecord.id.asc()).all()
                return [self._row_to_rule(row) for row in rows]
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to load moral rules: {exc}") from exc

    def seed(self, rules: Iterable[MoralRule]) -> None:
        """Insert rules only when the table is empty."""
        try:
            with self.sql_store.session() as sess:
                if sess.query(MoralRuleRecord.id).first() is not None:
                    return
                for rule in rules:
                    sess.add(self._rule_to_row(rule))
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to seed moral rules: {exc}") from exc
        logger.info("Seeded default moral rules into %s", self.sql_store.db_path)

    def save(self, rule: MoralRule) -> None:
        """Insert or update a rule by name."""
        try:
            with self.sql_store.session() as sess:
                row = sess.query(MoralRuleRecord).filter(MoralRuleRecord.name == rule.name).first()
                if row is None:
                    sess.add(self._rule_to_row(rule))
                else:
                    row.description = rule.description
                    row.weight = rule.weight
                    row.keywords = list(rule.keywords)
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to save moral rule {rule.name}: {exc}") from exc

    def delete(self, name: str) -> bool:
        """Delete a rule by name, returning whether a row was removed."""
        try:
            with self.sql_store.session() as sess:
                count = sess.query(MoralRuleRecord).filter(MoralRuleRecord.name == name).delete()
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to delete moral rule {name}: {exc}") from exc
        return count > 0

    def close(self) -> None:
        self.sql_store.dispose()

    @staticmethod
    def _rule_to_row(rule: MoralRule) -> MoralRuleRecord:
        return MoralRuleRecord(
            name=rule.name,
            description=rule.description,
            weight=rule.weight,
            keywords=list(rule.keywords),
        )

    @staticmethod
    def _row_to_rule(row: MoralRuleRecord) -> MoralRule:
        return MoralRule(
            name=row.name,
            description=row.description,
            weight=float(row.weight),
            keywords=tuple(row.keywords or ()),
        )
