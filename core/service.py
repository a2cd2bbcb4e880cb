"""Request-level facade over the rule evaluator and memory store.

This is the layer an HTTP or CLI surface talks to: it validates payloads
against configured limits, calls the components and returns JSON-ready
structures.
"""

from __future__ import annotations

import logging
from typing import Any

from conscience.evaluator import RuleEvaluator
from core.errors import CoreError, StorageError
from core.validation import (
    ActionInput,
    Limits,
    MemoryInput,
    RuleInput,
    SearchInput,
    validate_request,
)
from governance.audit_logger import AuditLogger
from memory.layers import MemoryLayer
from memory.memory_store import MemoryStore

logger = logging.getLogger("cm.service")


class CoreService:
    """Validates requests and dispatches them to the core components."""

    def __init__(
        self,
        evaluator: RuleEvaluator,
        memory: MemoryStore,
        limits: Limits | None = None,
        audit_logger: AuditLogger | None = None,
        record_evaluations: bool = True,
    ) -> None:
        self.evaluator = evaluator
        self.memory = memory
        self.limits = limits or Limits()
        self.audit_logger = audit_logger
        self.record_evaluations = record_evaluations

    def evaluate(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Score an action; optionally remember it in short-term memory."""
        request = validate_request(ActionInput, payload, self.limits)
        result = self.evaluator.evaluate(request.action)

        if self.record_evaluations:
            try:
                self.memory.store(
                    MemoryLayer.SHORT_TERM,
                    f"Action: {result.action} | Score: {result.score}",
                    entity_id=request.entity_id,
                )
            except StorageError as exc:
                logger.error("Failed to record evaluation in memory: %s", exc)

        logger.info("Action evaluated with score %s", result.score)
        return {"score": result.score, "action": result.action, "triggered": list(result.triggered)}

    def list_rules(self) -> list[dict[str, Any]]:
        return [rule.to_public_dict() for rule in self.evaluator.list_rules()]

    def add_rule(self, payload: dict[str, Any]) -> dict[str, Any]:
        request = validate_request(RuleInput, payload, self.limits)
        try:
            rule = self.evaluator.add_rule(
                request.name,
                request.description,
                request.weight,
                keywords=request.keywords,
                replace=request.replace,
            )
        except CoreError as exc:
            self._audit("add_rule", request.name, payload, "rejected", str(exc))
            raise
        self._audit("add_rule", rule.name, payload, "success")
        return rule.to_public_dict()

    def remove_rule(self, name: str) -> dict[str, Any]:
        try:
            rule = self.evaluator.remove_rule(name)
        except CoreError as exc:
            self._audit("remove_rule", name, {"name": name}, "rejected", str(exc))
            raise
        self._audit("remove_rule", name, {"name": name}, "success")
        return rule.to_public_dict()

    def store_memory(self, payload: dict[str, Any]) -> dict[str, Any]:
        request = validate_request(MemoryInput, payload, self.limits)
        try:
            record = self.memory.store(
                request.layer,
                request.content,
                entity_id=request.entity_id,
                preferred_llm_provider=request.preferred_llm_provider,
            )
        except StorageError as exc:
            self._audit("store_memory", request.layer.value, payload, "failed", str(exc))
            raise
        self._audit("store_memory", request.layer.value, payload, "success")
        return record.to_public_dict()

    def search_memory(self, payload: dict[str, Any]) -> list[dict[str, Any]]:
        request = validate_request(SearchInput, payload, self.limits)
        records = self.memory.search(request.layer, request.query, request.limit)
        return [record.to_public_dict() for record in records]

    def _audit(
        self,
        operation: str,
        target: str,
        inputs: dict[str, Any],
        outcome: str,
        reason: str = "",
    ) -> None:
        if self.audit_logger is not None:
            self.audit_logger.log(operation, target, inputs, outcome, reason)
