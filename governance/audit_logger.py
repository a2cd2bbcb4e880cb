"""Structured JSONL audit logger for state-changing core operations."""

from __future__ import annotations

import hashlib
import json
import logging
import threading
from datetime import UTC, datetime
from pathlib import Path
from typing import Any


class AuditLogger:
    """Appends one JSON line per rule change or memory write."""

    def __init__(self, log_path: Path) -> None:
        self.log_path = log_path
        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        self.logger = logging.getLogger("cm.audit")
        self._lock = threading.Lock()

    @staticmethod
    def _hash_inputs(inputs: dict[str, Any]) -> str:
        payload = json.dumps(inputs, sort_keys=True, default=str).encode("utf-8")
        return hashlib.sha256(payload).hexdigest()

    def log(
        self,
        operation: str,
        target: str,
        inputs: dict[str, Any],
        outcome: str,
        reason: str = "",
    ) -> None:
        """Append one JSONL audit event."""
        event = {
            "timestamp": datetime.now(UTC).isoformat(),
            "operation": operation,
            "target": target,
            "inputs_hash": self._hash_inputs(inputs),
            "outcome": outcome,
            "reason": reason,
        }
        line = json.dumps(event, ensure_ascii=True)
        with self._lock:
            with self.log_path.open("a", encoding="utf-8") as fh:
                fh.write(line + "\n")
        self.logger.info(line)
