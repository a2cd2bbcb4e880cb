"""Top-level application orchestrator."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from conscience.evaluator import RuleEvaluator
from conscience.repository import RuleRepository
from core.policy_runtime import configure_logging, ensure_runtime_dirs, load_effective_config
from core.service import CoreService
from core.validation import Limits
from governance.audit_logger import AuditLogger
from memory.memory_store import MemoryStore


@dataclass
class RuntimeBundle:
    """Holds initialized runtime components."""

    config: dict[str, Any]
    evaluator: RuleEvaluator
    memory: MemoryStore
    service: CoreService

    def close(self) -> None:
        self.memory.close()
        if self.evaluator.repository is not None:
            self.evaluator.repository.close()


class Orchestrator:
    """Creates and wires the core components once at process start."""

    def __init__(self, root: Path | None = None) -> None:
        default_root = Path(__file__).resolve().parents[1]
        self.root = (root or default_root).resolve()

    def build(self, persist_rules: bool | None = None) -> RuntimeBundle:
        """Wire the runtime; ``persist_rules`` overrides ``rules.persist``."""
        config = load_effective_config(self.root)
        configure_logging(config.get("logging", {}).get("level", "INFO"))
        paths = ensure_runtime_dirs(self.root, config)

        if persist_rules is None:
            persist_rules = bool(config.get("rules", {}).get("persist", False))
        repository = RuleRepository(paths["rules_db_path"]) if persist_rules else None

        memory = None
        try:
            evaluator = RuleEvaluator(repository=repository)
            memory_cfg = config.get("memory", {})
            memory = MemoryStore(
                paths["data_dir"],
                cache_size=int(memory_cfg.get("search_cache_size", 256)),
            )
            service = CoreService(
                evaluator=evaluator,
                memory=memory,
                limits=Limits.from_config(config),
                audit_logger=AuditLogger(paths["audit_log_path"]),
                record_evaluations=bool(memory_cfg.get("record_evaluations", True)),
            )
        except Exception:
            if memory is not None:
                memory.close()
            if repository is not None:
                repository.close()
            raise
        return RuntimeBundle(config=config, evaluator=evaluator, memory=memory, service=service)
