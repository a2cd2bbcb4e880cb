"""Typer command handlers."""

from __future__ import annotations

import json
import os
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import timedelta
from pathlib import Path

import typer

from core.errors import CoreError
from core.orchestrator import Orchestrator, RuntimeBundle

ROOT_ENV = "CM_ROOT"


@contextmanager
def _runtime(root: Path | None = None) -> Iterator[RuntimeBundle]:
    if root is None and os.environ.get(ROOT_ENV):
        root = Path(os.environ[ROOT_ENV])
    # Each invocation is its own process, so rule changes must reach disk.
    bundle = Orchestrator(root=root).build(persist_rules=True)
    try:
        yield bundle
    except CoreError as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    finally:
        bundle.close()


def _echo_json(payload: object) -> None:
    typer.echo(json.dumps(payload, indent=2))


def evaluate(action: str, entity_id: str | None = None) -> None:
    """Score an action."""
    with _runtime() as bundle:
        _echo_json(bundle.service.evaluate({"action": action, "entity_id": entity_id}))


def rules_list() -> None:
    """List rules."""
    with _runtime() as bundle:
        _echo_json(bundle.service.list_rules())


def rules_add(
    name: str,
    description: str,
    weight: float,
    keywords: list[str],
    replace: bool,
) -> None:
    """Add a rule."""
    with _runtime() as bundle:
        rule = bundle.service.add_rule(
            {
                "name": name,
                "description": description,
                "weight": weight,
                "keywords": keywords,
                "replace": replace,
            }
        )
        typer.echo(f"Added rule: {rule['name']} (weight={rule['weight']})")


def rules_remove(name: str) -> None:
    """Remove a rule."""
    with _runtime() as bundle:
        rule = bundle.service.remove_rule(name)
        typer.echo(f"Removed rule: {rule['name']}")


def memory_store(layer: str, content: str, entity_id: str | None, provider: str | None) -> None:
    """Store a memory."""
    with _runtime() as bundle:
        record = bundle.service.store_memory(
            {
                "layer": layer,
                "content": content,
                "entity_id": entity_id,
                "preferred_llm_provider": provider,
            }
        )
        _echo_json(record)


def memory_search(layer: str, query: str, limit: int) -> None:
    """Search a layer."""
    with _runtime() as bundle:
        _echo_json(bundle.service.search_memory({"layer": layer, "query": query, "limit": limit}))


def memory_entity(entity_id: str, limit: int) -> None:
    """List entity-linked memories."""
    with _runtime() as bundle:
        records = bundle.memory.get_entity_memories(entity_id, limit)
        _echo_json([record.to_public_dict() for record in records])


def memory_sizes() -> None:
    """Show index sizes."""
    with _runtime() as bundle:
        _echo_json(bundle.memory.get_all_index_sizes())


def memory_prune(layer: str, days: float) -> None:
    """Prune a layer."""
    with _runtime() as bundle:
        deleted = bundle.memory.prune_old_memories(layer, timedelta(days=days))
        typer.echo(f"Pruned {deleted} memories from {layer}")


def config_show() -> None:
    """Show effective runtime config."""
    with _runtime() as bundle:
        _echo_json(bundle.config)
