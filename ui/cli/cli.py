"""CLI entrypoint for conscience-memory."""

from __future__ import annotations

import typer

from ui.cli import commands

app = typer.Typer(help="Conscience engine and five-layer memory")
rules_app = typer.Typer(help="Moral rule commands")
memory_app = typer.Typer(help="Memory commands")
config_app = typer.Typer(help="Configuration commands")


@app.command("evaluate")
def evaluate_cmd(
    action: str = typer.Argument(..., help="Action text to score"),
    entity_id: str = typer.Option(None, "--entity", help="Entity to link the recorded evaluation to"),
) -> None:
    """Score an action against the moral rules."""
    commands.evaluate(action=action, entity_id=entity_id)


@rules_app.command("list")
def rules_list_cmd() -> None:
    """List moral rules."""
    commands.rules_list()


@rules_app.command("add")
def rules_add_cmd(
    name: str = typer.Argument(..., help="Rule identifier"),
    description: str = typer.Argument(..., help="Rule description"),
    weight: float = typer.Option(..., help="Weight added when the rule fires"),
    keyword: list[str] = typer.Option(None, "--keyword", help="Trigger keyword (repeatable)"),
    replace: bool = typer.Option(False, "--replace", help="Overwrite an existing rule"),
) -> None:
    """Add a moral rule."""
    commands.rules_add(
        name=name,
        description=description,
        weight=weight,
        keywords=keyword or [],
        replace=replace,
    )


@rules_app.command("remove")
def rules_remove_cmd(name: str = typer.Argument(..., help="Rule identifier")) -> None:
    """Remove a moral rule."""
    commands.rules_remove(name=name)


@memory_app.command("store")
def memory_store_cmd(
    layer: str = typer.Argument(..., help="short_term, long_term, working, episodic or semantic"),
    content: str = typer.Argument(..., help="Memory text content"),
    entity_id: str = typer.Option(None, "--entity", help="Linked entity id"),
    provider: str = typer.Option(None, "--provider", help="Preferred LLM provider"),
) -> None:
    """Store a memory in a layer."""
    commands.memory_store(layer=layer, content=content, entity_id=entity_id, provider=provider)


@memory_app.command("search")
def memory_search_cmd(
    layer: str = typer.Argument(..., help="Layer to search"),
    query: str = typer.Argument(..., help="Full-text query"),
    limit: int = typer.Option(10, min=1, max=100),
) -> None:
    """Search one memory layer."""
    commands.memory_search(layer=layer, query=query, limit=limit)


@memory_app.command("entity")
def memory_entity_cmd(
    entity_id: str = typer.Argument(..., help="Entity id"),
    limit: int = typer.Option(10, min=1, max=100),
) -> None:
    """List memories linked to an entity across layers."""
    commands.memory_entity(entity_id=entity_id, limit=limit)


@memory_app.command("sizes")
def memory_sizes_cmd() -> None:
    """Show on-disk index size per layer."""
    commands.memory_sizes()


@memory_app.command("prune")
def memory_prune_cmd(
    layer: str = typer.Argument(..., help="Layer to prune"),
    days: float = typer.Option(30.0, min=0.0, help="Delete memories older than this many days"),
) -> None:
    """Delete old memories from a layer."""
    commands.memory_prune(layer=layer, days=days)


@config_app.command("show")
def config_show_cmd() -> None:
    """Show effective configuration."""
    commands.config_show()


app.add_typer(rules_app, name="rules")
app.add_typer(memory_app, name="memory")
app.add_typer(config_app, name="config")


def main() -> None:
    """Console script entrypoint."""
    app()


if __name__ == "__main__":
    main()
