"""Five-layer memory store tests."""

from __future__ import annotations

import threading
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from sqlalchemy import text

from core.errors import StorageError, UnknownLayerError
from memory.layers import ALL_LAYERS, MemoryLayer
from memory.memory_store import MemoryStore
from memory.stores.layer_index import build_match_expression, query_terms


@pytest.fixture
def memory(tmp_path: Path):
    store = MemoryStore(tmp_path / "memory")
    yield store
    store.close()


def test_one_index_directory_per_layer(tmp_path: Path) -> None:
    store = MemoryStore(tmp_path / "memory")
    names = sorted(path.name for path in (tmp_path / "memory").iterdir() if path.is_dir())
    assert names == sorted(layer.value for layer in ALL_LAYERS)
    assert all((tmp_path / "memory" / name / "index.db").exists() for name in names)
    store.close()


def test_store_returns_populated_record(memory: MemoryStore) -> None:
    before = datetime.now(UTC)
    record = memory.store("episodic", "walked along the river")
    assert len(record.id) == 32
    assert record.content == "walked along the river"
    assert record.layer is MemoryLayer.EPISODIC
    assert record.timestamp.tzinfo is not None
    assert before <= record.timestamp <= datetime.now(UTC)


def test_round_trip(memory: MemoryStore) -> None:
    for layer in ALL_LAYERS:
        record = memory.store(layer, "unique-test-content-12345")
        hits = memory.search(layer, "unique-test-content-12345", 10)
        assert hits
        assert hits[0].id == record.id
        assert hits[0].content == record.content
        assert hits[0].timestamp == record.timestamp
        assert hits[0].layer is layer


def test_layers_are_isolated(memory: MemoryStore) -> None:
    memory.store("short_term", "X")
    assert memory.search("long_term", "X", 10) == []
    assert len(memory.search("short_term", "X", 10)) == 1


def test_limit_respected(memory: MemoryStore) -> None:
    for i in range(20):
        memory.store(MemoryLayer.WORKING, f"draft number {i} about gardening")
    assert len(memory.search(MemoryLayer.WORKING, "gardening", 5)) == 5
    assert len(memory.search(MemoryLayer.WORKING, "gardening", 50)) == 20


def test_no_match_is_empty(memory: MemoryStore) -> None:
    memory.store("semantic", "water boils at one hundred degrees")
    assert memory.search("semantic", "volcano", 10) == []
    assert memory.search("semantic", "", 10) == []
    assert memory.search("semantic", "?!", 10) == []


def test_records_with_all_terms_rank_first(memory: MemoryStore) -> None:
    memory.store("long_term", "zebra yak okapi")
    memory.store("long_term", "apple kiwi mango")
    full = memory.store("long_term", "apple banana mango")

    hits = memory.search("long_term", "apple banana", 10)
    assert hits[0].id == full.id
    assert all("zebra" not in hit.content for hit in hits)


def test_query_syntax_is_treated_as_text(memory: MemoryStore) -> None:
    record = memory.store("working", "NEAR the AND gate")
    hits = memory.search("working", 'NEAR( "AND" OR* gate', 10)
    assert [hit.id for hit in hits] == [record.id]


def test_store_visible_after_cached_search(memory: MemoryStore) -> None:
    memory.store("short_term", "coffee with sam")
    assert len(memory.search("short_term", "coffee", 10)) == 1
    memory.store("short_term", "coffee with alex")
    assert len(memory.search("short_term", "coffee", 10)) == 2


def test_persistence_across_restart(tmp_path: Path) -> None:
    data_dir = tmp_path / "memory"
    first = MemoryStore(data_dir)
    record = first.store("long_term", "the lighthouse keeper's name was Ida")
    first.close()

    second = MemoryStore(data_dir)
    hits = second.search("long_term", "lighthouse", 10)
    assert [hit.id for hit in hits] == [record.id]
    assert second.count("long_term") == 1
    second.close()


def test_entity_memories_span_layers(memory: MemoryStore) -> None:
    older = memory.store("short_term", "met Ana", entity_id="ana")
    newer = memory.store("semantic", "Ana prefers tea", entity_id="ana")
    memory.store("semantic", "Ben prefers coffee", entity_id="ben")

    records = memory.get_entity_memories("ana", 10)
    assert [record.id for record in records] == [newer.id, older.id]
    assert memory.get_entity_memories("ana", 1)[0].id == newer.id


def test_preferred_provider_round_trip(memory: MemoryStore) -> None:
    memory.store("working", "Test memory with provider", preferred_llm_provider="anthropic/claude")
    hits = memory.search("working", "Test memory", 10)
    assert len(hits) == 1
    assert hits[0].preferred_llm_provider == "anthropic/claude"


def test_recent_returns_newest_first(memory: MemoryStore) -> None:
    first = memory.store("episodic", "first event")
    second = memory.store("episodic", "second event")
    assert [record.id for record in memory.recent("episodic", 10)] == [second.id, first.id]


def test_prune_old_memories(memory: MemoryStore) -> None:
    memory.store("short_term", "fleeting thought")
    memory.store("long_term", "fleeting but durable thought")

    assert memory.prune_old_memories("short_term", timedelta(days=1)) == 0
    assert memory.count("short_term") == 1

    removed = memory.index("short_term").prune_before(datetime.now(UTC) + timedelta(seconds=5))
    assert removed == 1
    assert memory.search("short_term", "fleeting", 10) == []
    assert len(memory.search("long_term", "fleeting", 10)) == 1


def test_index_sizes(memory: MemoryStore) -> None:
    memory.store("semantic", "some content " * 50)
    sizes = memory.get_all_index_sizes()
    assert set(sizes) == {layer.value for layer in ALL_LAYERS}
    assert all(size > 0 for size in sizes.values())
    assert memory.get_index_size("semantic") == sizes["semantic"]


def test_unknown_layer_rejected(memory: MemoryStore) -> None:
    with pytest.raises(UnknownLayerError):
        memory.store("medium_term", "nope")
    with pytest.raises(UnknownLayerError):
        memory.search("", "nope", 10)


def test_layer_parse() -> None:
    assert MemoryLayer.parse(" Short_Term ") is MemoryLayer.SHORT_TERM
    assert MemoryLayer.parse(MemoryLayer.WORKING) is MemoryLayer.WORKING
    assert [layer.value for layer in ALL_LAYERS] == [
        "short_term",
        "long_term",
        "working",
        "episodic",
        "semantic",
    ]


def test_query_terms_and_match_expression() -> None:
    terms = query_terms("Unique-test content, unique!")
    assert terms == ("unique", "test", "content")
    assert build_match_expression(terms) == '"unique" OR "test" OR "content"'


def test_concurrent_stores_same_and_different_layers(memory: MemoryStore) -> None:
    errors: list[Exception] = []

    def writer(layer: MemoryLayer, tag: int) -> None:
        try:
            for i in range(10):
                memory.store(layer, f"concurrent note {tag} {i}")
                memory.search(layer, "concurrent", 5)
        except Exception as exc:  # pragma: no cover - surfaced via errors list
            errors.append(exc)

    threads = [threading.Thread(target=writer, args=(MemoryLayer.WORKING, n)) for n in range(4)]
    threads += [threading.Thread(target=writer, args=(MemoryLayer.EPISODIC, n)) for n in range(2)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert memory.count(MemoryLayer.WORKING) == 40
    assert memory.count(MemoryLayer.EPISODIC) == 20
    assert len(memory.search(MemoryLayer.WORKING, "concurrent", 100)) == 40


def test_broken_index_raises_storage_error(memory: MemoryStore) -> None:
    with memory.index("working").sql_store.engine.begin() as conn:
        conn.execute(text("DROP TABLE memories_fts"))

    with pytest.raises(StorageError):
        memory.store("working", "this write cannot be indexed")
    with pytest.raises(StorageError):
        memory.search("working", "indexed", 5)

    # Other layers keep working.
    memory.store("semantic", "still indexed")
    assert len(memory.search("semantic", "indexed", 5)) == 1
