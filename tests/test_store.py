from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from memo_finetune.models import ClassifiedRecord
from memo_finetune.store import ClassificationCache, JsonRecordStore, read_records, write_records

GROCERIES = ClassifiedRecord(description="ACME STORE 123", memo="🛒 Groceries", amount_dollars=-42.5)
COFFEE = ClassifiedRecord(description="COFFEE SHOP", memo="☕ Coffee", amount_dollars=-3.5)


def test_load_absent_file_is_empty(tmp_path: Path):
    store = JsonRecordStore.load(tmp_path / "safe.json")

    assert len(store) == 0
    assert not store.exists(GROCERIES)
    assert not (tmp_path / "safe.json").exists()


def test_upsert_keys_on_structural_triple(tmp_path: Path):
    store = JsonRecordStore(tmp_path / "safe.json")

    assert store.upsert(GROCERIES) is True
    assert store.upsert(ClassifiedRecord(description="ACME STORE 123", memo="🛒 Groceries", amount_dollars=-42.5)) is False
    assert store.upsert(GROCERIES.model_copy(update={"amount_dollars": -42.51})) is True

    assert len(store) == 2
    assert GROCERIES in store


def test_flush_writes_pretty_json_with_original_keys(tmp_path: Path):
    path = tmp_path / "nested" / "safe.json"
    store = JsonRecordStore(path, [GROCERIES, COFFEE])

    store.flush()

    text = path.read_text(encoding="utf-8")
    assert text.startswith("[\n  {")
    assert "🛒" in text
    assert json.loads(text) == [
        {"description": "ACME STORE 123", "memo": "🛒 Groceries", "amountDollars": -42.5},
        {"description": "COFFEE SHOP", "memo": "☕ Coffee", "amountDollars": -3.5},
    ]
    assert not path.with_suffix(".json.tmp").exists()


def test_reload_accepts_integer_amounts(tmp_path: Path):
    path = tmp_path / "safe.json"
    path.write_text(
        json.dumps([{"description": "BAKERY", "memo": "🥐 Croissant", "amountDollars": -3}]),
        encoding="utf-8",
    )

    store = JsonRecordStore.load(path)

    assert store.exists(ClassifiedRecord(description="BAKERY", memo="🥐 Croissant", amount_dollars=-3.0))


def test_malformed_cache_is_fatal(tmp_path: Path):
    path = tmp_path / "safe.json"
    path.write_text(json.dumps([{"description": "X", "memo": "🛒 y"}]), encoding="utf-8")

    with pytest.raises(ValidationError):
        JsonRecordStore.load(path)


def test_read_write_records_round_trip_preserves_order(tmp_path: Path):
    path = tmp_path / "out.json"
    write_records(path, [COFFEE, GROCERIES])

    assert read_records(path) == [COFFEE, GROCERIES]


def test_cache_record_rewrites_both_files(tmp_path: Path):
    cache = ClassificationCache.open(tmp_path / "safe.json", tmp_path / "unsafe.json")

    assert cache.record(GROCERIES, "unsafe") is True

    assert json.loads((tmp_path / "safe.json").read_text(encoding="utf-8")) == []
    assert len(json.loads((tmp_path / "unsafe.json").read_text(encoding="utf-8"))) == 1
    assert cache.verdict_of(GROCERIES) == "unsafe"
    assert cache.verdict_of(COFFEE) is None


def test_cache_never_stores_a_triple_twice(tmp_path: Path):
    cache = ClassificationCache.open(tmp_path / "safe.json", tmp_path / "unsafe.json")
    cache.record(COFFEE, "safe")

    assert cache.record(COFFEE, "unsafe") is False
    assert cache.record(COFFEE, "safe") is False

    assert len(cache.safe) == 1
    assert len(cache.unsafe) == 0


def test_cache_open_seeds_from_existing_files(tmp_path: Path):
    write_records(tmp_path / "safe.json", [COFFEE])
    write_records(tmp_path / "unsafe.json", [GROCERIES])

    cache = ClassificationCache.open(tmp_path / "safe.json", tmp_path / "unsafe.json")

    assert cache.verdict_of(COFFEE) == "safe"
    assert cache.verdict_of(GROCERIES) == "unsafe"


def test_existing_duplicates_survive_the_next_flush(tmp_path: Path):
    write_records(tmp_path / "safe.json", [COFFEE, COFFEE])
    cache = ClassificationCache.open(tmp_path / "safe.json", tmp_path / "unsafe.json")

    assert cache.record(COFFEE, "safe") is False
    assert cache.record(GROCERIES, "safe") is True

    assert read_records(tmp_path / "safe.json") == [COFFEE, COFFEE, GROCERIES]
