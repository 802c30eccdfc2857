"""JSON-file record stores for classified transactions.

A store is an ordered list of :class:`~memo_finetune.models.ClassifiedRecord`
keyed on the structural triple ``(description, memo, amount_dollars)``.

Persistence is a full-file rewrite on every :meth:`JsonRecordStore.flush`:
the whole array is serialized (indent 2), written to a ``.tmp`` sibling and
``os.replace``d into place. This favors simplicity over durability and assumes
one running instance; there is no cross-process locking.

:class:`ClassificationCache` owns the ``safe`` and ``unsafe`` stores for one
classification run. It is the only shared mutable state touched by the
classifier workers and serializes updates with a lock.
"""

from __future__ import annotations

import contextlib
import json
import os
import threading
from collections.abc import Iterable, Sequence
from os import PathLike
from pathlib import Path

from .logging_setup import get_logger
from .models import ClassifiedRecord, RecordKey, RecordList, Verdict

_logger = get_logger("memo_finetune.store")


def read_records(path: str | PathLike[str]) -> list[ClassifiedRecord]:
    """Parse a JSON array of records; raises ``FileNotFoundError`` when absent."""

    text = Path(path).read_text(encoding="utf-8")
    return RecordList.validate_json(text)


def write_records(path: str | PathLike[str], records: Iterable[ClassifiedRecord]) -> None:
    """Atomically write ``records`` as a pretty-printed JSON array."""

    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    tmp = p.with_suffix(p.suffix + ".tmp")
    payload = [r.model_dump(mode="json", by_alias=True) for r in records]
    try:
        tmp.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        os.replace(tmp, p)
    except Exception:
        with contextlib.suppress(FileNotFoundError):
            tmp.unlink()
        raise


class JsonRecordStore:
    """An ``exists``/``upsert`` store persisted as one JSON file.

    Seed ``records`` are kept verbatim, duplicates included, so a flush never
    rewrites history already on disk. Only :meth:`upsert` de-duplicates.
    """

    def __init__(self, path: str | PathLike[str], records: Iterable[ClassifiedRecord] = ()) -> None:
        self.path = Path(path)
        self._records: list[ClassifiedRecord] = list(records)
        self._keys: set[RecordKey] = {r.key for r in self._records}

    @classmethod
    def load(cls, path: str | PathLike[str]) -> JsonRecordStore:
        """Seed a store from ``path``; an absent file yields an empty store."""

        p = Path(path)
        if not p.exists():
            _logger.debug("store:absent path=%s", os.fspath(p))
            return cls(p)
        store = cls(p, read_records(p))
        _logger.debug("store:loaded path=%s count=%d", os.fspath(p), len(store))
        return store

    @property
    def records(self) -> Sequence[ClassifiedRecord]:
        return tuple(self._records)

    def exists(self, record: ClassifiedRecord) -> bool:
        return record.key in self._keys

    def upsert(self, record: ClassifiedRecord) -> bool:
        """Append ``record`` unless an equal one is stored. Returns True when added."""

        if record.key in self._keys:
            return False
        self._keys.add(record.key)
        self._records.append(record)
        return True

    def flush(self) -> None:
        write_records(self.path, self._records)

    def __contains__(self, record: object) -> bool:
        return isinstance(record, ClassifiedRecord) and self.exists(record)

    def __len__(self) -> int:
        return len(self._records)


class ClassificationCache:
    """The safe/unsafe store pair for one classification run."""

    def __init__(self, safe: JsonRecordStore, unsafe: JsonRecordStore) -> None:
        self.safe = safe
        self.unsafe = unsafe
        self._lock = threading.Lock()

    @classmethod
    def open(
        cls, safe_path: str | PathLike[str], unsafe_path: str | PathLike[str]
    ) -> ClassificationCache:
        return cls(JsonRecordStore.load(safe_path), JsonRecordStore.load(unsafe_path))

    def verdict_of(self, record: ClassifiedRecord) -> Verdict | None:
        with self._lock:
            if self.safe.exists(record):
                return "safe"
            if self.unsafe.exists(record):
                return "unsafe"
            return None

    def record(self, record: ClassifiedRecord, verdict: Verdict) -> bool:
        """Store ``record`` under ``verdict`` and rewrite both files.

        Returns False (and writes nothing) when the record is already present
        in either store, so a triple never lands in both.
        """

        with self._lock:
            if self.safe.exists(record) or self.unsafe.exists(record):
                return False
            target = self.safe if verdict == "safe" else self.unsafe
            target.upsert(record)
            self.safe.flush()
            self.unsafe.flush()
            return True


__all__ = ["ClassificationCache", "JsonRecordStore", "read_records", "write_records"]
