"""Data models for ``memo_finetune``.

- :class:`TransactionRecord`: one row of the raw transaction export.
- :class:`ClassifiedRecord`: the unit stored in the safe/unsafe caches and in
  every intermediate JSON file. Identified by the structural triple
  ``(description, memo, amount_dollars)``; there is no synthetic id.
- :class:`TrainingExample`: one prompt/completion line of the final JSONL.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, TypeAlias

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

Verdict: TypeAlias = Literal["safe", "unsafe"]
"""Binary label: ``safe`` when the memo can be reconstructed from the
description alone, ``unsafe`` when the model would have to invent context."""

RecordKey: TypeAlias = tuple[str, str, float]


@dataclass(frozen=True, slots=True)
class TransactionRecord:
    """A single transaction from the tab-separated export.

    ``description`` is whitespace-collapsed and ``memo`` trimmed by the loader;
    ``amount_cents`` is negative for debits.
    """

    id: str
    description: str
    amount_cents: int
    memo: str

    @property
    def amount_dollars(self) -> float:
        return self.amount_cents / 100

    def to_classified(self) -> ClassifiedRecord:
        return ClassifiedRecord(
            description=self.description,
            memo=self.memo,
            amount_dollars=self.amount_dollars,
        )


class ClassifiedRecord(BaseModel):
    """A transaction reduced to the fields the fine-tuning set cares about.

    Serialized with the ``amountDollars`` key so cache files stay compatible
    with exports produced by earlier versions of the tool.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    description: str
    memo: str
    amount_dollars: float = Field(alias="amountDollars")

    @property
    def key(self) -> RecordKey:
        return (self.description, self.memo, self.amount_dollars)

    def with_memo(self, memo: str) -> ClassifiedRecord:
        return self.model_copy(update={"memo": memo})


class TrainingExample(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    prompt: str
    completion: str


@dataclass(slots=True)
class ClassifyStats:
    """Counters for one classification run."""

    total: int = 0
    ineligible: int = 0
    cached: int = 0
    overridden: int = 0
    safe: int = 0
    unsafe: int = 0

    @property
    def classified(self) -> int:
        return self.safe + self.unsafe


# Validator for whole cache/intermediate files (JSON arrays of records).
RecordList = TypeAdapter(list[ClassifiedRecord])


__all__ = [
    "ClassifiedRecord",
    "ClassifyStats",
    "RecordKey",
    "RecordList",
    "TrainingExample",
    "TransactionRecord",
    "Verdict",
]
