"""Adapter for the tab-separated bank transaction export.

The export has no header row. Columns are positional (exactly nine)::

    id, _, description, amountCents, _, _, _, memo, _

Underscored columns are ignored. Quote characters carry no meaning: the
export contains unescaped ``"`` inside descriptions and memos, so rows are
read with ``csv.QUOTE_NONE`` and quotes are kept as field content.

Normalization:
- ``description``: trimmed, internal whitespace runs collapsed to one space
- ``memo``: trimmed
- ``amount_cents``: trimmed, parsed as a base-10 integer

Failure mode
------------
A row with the wrong column count or a non-integer cents value raises
:class:`TransactionParseError` naming the line. The loader does not skip or
repair bad rows; the caller's run aborts.
"""

from __future__ import annotations

import csv
import re
from collections.abc import Iterable, Iterator
from os import PathLike
from pathlib import Path

from ...models import TransactionRecord

COLUMNS: tuple[str, ...] = ("id", "_", "description", "amountCents", "_", "_", "_", "memo", "_")

_ID_COL = 0
_DESCRIPTION_COL = 2
_AMOUNT_COL = 3
_MEMO_COL = 7

_WS_RE = re.compile(r"\s+")


class TransactionParseError(ValueError):
    """A row of the transaction export could not be parsed."""

    def __init__(self, line_no: int, message: str) -> None:
        super().__init__(f"line {line_no}: {message}")
        self.line_no = line_no


def _clean_description(value: str) -> str:
    return _WS_RE.sub(" ", value.strip())


def _parse_cents(value: str, *, line_no: int) -> int:
    s = value.strip()
    try:
        return int(s, 10)
    except ValueError:
        raise TransactionParseError(line_no, f"amountCents is not an integer: {s!r}") from None


def to_transactions(rows: Iterable[list[str]]) -> Iterator[TransactionRecord]:
    """Map raw TSV rows to :class:`TransactionRecord` objects.

    Blank lines (empty rows) are skipped; every other row must have exactly
    ``len(COLUMNS)`` fields.
    """

    for line_no, row in enumerate(rows, start=1):
        if not row:
            continue
        if len(row) != len(COLUMNS):
            raise TransactionParseError(
                line_no, f"expected {len(COLUMNS)} tab-separated columns, got {len(row)}"
            )
        yield TransactionRecord(
            id=row[_ID_COL].strip(),
            description=_clean_description(row[_DESCRIPTION_COL]),
            amount_cents=_parse_cents(row[_AMOUNT_COL], line_no=line_no),
            memo=row[_MEMO_COL].strip(),
        )


def read_transactions(path: str | PathLike[str]) -> list[TransactionRecord]:
    """Read and parse the whole export at ``path``."""

    p = Path(path)
    with p.open(encoding="utf-8", newline="") as f:
        reader = csv.reader(f, delimiter="\t", quoting=csv.QUOTE_NONE)
        return list(to_transactions(reader))


__all__ = ["COLUMNS", "TransactionParseError", "read_transactions", "to_transactions"]
