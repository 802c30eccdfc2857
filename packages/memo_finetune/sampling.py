"""Per-memo sampling cap for the fine-tuning set.

A handful of memos ("☕ Coffee", "🛒 Groceries") can account for a large share
of all transactions. :func:`sample_per_memo` groups records by exact memo
string, shuffles each group uniformly and keeps at most ``cap`` of them, so no
single memo dominates while the kept records are not biased toward the front
of the export.
"""

from __future__ import annotations

import random
from collections.abc import Iterable

from .models import ClassifiedRecord


def group_by_memo(records: Iterable[ClassifiedRecord]) -> dict[str, list[ClassifiedRecord]]:
    """Group records by exact memo, in first-appearance order of each memo."""

    groups: dict[str, list[ClassifiedRecord]] = {}
    for r in records:
        groups.setdefault(r.memo, []).append(r)
    return groups


def sample_per_memo(
    records: Iterable[ClassifiedRecord],
    *,
    cap: int = 10,
    rng: random.Random | None = None,
) -> list[ClassifiedRecord]:
    """Keep at most ``cap`` randomly chosen records per distinct memo.

    Output size is ``sum(min(len(group), cap))``. Groups are emitted in
    first-appearance order; order within a group is the shuffled order.
    """

    if isinstance(cap, bool) or not isinstance(cap, int) or cap < 1:
        raise ValueError("cap must be a positive integer")

    shuffle = (rng or random.Random()).shuffle
    kept: list[ClassifiedRecord] = []
    for group in group_by_memo(records).values():
        shuffle(group)
        kept.extend(group[:cap])
    return kept


__all__ = ["group_by_memo", "sample_per_memo"]
