from __future__ import annotations

import random
from collections import Counter

import pytest

from memo_finetune.models import ClassifiedRecord
from memo_finetune.sampling import group_by_memo, sample_per_memo


def _records(spec: list[tuple[str, int]]) -> list[ClassifiedRecord]:
    out: list[ClassifiedRecord] = []
    for memo, n in spec:
        out.extend(
            ClassifiedRecord(description=f"{memo} #{i}", memo=memo, amount_dollars=-float(i + 1))
            for i in range(n)
        )
    return out


def test_group_by_memo_first_appearance_order():
    a1 = ClassifiedRecord(description="1", memo="🅰 a", amount_dollars=-1.0)
    b1 = ClassifiedRecord(description="2", memo="🅱 b", amount_dollars=-1.0)
    a2 = ClassifiedRecord(description="3", memo="🅰 a", amount_dollars=-1.0)

    groups = group_by_memo([a1, b1, a2])

    assert list(groups) == ["🅰 a", "🅱 b"]
    assert groups["🅰 a"] == [a1, a2]


def test_sample_caps_each_memo_and_total():
    records = _records([("☕ Coffee", 25), ("🛒 Groceries", 3), ("🍕 Pizza", 10), ("⛽ Gas", 11)])

    out = sample_per_memo(records, cap=10, rng=random.Random(7))

    counts = Counter(r.memo for r in out)
    assert counts == {"☕ Coffee": 10, "🛒 Groceries": 3, "🍕 Pizza": 10, "⛽ Gas": 10}
    assert len(out) == sum(min(n, 10) for n in (25, 3, 10, 11))
    # Every kept record comes from the input, with no duplicates
    assert len(set(out)) == len(out)
    assert set(out) <= set(records)


def test_sample_groups_follow_first_appearance():
    records = _records([("🍕 Pizza", 4), ("☕ Coffee", 30)])
    records.append(ClassifiedRecord(description="late", memo="🍕 Pizza", amount_dollars=-9.0))

    out = sample_per_memo(records, cap=10, rng=random.Random(1))

    memos = [r.memo for r in out]
    assert memos == ["🍕 Pizza"] * 5 + ["☕ Coffee"] * 10


def test_sample_selection_is_not_front_biased():
    records = _records([("☕ Coffee", 40)])
    tail = set(records[10:])

    picked_from_tail = any(
        set(sample_per_memo(records, cap=10, rng=random.Random(seed))) & tail for seed in range(20)
    )
    assert picked_from_tail


def test_sample_is_reproducible_with_seeded_rng():
    records = _records([("☕ Coffee", 40), ("🛒 Groceries", 12)])

    a = sample_per_memo(records, cap=10, rng=random.Random(42))
    b = sample_per_memo(records, cap=10, rng=random.Random(42))

    assert a == b


@pytest.mark.parametrize("cap", [0, -1])
def test_sample_rejects_non_positive_cap(cap: int):
    with pytest.raises(ValueError, match="cap"):
        sample_per_memo([], cap=cap)
