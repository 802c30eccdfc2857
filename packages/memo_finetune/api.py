"""File-level pipeline stages.

Each stage reads the previous stage's file under ``Settings.data_dir`` and
writes its own:

=================  ===========================  ======================
stage              reads                        writes
=================  ===========================  ======================
classify           txs.tsv, safe/unsafe.json    safe.json, unsafe.json
fix-emoji          safe.json                    safe-emojifix.json
dedupe             safe-emojifix.json           safe-deduped.json
prepare-jsonl      safe-deduped.json            finetuning.jsonl
=================  ===========================  ======================

Stages are independent and are normally run one at a time, inspecting the
output in between. :func:`run_all` chains them.
"""

from __future__ import annotations

import os
import random

from openai import OpenAI

from .classify import classify_transactions
from .config import Settings
from .emojis import fix_emoji
from .formatting import dumps_jsonl, to_training_example
from .ingest import read_transactions
from .logging_setup import get_logger
from .models import ClassifyStats
from .sampling import sample_per_memo
from .store import ClassificationCache, read_records, write_records

_logger = get_logger("memo_finetune.api")


def _resolve(settings: Settings | None) -> Settings:
    return settings if settings is not None else Settings.from_env()


def classify_stage(settings: Settings | None = None, *, client: OpenAI | None = None) -> ClassifyStats:
    """Classify the export into ``safe.json``/``unsafe.json``."""

    s = _resolve(settings)
    transactions = read_transactions(s.txs_path)
    cache = ClassificationCache.open(s.safe_path, s.unsafe_path)
    _logger.info(
        "classify:start transactions=%d cached_safe=%d cached_unsafe=%d",
        len(transactions),
        len(cache.safe),
        len(cache.unsafe),
    )
    stats = classify_transactions(
        transactions,
        cache,
        model=s.model,
        concurrency=s.concurrency,
        client=client,
        timeout=s.openai_timeout,
    )
    _logger.info("Done!")
    return stats


def fix_emoji_stage(settings: Settings | None = None) -> int:
    """Normalize emoji spacing of safe memos into ``safe-emojifix.json``."""

    s = _resolve(settings)
    fixed = fix_emoji(read_records(s.safe_path))
    write_records(s.emojifix_path, fixed)
    _logger.info("fix_emoji:done count=%d path=%s", len(fixed), os.fspath(s.emojifix_path))
    return len(fixed)


def dedupe_stage(settings: Settings | None = None, *, rng: random.Random | None = None) -> int:
    """Cap records per memo into ``safe-deduped.json``."""

    s = _resolve(settings)
    records = read_records(s.emojifix_path)
    _logger.info("Total count: %d", len(records))
    kept = sample_per_memo(records, cap=s.sample_cap, rng=rng)
    _logger.info("New count: %d", len(kept))
    write_records(s.deduped_path, kept)
    return len(kept)


def prepare_jsonl_stage(settings: Settings | None = None) -> int:
    """Write ``finetuning.jsonl`` from the sampled records."""

    s = _resolve(settings)
    examples = [to_training_example(r) for r in read_records(s.deduped_path)]
    s.jsonl_path.parent.mkdir(parents=True, exist_ok=True)
    s.jsonl_path.write_text(dumps_jsonl(examples), encoding="utf-8")
    _logger.info("prepare_jsonl:done count=%d path=%s", len(examples), os.fspath(s.jsonl_path))
    return len(examples)


def run_all(settings: Settings | None = None, *, rng: random.Random | None = None) -> None:
    s = _resolve(settings)
    classify_stage(s)
    fix_emoji_stage(s)
    dedupe_stage(s, rng=rng)
    prepare_jsonl_stage(s)


__all__ = [
    "classify_stage",
    "dedupe_stage",
    "fix_emoji_stage",
    "prepare_jsonl_stage",
    "run_all",
]
