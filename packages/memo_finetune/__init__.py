"""Public interface for the ``memo_finetune`` package.

Re-exports the stage functions, the building blocks they are made of and the
data models. No runtime logic lives here.
"""

from .api import (
    classify_stage,
    dedupe_stage,
    fix_emoji_stage,
    prepare_jsonl_stage,
    run_all,
)
from .classify import classify_transactions, is_eligible, needs_extra_context
from .config import Settings
from .emojis import (
    MemoFormatError,
    fix_emoji,
    has_emoji_prefix,
    normalize_memo,
    starts_with_emoji,
)
from .formatting import dumps_jsonl, to_training_example
from .ingest import TransactionParseError, read_transactions
from .models import (
    ClassifiedRecord,
    ClassifyStats,
    TrainingExample,
    TransactionRecord,
    Verdict,
)
from .sampling import group_by_memo, sample_per_memo
from .store import ClassificationCache, JsonRecordStore

__all__ = [
    # Stages
    "classify_stage",
    "fix_emoji_stage",
    "dedupe_stage",
    "prepare_jsonl_stage",
    "run_all",
    # Building blocks
    "read_transactions",
    "classify_transactions",
    "is_eligible",
    "needs_extra_context",
    "starts_with_emoji",
    "has_emoji_prefix",
    "normalize_memo",
    "fix_emoji",
    "group_by_memo",
    "sample_per_memo",
    "to_training_example",
    "dumps_jsonl",
    "ClassificationCache",
    "JsonRecordStore",
    "Settings",
    # Models / errors
    "TransactionRecord",
    "ClassifiedRecord",
    "ClassifyStats",
    "TrainingExample",
    "Verdict",
    "TransactionParseError",
    "MemoFormatError",
]
