"""Prompt/completion formatting and JSONL serialization."""

from __future__ import annotations

import json
from collections.abc import Iterable

from . import prompting
from .models import ClassifiedRecord, TrainingExample


def to_training_example(record: ClassifiedRecord) -> TrainingExample:
    return TrainingExample(
        prompt=prompting.build_training_prompt(record.amount_dollars, record.description),
        completion=prompting.build_completion(record.memo),
    )


def dumps_jsonl(examples: Iterable[TrainingExample]) -> str:
    """Serialize examples one compact JSON object per line.

    Lines are joined with ``"\\n"`` and there is no trailing newline. Non-ASCII
    text (emoji) is written literally.
    """

    return "\n".join(
        json.dumps(e.model_dump(mode="json"), ensure_ascii=False, separators=(",", ":"))
        for e in examples
    )


__all__ = ["dumps_jsonl", "to_training_example"]
