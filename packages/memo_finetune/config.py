"""Run settings resolved from the process environment.

The CLI loads a local ``.env`` (``python-dotenv``) before calling
:meth:`Settings.from_env`, so values may come from either place. Library code
never reads the environment directly; it receives a :class:`Settings`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path

DEFAULT_MODEL: str = "gpt-3.5-turbo-instruct"
DEFAULT_CONCURRENCY: int = 30
DEFAULT_SAMPLE_CAP: int = 10

# File names inside the data directory, one per stage output.
TXS_FILE = "txs.tsv"
SAFE_FILE = "safe.json"
UNSAFE_FILE = "unsafe.json"
EMOJIFIX_FILE = "safe-emojifix.json"
DEDUPED_FILE = "safe-deduped.json"
JSONL_FILE = "finetuning.jsonl"


def _env_positive_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    try:
        value = int(raw) if raw else default
    except ValueError:
        return default
    return value if value > 0 else default


def _env_float(name: str) -> float | None:
    raw = os.getenv(name)
    if not raw or not raw.strip():
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    return value if value > 0 else None


@dataclass(frozen=True, slots=True)
class Settings:
    """Everything a pipeline run needs to know about its environment."""

    data_dir: Path = Path("data")
    model: str = DEFAULT_MODEL
    concurrency: int = DEFAULT_CONCURRENCY
    sample_cap: int = DEFAULT_SAMPLE_CAP
    openai_timeout: float | None = None

    @classmethod
    def from_env(cls) -> Settings:
        """Build settings from ``MF_*`` environment variables.

        Unset, non-numeric or non-positive integer values fall back to the
        defaults rather than failing the run.
        """

        data_dir = os.getenv("MF_DATA_DIR")
        model = os.getenv("MF_MODEL")
        return cls(
            data_dir=Path(data_dir).expanduser() if data_dir and data_dir.strip() else Path("data"),
            model=model.strip() if model and model.strip() else DEFAULT_MODEL,
            concurrency=_env_positive_int("MF_CONCURRENCY", DEFAULT_CONCURRENCY),
            sample_cap=_env_positive_int("MF_SAMPLE_CAP", DEFAULT_SAMPLE_CAP),
            openai_timeout=_env_float("MF_OPENAI_TIMEOUT"),
        )

    def with_overrides(self, **changes: object) -> Settings:
        """Return a copy with every non-``None`` value in ``changes`` applied."""

        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    # ---- Stage file locations ------------------------------------------------

    @property
    def txs_path(self) -> Path:
        return self.data_dir / TXS_FILE

    @property
    def safe_path(self) -> Path:
        return self.data_dir / SAFE_FILE

    @property
    def unsafe_path(self) -> Path:
        return self.data_dir / UNSAFE_FILE

    @property
    def emojifix_path(self) -> Path:
        return self.data_dir / EMOJIFIX_FILE

    @property
    def deduped_path(self) -> Path:
        return self.data_dir / DEDUPED_FILE

    @property
    def jsonl_path(self) -> Path:
        return self.data_dir / JSONL_FILE


__all__ = ["DEFAULT_CONCURRENCY", "DEFAULT_MODEL", "DEFAULT_SAMPLE_CAP", "Settings"]
