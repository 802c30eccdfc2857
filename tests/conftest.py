"""Pytest configuration for test isolation.

Every stage reads and writes files under the data directory (``./data`` by
default, ``MF_DATA_DIR`` when set). Tests that shared it would see each
other's caches: a later classify run would hit records cached by an earlier
test and skip the stubbed OpenAI calls, breaking call-count assertions.

An autouse fixture points ``MF_DATA_DIR`` at a per-test temporary directory
and clears the other ``MF_*`` overrides so defaults apply unless a test sets
them explicitly.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

import pytest

# Make sure the workspace `packages/` dir is on sys.path so `memo_finetune` is importable,
# and the repo root so `tests.helpers` resolves.
_ROOT = Path(__file__).resolve().parents[1]
_PKG_DIR = _ROOT / "packages"
sys.path[:0] = [p for p in [str(_PKG_DIR), str(_ROOT)] if p not in sys.path]

from memo_finetune import logging_setup  # noqa: E402

_MF_ENV = ("MF_MODEL", "MF_CONCURRENCY", "MF_SAMPLE_CAP", "MF_OPENAI_TIMEOUT")


@pytest.fixture(autouse=True)
def _isolate_data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    data_dir = tmp_path / "data"
    data_dir.mkdir(parents=True, exist_ok=True)
    monkeypatch.setenv("MF_DATA_DIR", os.fspath(data_dir))
    for name in _MF_ENV:
        monkeypatch.delenv(name, raising=False)
    return data_dir


@pytest.fixture
def data_dir(_isolate_data_dir: Path) -> Path:
    return _isolate_data_dir


@pytest.fixture(autouse=True)
def _reset_package_logging():
    """Drop handlers installed by CLI tests; their streams close with the runner."""

    yield
    logger = logging.getLogger("memo_finetune")
    for h in list(logger.handlers):
        logger.removeHandler(h)
    logger.propagate = True
    logging_setup._handler = None
