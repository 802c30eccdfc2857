"""Safe/unsafe classification of transaction memos.

Public API:
    - :func:`is_eligible`
    - :func:`needs_extra_context`
    - :func:`classify_transactions`

For every transaction the classifier runs, in order:

1. eligibility: the memo is an emoji followed by text and the amount is a debit;
2. cache check: records already in the safe or unsafe store are skipped;
3. override: memos mentioning ``"New user card fee"`` are safe without asking;
4. one completion request (``max_tokens=1``, ``temperature=0``); an answer of
   exactly ``"Yes"`` means the memo needs extra context and is unsafe;
5. persistence: the record is stored and both cache files are rewritten.

At most ``concurrency`` transactions are processed at once. There are no
retries: the OpenAI client is created with ``max_retries=0`` and the first
error stops the run after in-flight work drains. Everything stored before the
error stays on disk.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Iterable
from typing import Any

from openai import OpenAI

from . import prompting
from .config import DEFAULT_CONCURRENCY, DEFAULT_MODEL
from .emojis import has_emoji_prefix
from .logging_setup import get_logger
from .models import ClassifyStats, TransactionRecord, Verdict
from .pool import bounded_map
from .store import ClassificationCache

# Memos that are always safe to train on, whatever the model says.
SAFE_MEMO_MARKERS: tuple[str, ...] = ("New user card fee",)

_logger = get_logger("memo_finetune.classify")


def _create_client(*, timeout: float | None = None) -> OpenAI:
    kwargs: dict[str, Any] = {"max_retries": 0}
    if timeout is not None:
        kwargs["timeout"] = timeout
    return OpenAI(**kwargs)


def is_eligible(tx: TransactionRecord) -> bool:
    """True for debits (negative amounts) whose memo is an emoji followed by text."""

    return tx.amount_cents < 0 and has_emoji_prefix(tx.memo)


def is_override_safe(memo: str) -> bool:
    return any(marker in memo for marker in SAFE_MEMO_MARKERS)


def _completion_text(resp: Any) -> str:
    choices = getattr(resp, "choices", None) or []
    if not choices:
        return ""
    return getattr(choices[0], "text", None) or ""


def needs_extra_context(client: OpenAI, description: str, memo: str, *, model: str) -> bool:
    """Ask the completion model whether ``memo`` needs context beyond ``description``."""

    t0 = time.perf_counter()
    resp = client.completions.create(
        model=model,
        prompt=prompting.build_classification_prompt(description, memo),
        max_tokens=1,
        echo=False,
        temperature=0,
        top_p=1,
    )
    answer = _completion_text(resp).strip()
    _logger.debug(
        "classify:completion answer=%r latency_ms=%.2f",
        answer,
        (time.perf_counter() - t0) * 1000.0,
    )
    return answer == prompting.NEEDS_CONTEXT_ANSWER


class _ClassifyRun:
    """State for one :func:`classify_transactions` call.

    Owns the admission counter, the stats and the lazily created client so no
    module-level state is shared between runs.
    """

    def __init__(
        self,
        cache: ClassificationCache,
        *,
        total: int,
        model: str,
        client: OpenAI | None,
        timeout: float | None,
    ) -> None:
        self.cache = cache
        self.model = model
        self.stats = ClassifyStats(total=total)
        self._client = client
        self._timeout = timeout
        self._admitted = 0
        self._lock = threading.Lock()

    def client(self) -> OpenAI:
        # Created on first use so fully cached runs need no API key.
        with self._lock:
            if self._client is None:
                self._client = _create_client(timeout=self._timeout)
            return self._client

    def _bump(self, field: str) -> None:
        with self._lock:
            setattr(self.stats, field, getattr(self.stats, field) + 1)

    def process(self, tx: TransactionRecord) -> Verdict | None:
        with self._lock:
            self._admitted += 1
            position = self._admitted

        if not is_eligible(tx):
            self._bump("ineligible")
            return None

        record = tx.to_classified()
        if self.cache.verdict_of(record) is not None:
            _logger.debug("classify:cache_hit id=%s memo=%s", tx.id, record.memo)
            self._bump("cached")
            return None

        verdict: Verdict
        if is_override_safe(record.memo):
            verdict = "safe"
            self._bump("overridden")
        else:
            try:
                unsafe = needs_extra_context(
                    self.client(), record.description, record.memo, model=self.model
                )
            except Exception as e:
                _logger.error(
                    "classify:failed id=%s position=%d error=%s",
                    tx.id,
                    position,
                    e.__class__.__name__,
                )
                raise
            verdict = "unsafe" if unsafe else "safe"

        if not self.cache.record(record, verdict):
            # An identical row finished first within this run.
            self._bump("cached")
            return None

        self._bump(verdict)
        label = "  Safe" if verdict == "safe" else "Unsafe"
        _logger.info("(%d/%d) %s: %s", position, self.stats.total, label, record.memo)
        return verdict


def classify_transactions(
    transactions: Iterable[TransactionRecord],
    cache: ClassificationCache,
    *,
    model: str = DEFAULT_MODEL,
    concurrency: int = DEFAULT_CONCURRENCY,
    client: OpenAI | None = None,
    timeout: float | None = None,
) -> ClassifyStats:
    """Classify every eligible, uncached transaction into ``cache``.

    Parameters
    ----------
    transactions:
        Parsed export rows, processed in order of admission.
    cache:
        Safe/unsafe store pair; updated and flushed after each classification.
    model:
        Completion model name.
    concurrency:
        Maximum number of transactions processed at once.
    client:
        Optional preconfigured OpenAI client. When omitted, one is created on
        the first service call.
    timeout:
        Optional per-request timeout (seconds) for a client created here.
    """

    items = list(transactions)
    run = _ClassifyRun(cache, total=len(items), model=model, client=client, timeout=timeout)
    bounded_map(items, run.process, concurrency=concurrency, thread_name_prefix="mf-classify")

    s = run.stats
    _logger.info(
        "classify:done total=%d ineligible=%d cached=%d overridden=%d safe=%d unsafe=%d",
        s.total,
        s.ineligible,
        s.cached,
        s.overridden,
        s.safe,
        s.unsafe,
    )
    return s


__all__ = ["classify_transactions", "is_eligible", "is_override_safe", "needs_extra_context"]
