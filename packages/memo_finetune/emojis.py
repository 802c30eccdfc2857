"""Emoji detection and memo spacing normalization.

Uses the third-party ``regex`` module for Unicode property classes
(``\\p{Emoji}``) and extended grapheme clusters (``\\X``), neither of which the
stdlib ``re`` supports.

A memo "starts with an emoji" when its first code point has the Unicode
``Emoji`` property. ASCII digits, ``#`` and ``*`` also carry that property;
they only count when they begin a keycap sequence (``1️⃣``), so memos such as
``"2 coffees"`` are not treated as emoji memos. This is deliberately narrower
than a bare ``\\p{Emoji}`` test, which accepts any leading digit.

An "emoji memo" is an emoji followed by some text. :func:`has_emoji_prefix`
accepts exactly the memos :func:`normalize_memo` can rewrite, so anything the
classifier admits also survives the fix-emoji pass. An emoji-only memo such as
``"🍕"`` starts with an emoji but is not an emoji memo.
"""

from __future__ import annotations

from collections.abc import Iterable

import regex

from .models import ClassifiedRecord

EMOJI_START = r"(?![#*0-9](?!\uFE0F?\u20E3))\p{Emoji}"

_EMOJI_START_RE = regex.compile(EMOJI_START)

# Leading emoji is a whole grapheme cluster: variation selectors, skin tones,
# ZWJ sequences, keycaps and flag pairs stay attached to it.
_MEMO_RE = regex.compile(rf"(?={EMOJI_START})(\X)\s*(\S.*)", regex.DOTALL)


class MemoFormatError(ValueError):
    """A memo does not have the ``<emoji><whitespace?><text>`` shape."""


def starts_with_emoji(text: str) -> bool:
    return _EMOJI_START_RE.match(text) is not None


def has_emoji_prefix(memo: str) -> bool:
    """True when ``memo`` is an emoji followed by non-empty text."""

    return _MEMO_RE.fullmatch(memo) is not None


def split_memo(memo: str) -> tuple[str, str]:
    """Return ``(emoji, text)`` for a memo, raising :class:`MemoFormatError`."""

    m = _MEMO_RE.fullmatch(memo)
    if m is None:
        raise MemoFormatError(f"memo does not start with an emoji followed by text: {memo!r}")
    return m.group(1), m.group(2)


def normalize_memo(memo: str) -> str:
    """Rewrite ``memo`` as ``emoji + " " + text``.

    Any whitespace between the emoji and the text (including none) collapses
    to exactly one space. Normalizing an already-normalized memo is a no-op.
    """

    emoji, text = split_memo(memo)
    return f"{emoji} {text}"


def fix_emoji(records: Iterable[ClassifiedRecord]) -> list[ClassifiedRecord]:
    """Return copies of ``records`` with normalized memos.

    The first malformed memo aborts the whole pass; it is a data-quality
    problem to fix upstream, not a record to drop.
    """

    return [r.with_memo(normalize_memo(r.memo)) for r in records]


__all__ = [
    "MemoFormatError",
    "fix_emoji",
    "has_emoji_prefix",
    "normalize_memo",
    "split_memo",
    "starts_with_emoji",
]
