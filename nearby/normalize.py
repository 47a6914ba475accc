from __future__ import annotations

"""
Handle and title normalisation shared by the collapser and the report.

Public helpers:

* base_identity(handle) -> str
    Canonical product key with size / medium / variant suffixes removed,
    so "art-x-40x60" and "art-x-variant-2" both become "art-x".

* title_similarity(a, b) -> float
    Dice-style token overlap between two titles.

* titles_similar(a, b) -> bool
    Threshold test used by the collapser; exact matches after
    normalisation always count as similar.
"""

import re
from collections import Counter
from typing import List, Optional

from .config import Hit, SIMILARITY_THRESHOLD, TITLE_TOKEN_MIN_CHARS
from .constants import MEDIUM_SUFFIXES, VARIANT_SEPARATORS

_SIZE_SUFFIX_RE = re.compile(r"-\d+x\d+$")
_MEDIUM_SUFFIX_RE = re.compile(
    r"-(?:" + "|".join(re.escape(s) for s in MEDIUM_SUFFIXES) + r")$"
)


# ---------------------------------------------------------------------------
# Product identity
# ---------------------------------------------------------------------------


def base_identity(handle: Optional[str]) -> str:
    """
    Strip variant descriptors from a product handle.

    Applied in order: cut at ``-variant-`` / ``-v-``, drop a trailing
    ``-<W>x<H>`` size token, then drop a trailing medium marker, repeating
    the last two until nothing changes.  Anything unrecognised stays as is.
    """
    base = handle or ""
    for sep in VARIANT_SEPARATORS:
        base = base.split(sep, 1)[0]
    # "-40x60-print" and "-print-canvas" stacks; the fixed point keeps this idempotent
    while True:
        stripped = _MEDIUM_SUFFIX_RE.sub("", _SIZE_SUFFIX_RE.sub("", base))
        if stripped == base:
            break
        base = stripped
    return base


def hit_base_identity(hit: Hit) -> str:
    return base_identity(hit.handle)


# ---------------------------------------------------------------------------
# Titles
# ---------------------------------------------------------------------------


def normalize_title(title: Optional[str]) -> str:
    return (title or "").strip().lower()


def title_tokens(title: Optional[str], min_chars: int = TITLE_TOKEN_MIN_CHARS) -> List[str]:
    """Whitespace tokens of the lowercased title, short tokens dropped."""
    return [t for t in normalize_title(title).split() if len(t) >= min_chars]


def title_similarity(a: Optional[str], b: Optional[str], min_chars: int = TITLE_TOKEN_MIN_CHARS) -> float:
    tokens_a = title_tokens(a, min_chars)
    tokens_b = title_tokens(b, min_chars)
    total = len(tokens_a) + len(tokens_b)
    if total == 0:
        return 0.0
    # shared tokens counted as a multiset
    common = sum((Counter(tokens_a) & Counter(tokens_b)).values())
    return 2.0 * common / total


def titles_similar(
    a: Optional[str],
    b: Optional[str],
    threshold: float = SIMILARITY_THRESHOLD,
    min_chars: int = TITLE_TOKEN_MIN_CHARS,
) -> bool:
    na, nb = normalize_title(a), normalize_title(b)
    if not na or not nb:
        return False
    if na == nb:
        return True
    return title_similarity(na, nb, min_chars) >= threshold
