from __future__ import annotations

"""
Near-duplicate collapsing.

Size/format variants of the same artwork share a base identity and only
the first one seen survives.  Optionally, hits whose title closely matches
the title of any hit already kept are dropped as well.

The title pass compares each candidate against the whole accumulator, so
it is O(n^2) in the number of kept hits.
"""

from typing import List, Optional, Sequence, Set

from loguru import logger

from .config import DedupeOptions
from .normalize import titles_similar
from .pipeline_types import GroupedHit


def _similar_to_kept(
    candidate: GroupedHit,
    kept: Sequence[GroupedHit],
    options: DedupeOptions,
) -> Optional[GroupedHit]:
    for other in kept:
        if titles_similar(
            candidate.hit.title,
            other.hit.title,
            threshold=options.similarity_threshold,
            min_chars=options.title_token_min_chars,
        ):
            return other
    return None


def collapse(hits: Sequence[GroupedHit], options: Optional[DedupeOptions] = None) -> List[GroupedHit]:
    """
    Drop repeated base identities (and similar titles when enabled).

    First occurrence wins and input order is preserved.
    """
    options = options or DedupeOptions()
    seen: Set[str] = set()
    kept: List[GroupedHit] = []
    dropped_variants = dropped_titles = 0

    for gh in hits:
        if gh.base_identity in seen:
            dropped_variants += 1
            continue
        if options.collapse_similar_titles:
            match = _similar_to_kept(gh, kept, options)
            if match is not None:
                logger.debug("Dropping '{}': title matches kept '{}'", gh.hit.handle, match.hit.handle)
                dropped_titles += 1
                continue
        seen.add(gh.base_identity)
        kept.append(gh)

    if dropped_variants or dropped_titles:
        logger.debug(
            "Collapsed {} hits -> {} ({} variants, {} similar titles)",
            len(hits), len(kept), dropped_variants, dropped_titles,
        )
    return kept
