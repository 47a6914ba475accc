from __future__ import annotations

"""
Entry point of the deduplication engine.

    raw hits -> annotate -> collapse -> [split tiers] -> cap -> distribute

The engine is a pure, synchronous function of ``(hits, options)``: no I/O,
no module state, one set of working structures per call.  It never raises
on a well-typed input; empty input or a non-positive target yields [].
"""

from typing import Iterable, List, Optional, Sequence

from loguru import logger

from .balance import cap_groups, split_tiers
from .config import DedupeOptions, Hit
from .dedupe import collapse
from .distribute import distribute
from .grouping import annotate
from .pipeline_types import GroupedHit


def _featured_first(unique: Sequence[GroupedHit], options: DedupeOptions) -> List[GroupedHit]:
    featured, regular = split_tiers(unique)
    budget = options.target_count

    out: List[GroupedHit] = []
    for tier in (featured, regular):
        if budget <= 0:
            break
        grouped = [gh for gh in tier if gh.grouped]
        placed = distribute(
            cap_groups(grouped, options.max_per_group),
            budget,
            previous=out[-1] if out else None,
        )
        out += placed
        budget -= len(placed)

    # hits without any place detail go last, featured ones first
    if budget > 0:
        leftovers = [gh for gh in featured if not gh.grouped] + [gh for gh in regular if not gh.grouped]
        out += leftovers[:budget]
    return out


def run_engine(hits: Iterable[Hit], options: Optional[DedupeOptions] = None) -> List[GroupedHit]:
    """Same as :func:`deduplicate_for_collection` but keeps the annotations."""
    options = options or DedupeOptions()
    hits = list(hits or [])
    if not hits or options.target_count <= 0:
        return []

    annotated = annotate(hits, options)
    unique = collapse(annotated, options)

    if options.featured_first:
        result = _featured_first(unique, options)
    else:
        capped = cap_groups(unique, options.max_per_group)
        result = distribute(capped, options.target_count)

    logger.debug(
        "Engine: {} hits -> {} unique -> {} shown (policy={}, featured_first={})",
        len(hits), len(unique), len(result),
        options.location_policy.value, options.featured_first,
    )
    return result


def deduplicate_for_collection(hits: Iterable[Hit], options: Optional[DedupeOptions] = None) -> List[Hit]:
    """
    Pick a bounded, visually diverse ordered subset of search hits.

    The output never holds more than ``options.target_count`` hits, never
    two hits with the same base identity, and avoids putting two hits from
    the same place (or, softly, the same style) next to each other.
    """
    return [gh.hit for gh in run_engine(hits, options)]
