from __future__ import annotations

"""
Fair round-robin distribution of capped hits.

Hits are bucketed per location key into fixed lists and drawn through a
cursor per bucket.  Each placement scans the still-active buckets starting
at a rotating index, so consecutive placements start from different
locations and no bucket can monopolise the tail of the grid.

Placement rules, first-fit and one step ahead only (earlier placements are
never revisited):

1. never repeat the location of the previous item while any other
   location still has hits;
2. prefer not to repeat the previous item's style: if the chosen bucket's
   next hit shares it, take the first other bucket (same scan order) whose
   next hit neither repeats the location nor the style; otherwise keep the
   original choice.
"""

from typing import Dict, List, Optional, Sequence

from loguru import logger

from .grouping import style_conflict
from .pipeline_types import GroupedHit


def _pick_bucket(
    order: Sequence[str],
    buckets: Dict[str, List[GroupedHit]],
    cursors: Dict[str, int],
    last: Optional[GroupedHit],
) -> str:
    if last is None:
        return order[0]

    primary = next((k for k in order if k != last.location_key), order[0])
    if not style_conflict(last.style_key, buckets[primary][cursors[primary]].style_key):
        return primary

    for key in order:
        if key == primary or key == last.location_key:
            continue
        if not style_conflict(last.style_key, buckets[key][cursors[key]].style_key):
            return key
    return primary


def distribute(
    hits: Sequence[GroupedHit],
    target_count: int,
    previous: Optional[GroupedHit] = None,
) -> List[GroupedHit]:
    """
    Interleave ``hits`` by location key into at most ``target_count`` items.

    ``previous`` is the item already shown just before this batch (if any);
    it only feeds the adjacency checks of the first placement.
    """
    if target_count <= 0 or not hits:
        return []

    buckets: Dict[str, List[GroupedHit]] = {}
    for gh in hits:
        buckets.setdefault(gh.location_key, []).append(gh)

    cursors = {key: 0 for key in buckets}
    active = list(buckets)
    start = 0
    last = previous
    placed: List[GroupedHit] = []
    forced = 0

    # every pass places exactly one hit, so this ends after len(hits) passes at most
    while len(placed) < target_count and active:
        order = [active[(start + i) % len(active)] for i in range(len(active))]
        key = _pick_bucket(order, buckets, cursors, last)
        gh = buckets[key][cursors[key]]
        if last is not None and gh.location_key == last.location_key:
            forced += 1

        placed.append(gh)
        cursors[key] += 1
        last = gh

        start += 1
        if cursors[key] >= len(buckets[key]):
            pos = active.index(key)
            active.pop(pos)
            if pos < start:
                start -= 1
        start = start % len(active) if active else 0

    if forced:
        logger.debug("Distributor placed {} forced location repeats", forced)
    return placed
