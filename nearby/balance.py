from __future__ import annotations

"""
Group capping and tier splitting.

Neither step reorders hits within a group; capping only decides how many
hits per location survive, the distributor decides where they go.
"""

from typing import Dict, List, Sequence, Tuple

from .pipeline_types import GroupedHit


def cap_groups(hits: Sequence[GroupedHit], max_per_group: int) -> List[GroupedHit]:
    """
    Keep at most ``max_per_group`` hits per real location group.

    Groups are emitted in first-seen order, each in input order, followed by
    all ungrouped hits (those keyed by the per-hit fallback), which are never
    capped against each other.  A negative cap behaves like 0.
    """
    limit = max(0, max_per_group)
    groups: Dict[str, List[GroupedHit]] = {}
    ungrouped: List[GroupedHit] = []

    for gh in hits:
        if not gh.grouped:
            ungrouped.append(gh)
            continue
        bucket = groups.setdefault(gh.location_key, [])
        if len(bucket) < limit:
            bucket.append(gh)

    capped: List[GroupedHit] = []
    for bucket in groups.values():
        capped += bucket
    capped += ungrouped
    return capped


def split_tiers(hits: Sequence[GroupedHit]) -> Tuple[List[GroupedHit], List[GroupedHit]]:
    """Partition into (featured, regular), order preserved in both."""
    featured: List[GroupedHit] = []
    regular: List[GroupedHit] = []
    for gh in hits:
        (featured if gh.featured else regular).append(gh)
    return featured, regular
