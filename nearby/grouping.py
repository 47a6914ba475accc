from __future__ import annotations

"""
Grouping keys for the engine.

Every hit gets exactly one location key ("same physical place") and at
most one style key.  Which details count as a place is decided by the
``LocationPolicy`` of the run, never per hit:

* coordinates: rounded lat/lng -> place id -> formatted address
  -> location photo -> the hit itself
* photo: location photo -> the hit itself

Malformed details (one coordinate missing, NaN, blank strings) simply fall
through to the next tier.
"""

import math
from typing import List, Optional, Sequence, Tuple

from .config import (
    COORDINATE_DECIMALS,
    DedupeOptions,
    Hit,
    LocationDetails,
    LocationPolicy,
)
from .constants import LOCATION_KEY_PREFIXES
from .normalize import hit_base_identity
from .pipeline_types import GroupedHit


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def _coordinate_key(details: LocationDetails) -> Optional[str]:
    lat, lng = details.latitude, details.longitude
    if lat is None or lng is None:
        return None
    if not (math.isfinite(lat) and math.isfinite(lng)):
        return None
    # + 0.0 folds -0.0 into 0.0
    lat = round(lat, COORDINATE_DECIMALS) + 0.0
    lng = round(lng, COORDINATE_DECIMALS) + 0.0
    return f"{lat:.{COORDINATE_DECIMALS}f},{lng:.{COORDINATE_DECIMALS}f}"


def _place_keys(details: LocationDetails, policy: LocationPolicy) -> List[Tuple[str, Optional[str]]]:
    if policy == LocationPolicy.PHOTO:
        return [("photo", _clean(details.location_photo))]
    address = _clean(details.formatted_address)
    return [
        ("coordinates", _coordinate_key(details)),
        ("place", _clean(details.google_place_id)),
        ("address", address.lower() if address else None),
        ("photo", _clean(details.location_photo)),
    ]


def location_key(hit: Hit, policy: LocationPolicy, fallback: str) -> Tuple[str, bool]:
    """
    Return ``(key, grouped)`` for a hit.

    ``fallback`` must be unique per hit within a run; it becomes the key of
    a singleton group when no place detail is usable, and ``grouped`` is
    then False.
    """
    details = hit.location_details
    if details is not None:
        for tier, value in _place_keys(details, policy):
            if value:
                return LOCATION_KEY_PREFIXES[tier] + value, True
    return LOCATION_KEY_PREFIXES["single"] + fallback, False


def style_key(hit: Hit) -> Optional[str]:
    details = hit.location_details
    if details is None:
        return None
    return _clean(details.style_name)


def style_conflict(a: Optional[str], b: Optional[str]) -> bool:
    """Two style-less hits never conflict."""
    return a is not None and b is not None and a == b


def annotate(hits: Sequence[Hit], options: DedupeOptions) -> List[GroupedHit]:
    out: List[GroupedHit] = []
    for pos, hit in enumerate(hits):
        base = hit_base_identity(hit)
        key, grouped = location_key(hit, options.location_policy, f"{pos}:{hit.object_id or hit.handle}")
        out.append(
            GroupedHit(
                hit=hit,
                position=pos,
                base_identity=base,
                location_key=key,
                style_key=style_key(hit),
                grouped=grouped,
            )
        )
    return out
