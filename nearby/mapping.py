from __future__ import annotations
"""
Mapping utilities between raw search-index records and the engine/API models.

Raw hits come straight from the index JSON and are loosely typed (prices as
strings, coordinates under different names, details nested under
``meta.location.details``).  Everything here is best-effort and never
raises: unusable values become ``None`` so the engine can fall back.
"""

import math
from typing import Any, Dict, Iterable, List, Optional, Sequence

from loguru import logger

from .config import Hit, LocationDetails, NearbyProduct, NearbySearchResponse


def _coerce_float(val: Any) -> Optional[float]:
    try:
        if val is None or isinstance(val, bool):
            return None
        f = float(str(val).strip()) if isinstance(val, str) else float(val)
    except (TypeError, ValueError, OverflowError):
        return None
    return f if math.isfinite(f) else None


def _coerce_str(val: Any) -> Optional[str]:
    if val is None or isinstance(val, (dict, list)):
        return None
    s = str(val).strip()
    return s or None


def _coerce_bool(val: Any) -> bool:
    if isinstance(val, str):
        return val.strip().lower() in {"1", "true", "yes", "y"}
    return bool(val)


def _dig(record: Dict[str, Any], *path: str) -> Any:
    cur: Any = record
    for part in path:
        if not isinstance(cur, dict):
            return None
        cur = cur.get(part)
    return cur


def _details_from_record(record: Dict[str, Any]) -> Optional[LocationDetails]:
    raw = _dig(record, "meta", "location", "details")
    if not isinstance(raw, dict):
        # some exports flatten the dotted attribute name
        raw = record.get("meta.location.details")
    if not isinstance(raw, dict):
        return None

    lat = raw.get("latitude", raw.get("lat"))
    lng = raw.get("longitude", raw.get("lng"))
    return LocationDetails(
        latitude=_coerce_float(lat),
        longitude=_coerce_float(lng),
        google_place_id=_coerce_str(raw.get("google_place_id")),
        formatted_address=_coerce_str(raw.get("formatted_address")),
        location_photo=_coerce_str(raw.get("location_photo")),
        style_name=_coerce_str(raw.get("style_name")),
    )


def hit_from_record(record: Dict[str, Any]) -> Hit:
    """Build a :class:`Hit` from one raw index record."""
    if not isinstance(record, dict):
        logger.warning("Skipping malformed hit of type {}", type(record).__name__)
        return Hit()

    featured = record.get("featured")
    if featured is None:
        featured = _dig(record, "meta", "featured")

    return Hit(
        object_id=_coerce_str(record.get("objectID")) or "",
        handle=_coerce_str(record.get("handle")) or "",
        title=_coerce_str(record.get("title")) or "",
        image_url=_coerce_str(record.get("product_image")) or _coerce_str(record.get("image")),
        price=_coerce_float(record.get("price")),
        vendor=_coerce_str(record.get("vendor")),
        location_details=_details_from_record(record),
        featured=_coerce_bool(featured),
    )


def hits_from_records(records: Iterable[Dict[str, Any]]) -> List[Hit]:
    return [hit_from_record(r) for r in records or []]


def to_api_product(hit: Hit) -> NearbyProduct:
    meta = None
    if hit.location_details is not None:
        meta = {"location": {"details": hit.location_details.model_dump(exclude_none=True)}}
    return NearbyProduct(
        object_id=hit.object_id,
        handle=hit.handle,
        title=hit.title,
        image_url=hit.image_url,
        price=hit.price,
        vendor=hit.vendor,
        meta=meta,
    )


def map_hits_to_response(
    hits: Sequence[Hit],
    total_hits: int,
    search_time: Optional[int] = None,
) -> NearbySearchResponse:
    return NearbySearchResponse(
        hits=[to_api_product(h) for h in hits],
        total_hits=total_hits,
        cached=False,
        search_time=search_time,
    )
