from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

import httpx
from loguru import logger

from .config import (
    ALGOLIA_APP_ID,
    ALGOLIA_INDEX_NAME,
    ALGOLIA_SEARCH_API_KEY,
    ATTRIBUTES_TO_RETRIEVE,
    HTTP_CONNECT_TIMEOUT,
    HTTP_READ_TIMEOUT,
    HTTP_USER_AGENT,
)


class SearchError(RuntimeError):
    """The search index could not be queried."""


@dataclass
class SearchResult:
    hits: List[Dict[str, Any]] = field(default_factory=list)
    nb_hits: int = 0
    processing_time_ms: Optional[int] = None


def build_nearby_params(
    lat: Optional[float],
    lng: Optional[float],
    radius_km: float,
    hits_per_page: int,
    exclude_handle: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Query parameters for a geo search with an empty query text.

    Without coordinates the index is queried unfiltered (fallback mode).
    """
    params: Dict[str, Any] = {
        "query": "",
        "hitsPerPage": int(hits_per_page),
        "attributesToRetrieve": list(ATTRIBUTES_TO_RETRIEVE),
        "getRankingInfo": True,
    }
    if exclude_handle:
        params["filters"] = f"NOT handle:{exclude_handle}"
    if lat is not None and lng is not None:
        params["aroundLatLng"] = f"{lat},{lng}"
        params["aroundRadius"] = int(round(radius_km * 1000))
    return params


def _as_int(val: Any) -> Optional[int]:
    if val is None or isinstance(val, bool):
        return None
    try:
        return int(val)
    except (TypeError, ValueError, OverflowError):
        return None


def _encode_params(params: Dict[str, Any]) -> str:
    flat: Dict[str, str] = {}
    for k, v in params.items():
        if isinstance(v, (list, dict, bool)):
            flat[k] = json.dumps(v)
        else:
            flat[k] = str(v)
    return urlencode(flat)


class AlgoliaSearchClient:
    """
    Thin client for the index's REST query endpoint.

    Hardening:
      - httpx with connect/read timeouts
      - every failure surfaces as SearchError (logged once here)
    """

    def __init__(
        self,
        app_id: str = ALGOLIA_APP_ID,
        api_key: str = ALGOLIA_SEARCH_API_KEY,
        index_name: str = ALGOLIA_INDEX_NAME,
        timeout: Optional[httpx.Timeout] = None,
    ) -> None:
        self.app_id = app_id
        self.api_key = api_key
        self.index_name = index_name
        self.timeout = timeout or httpx.Timeout(HTTP_READ_TIMEOUT, connect=HTTP_CONNECT_TIMEOUT)

    @property
    def url(self) -> str:
        return f"https://{self.app_id}-dsn.algolia.net/1/indexes/{self.index_name}/query"

    def search(self, params: Dict[str, Any]) -> SearchResult:
        if not self.app_id or not self.api_key:
            raise SearchError("Search credentials are not configured (ALGOLIA_APP_ID / ALGOLIA_SEARCH_API_KEY)")

        headers = {
            "X-Algolia-Application-Id": self.app_id,
            "X-Algolia-API-Key": self.api_key,
            "User-Agent": HTTP_USER_AGENT,
        }
        body = {"params": _encode_params(params)}
        try:
            with httpx.Client(timeout=self.timeout) as client:
                r = client.post(self.url, headers=headers, json=body)
        except httpx.TimeoutException as e:
            logger.warning("Search timeout on index {}: {}", self.index_name, e)
            raise SearchError(f"Search timed out: {e}") from e
        except httpx.HTTPError as e:
            logger.warning("Search transport error on index {}: {}", self.index_name, e)
            raise SearchError(f"Search request failed: {e}") from e

        if r.status_code >= 400:
            logger.warning("Search: HTTP {} from index {}", r.status_code, self.index_name)
            raise SearchError(f"Search index returned HTTP {r.status_code}")

        try:
            payload = r.json()
        except ValueError as e:
            logger.warning("Search: undecodable response from index {}", self.index_name)
            raise SearchError("Search index returned invalid JSON") from e

        hits = payload.get("hits") if isinstance(payload, dict) else None
        if not isinstance(hits, list):
            raise SearchError("Search response has no hits list")

        result = SearchResult(
            hits=hits,
            nb_hits=_as_int(payload.get("nbHits")) or len(hits),
            processing_time_ms=_as_int(payload.get("processingTimeMS")),
        )
        logger.info(
            "Search returned {} of {} hits in {} ms",
            len(result.hits), result.nb_hits, result.processing_time_ms,
        )
        return result
