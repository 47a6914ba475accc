from __future__ import annotations

"""
FastAPI application for nearby products.

- /api/nearby-search: geo search -> dedup engine -> product cards (cached 24h)
- /api/pre-generate-collection: same engine rendered to static HTML per city
- the engine only runs on a cache miss; its output is what gets cached
"""

import time
from functools import lru_cache
from typing import Any, Dict

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from .cache import ResultCache, collection_cache_key, nearby_cache_key
from .config import (
    COLLECTION_FETCH_SIZE,
    NEARBY_OVERFETCH_FACTOR,
    SERVICE_NAME,
    CacheStats,
    DedupeOptions,
    HealthResponse,
    NearbySearchRequest,
    PreGenerateRequest,
    ServiceStatus,
)
from .logging_utils import configure_logging
from .mapping import hits_from_records, map_hits_to_response
from .pipeline import deduplicate_for_collection
from .render import CollectionMeta, generate_collection_html
from .search import AlgoliaSearchClient, SearchError, build_nearby_params


# -----------------------
# Process-wide state
# -----------------------

_cache = ResultCache()
_started_at = time.time()


@lru_cache(maxsize=1)
def get_search_client() -> AlgoliaSearchClient:
    return AlgoliaSearchClient()


def _uptime() -> float:
    return time.time() - _started_at


# -----------------------
# Pipeline
# -----------------------

def run_nearby_search(req: NearbySearchRequest) -> Dict[str, Any]:
    """Search, deduplicate and shape the nearby-search response (no caching)."""
    params = build_nearby_params(
        req.lat if not req.fallback else None,
        req.lng if not req.fallback else None,
        req.radius_km,
        req.hits_per_page * NEARBY_OVERFETCH_FACTOR,
        exclude_handle=req.current_handle,
    )
    result = get_search_client().search(params)

    options = DedupeOptions(
        max_per_group=req.max_per_location_photo,
        target_count=req.hits_per_page,
        location_policy=req.location_policy,
        featured_first=req.featured_first,
    )
    chosen = deduplicate_for_collection(hits_from_records(result.hits), options)
    response = map_hits_to_response(chosen, total_hits=result.nb_hits, search_time=result.processing_time_ms)
    return response.model_dump(by_alias=True, exclude_none=True)


def run_collection_build(req: PreGenerateRequest) -> Dict[str, Any]:
    params = build_nearby_params(req.lat, req.lng, req.radius_km, COLLECTION_FETCH_SIZE)
    result = get_search_client().search(params)

    options = DedupeOptions(max_per_group=2, target_count=req.hits_per_page)
    chosen = deduplicate_for_collection(hits_from_records(result.hits), options)
    meta = CollectionMeta(
        city_name=req.city_name or "",
        total_hits=result.nb_hits,
        lat=req.lat,
        lng=req.lng,
        radius_km=req.radius_km,
    )
    html = generate_collection_html(chosen, meta)
    return {
        "html": html,
        "products": len(chosen),
        "totalHits": result.nb_hits,
        "searchTime": result.processing_time_ms,
    }


# -----------------------
# FastAPI app + startup
# -----------------------

app = FastAPI()
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def startup_event() -> None:
    configure_logging()
    logger.info("Starting {} (cache ttl={}s, max entries={})", SERVICE_NAME, _cache.ttl_seconds, _cache.max_entries)


@app.get("/", response_model=ServiceStatus)
def root() -> ServiceStatus:
    return ServiceStatus(
        status="ok",
        service=SERVICE_NAME,
        cache_size=_cache.size(),
        uptime=f"{_uptime():.0f}s",
    )


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="healthy")


@app.get("/cache-stats", response_model=CacheStats)
def cache_stats() -> CacheStats:
    return CacheStats(size=_cache.size(), keys=_cache.keys(), uptime=_uptime())


@app.post("/api/nearby-search")
def nearby_search(req: NearbySearchRequest):
    if not req.fallback and (req.lat is None or req.lng is None):
        raise HTTPException(
            status_code=400,
            detail={"error": "Missing required parameters: lat, lng (or set fallback: true)"},
        )

    logger.info(
        "Nearby search: location={} radius={}km page={}",
        f"{req.lat}, {req.lng}" if not req.fallback else "fallback",
        req.radius_km,
        req.hits_per_page,
    )

    key = nearby_cache_key(
        req.lat if not req.fallback else None,
        req.lng if not req.fallback else None,
        req.radius_km,
        req.hits_per_page,
        req.max_per_location_photo,
        req.location_policy.value,
        req.featured_first,
        req.current_handle,
    )
    entry = _cache.get(key)
    if entry is not None:
        age_min = round(_cache.age_seconds(entry) / 60)
        logger.info("Cache HIT - age {} minutes", age_min)
        return {**entry.data, "cached": True, "cacheAge": f"{age_min}m"}

    logger.info("Cache MISS - querying search index")
    try:
        data = run_nearby_search(req)
    except SearchError as e:
        logger.error("Nearby search failed: {}", e)
        raise HTTPException(status_code=500, detail={"error": "Search failed", "message": str(e)})
    except Exception as e:
        logger.exception("Nearby search crashed")
        raise HTTPException(status_code=500, detail={"error": "Search failed", "message": str(e)})

    _cache.set(key, data)
    return data


@app.post("/api/pre-generate-collection")
def pre_generate_collection(req: PreGenerateRequest):
    if req.lat is None or req.lng is None or not req.city_name:
        raise HTTPException(
            status_code=400,
            detail={"error": "Missing required parameters: lat, lng, cityName"},
        )

    logger.info(
        "Pre-generating collection: city={} location={}, {} radius={}km handle={}",
        req.city_name, req.lat, req.lng, req.radius_km, req.collection_handle,
    )

    key = collection_cache_key(req.city_name, req.lat, req.lng, req.radius_km, req.hits_per_page)
    if not req.force_regenerate:
        entry = _cache.get(key)
        if entry is not None:
            age_h = round(_cache.age_seconds(entry) / 3600)
            logger.info("Returning cached static HTML - age {} hours", age_h)
            return {
                "html": entry.data,
                "cached": True,
                "cacheAge": f"{age_h}h",
                "generated": entry.generated,
            }

    try:
        built = run_collection_build(req)
    except SearchError as e:
        logger.error("Pre-generation failed: {}", e)
        raise HTTPException(status_code=500, detail={"error": "Pre-generation failed", "message": str(e)})
    except Exception as e:
        logger.exception("Pre-generation crashed")
        raise HTTPException(status_code=500, detail={"error": "Pre-generation failed", "message": str(e)})

    entry = _cache.set(key, built["html"], products=built["products"], total_hits=built["totalHits"])
    logger.info(
        "Static HTML generated for {}: {} products, {}KB",
        req.city_name, built["products"], round(len(built["html"]) / 1024),
    )
    return {
        "html": built["html"],
        "cached": False,
        "generated": entry.generated,
        "stats": {
            "products": built["products"],
            "totalHits": built["totalHits"],
            "city": req.city_name,
            "searchTime": built["searchTime"],
        },
    }
