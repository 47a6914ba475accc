from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------
# Paths
# ---------------------------

PROJECT_ROOT = Path(__file__).resolve().parents[1]

LOG_DIR = PROJECT_ROOT / "logs"


# ---------------------------
# Search index (Algolia)
# ---------------------------

ALGOLIA_APP_ID = os.getenv("ALGOLIA_APP_ID", "")
ALGOLIA_SEARCH_API_KEY = os.getenv("ALGOLIA_SEARCH_API_KEY", "")
ALGOLIA_INDEX_NAME = os.getenv("ALGOLIA_INDEX_NAME", "shopify_products")

ATTRIBUTES_TO_RETRIEVE: List[str] = [
    "title",
    "handle",
    "product_image",
    "image",
    "price",
    "vendor",
    "_geoloc",
    "meta.location.details",
]

# search page size multiplier for /api/nearby-search
NEARBY_OVERFETCH_FACTOR = 3
COLLECTION_FETCH_SIZE = 100

DEFAULT_RADIUS_KM = 30.0


# ---------------------------
# Deduplication engine defaults
# ---------------------------

DEFAULT_MAX_PER_GROUP = 2
DEFAULT_TARGET_COUNT = 24

SIMILARITY_THRESHOLD = 0.8
TITLE_TOKEN_MIN_CHARS = 3   # tokens of 1-2 chars ("of", "la") are ignored

COORDINATE_DECIMALS = 6


# ---------------------------
# Result cache
# ---------------------------

CACHE_TTL_SECONDS = 24 * 60 * 60
CACHE_MAX_ENTRIES = 1000


# ---------------------------
# HTTP hardening (search client)
# ---------------------------

HTTP_CONNECT_TIMEOUT = float(os.getenv("HTTP_CONNECT_TIMEOUT", "3.0"))
HTTP_READ_TIMEOUT = float(os.getenv("HTTP_READ_TIMEOUT", "7.0"))

HTTP_USER_AGENT = "nearby-products/1.0"


# ---------------------------
# Logging / observability
# ---------------------------

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_ROTATION = "10 MB"
LOG_RETENTION = "7 days"

SERVICE_NAME = "algolia-cache-server"


# ---------------------------
# Pydantic models shared around the app
# ---------------------------

class LocationPolicy(str, Enum):
    """Which attribute decides that two hits show the same physical place."""

    COORDINATES = "coordinates"
    PHOTO = "photo"


class LocationDetails(BaseModel):
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    google_place_id: Optional[str] = None
    formatted_address: Optional[str] = None
    location_photo: Optional[str] = None
    style_name: Optional[str] = None


class Hit(BaseModel):
    """
    One candidate product returned by the search index.

    Built fresh per request by :func:`nearby.mapping.hit_from_record`;
    the engine wraps hits instead of modifying them.
    """

    object_id: str = ""
    handle: str = ""
    title: str = ""
    image_url: Optional[str] = None
    price: Optional[float] = None
    vendor: Optional[str] = None
    location_details: Optional[LocationDetails] = None
    featured: bool = False


class DedupeOptions(BaseModel):
    """
    Named options for one engine run.

    Passed explicitly into the engine entry point; nothing in the engine
    reads module-level switches.
    """

    model_config = ConfigDict(frozen=True)

    max_per_group: int = DEFAULT_MAX_PER_GROUP
    target_count: int = DEFAULT_TARGET_COUNT
    location_policy: LocationPolicy = LocationPolicy.PHOTO
    featured_first: bool = False
    collapse_similar_titles: bool = False
    similarity_threshold: float = SIMILARITY_THRESHOLD
    title_token_min_chars: int = TITLE_TOKEN_MIN_CHARS


class NearbyProduct(BaseModel):
    """
    Product card returned by /api/nearby-search.

    Serialized with the index field names (``objectID``, ``product_image``,
    ``meta.location.details``) so storefront clients read hits as stored.
    """

    object_id: str = Field("", serialization_alias="objectID")
    handle: str
    title: str
    image_url: Optional[str] = Field(None, serialization_alias="product_image")
    price: Optional[float] = None
    vendor: Optional[str] = None
    meta: Optional[Dict[str, Any]] = None


class NearbySearchRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    lat: Optional[float] = None
    lng: Optional[float] = None
    radius_km: float = Field(DEFAULT_RADIUS_KM, alias="radiusKm", gt=0)
    hits_per_page: int = Field(DEFAULT_TARGET_COUNT, alias="hitsPerPage", ge=1, le=1000)
    current_handle: Optional[str] = Field(None, alias="currentHandle")
    max_per_location_photo: int = Field(DEFAULT_MAX_PER_GROUP, alias="maxPerLocationPhoto", ge=1)
    fallback: bool = False
    featured_first: bool = Field(False, alias="featuredFirst")
    location_policy: LocationPolicy = Field(LocationPolicy.PHOTO, alias="locationPolicy")


class NearbySearchResponse(BaseModel):
    """
    Response body for POST /api/nearby-search.
    """

    model_config = ConfigDict(populate_by_name=True)

    hits: List[NearbyProduct]
    total_hits: int = Field(0, serialization_alias="totalHits")
    cached: bool = False
    search_time: Optional[int] = Field(None, serialization_alias="searchTime")
    cache_age: Optional[str] = Field(None, serialization_alias="cacheAge")


class PreGenerateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    lat: Optional[float] = None
    lng: Optional[float] = None
    radius_km: float = Field(DEFAULT_RADIUS_KM, alias="radiusKm", gt=0)
    city_name: Optional[str] = Field(None, alias="cityName")
    collection_handle: Optional[str] = Field(None, alias="collectionHandle")
    hits_per_page: int = Field(DEFAULT_TARGET_COUNT, alias="hitsPerPage", ge=1, le=1000)
    force_regenerate: bool = Field(False, alias="forceRegenerate")


class HealthResponse(BaseModel):
    """
    Response body for GET /health.
    """

    status: str


class ServiceStatus(BaseModel):
    status: str
    service: str
    cache_size: int
    uptime: str


class CacheStats(BaseModel):
    size: int
    keys: List[str]
    uptime: float
