from urllib.parse import parse_qs

import httpx
import pytest

from nearby import search
from nearby.search import AlgoliaSearchClient, SearchError, build_nearby_params


class DummyResponse:
    def __init__(self, payload=None, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


def _client():
    return AlgoliaSearchClient(app_id="APP", api_key="KEY", index_name="products")


def test_build_nearby_params_geo_and_filter():
    params = build_nearby_params(48.1, 11.5, 30, 72, exclude_handle="current-art")
    assert params["aroundLatLng"] == "48.1,11.5"
    assert params["aroundRadius"] == 30000
    assert params["hitsPerPage"] == 72
    assert params["filters"] == "NOT handle:current-art"
    assert "meta.location.details" in params["attributesToRetrieve"]


def test_build_nearby_params_fallback_has_no_geo():
    params = build_nearby_params(None, None, 30, 24)
    assert "aroundLatLng" not in params
    assert "filters" not in params


def test_search_posts_encoded_params(monkeypatch):
    seen = {}

    def fake_post(self, url, headers=None, json=None):
        seen["url"] = url
        seen["headers"] = headers
        seen["body"] = json
        return DummyResponse({"hits": [{"handle": "a"}], "nbHits": 120, "processingTimeMS": 4})

    monkeypatch.setattr(search.httpx.Client, "post", fake_post)
    result = _client().search(build_nearby_params(1.0, 2.0, 5, 10))

    assert seen["url"] == "https://APP-dsn.algolia.net/1/indexes/products/query"
    assert seen["headers"]["X-Algolia-API-Key"] == "KEY"
    encoded = parse_qs(seen["body"]["params"])
    assert encoded["aroundLatLng"] == ["1.0,2.0"]
    assert encoded["getRankingInfo"] == ["true"]
    assert result.hits == [{"handle": "a"}]
    assert result.nb_hits == 120
    assert result.processing_time_ms == 4


def test_search_http_error_raises(monkeypatch):
    monkeypatch.setattr(search.httpx.Client, "post", lambda self, url, headers=None, json=None: DummyResponse({}, 403))
    with pytest.raises(SearchError):
        _client().search({"query": ""})


def test_search_transport_error_raises(monkeypatch):
    def boom(self, url, headers=None, json=None):
        raise httpx.ConnectError("refused")

    monkeypatch.setattr(search.httpx.Client, "post", boom)
    with pytest.raises(SearchError):
        _client().search({"query": ""})


def test_search_bad_payload_raises(monkeypatch):
    monkeypatch.setattr(search.httpx.Client, "post", lambda self, url, headers=None, json=None: DummyResponse(None))
    with pytest.raises(SearchError):
        _client().search({"query": ""})


def test_search_requires_credentials():
    with pytest.raises(SearchError):
        AlgoliaSearchClient(app_id="", api_key="").search({"query": ""})


def test_search_tolerates_non_numeric_counts(monkeypatch):
    payload = {"hits": [{"handle": "a"}, {"handle": "b"}], "nbHits": "many", "processingTimeMS": "fast"}
    monkeypatch.setattr(search.httpx.Client, "post", lambda self, url, headers=None, json=None: DummyResponse(payload))
    result = _client().search({"query": ""})
    assert result.nb_hits == 2
    assert result.processing_time_ms is None
