from nearby.config import Hit, NearbySearchResponse
from nearby.mapping import hit_from_record, hits_from_records, map_hits_to_response, to_api_product


def test_hit_from_record_reads_nested_details():
    record = {
        "objectID": "123",
        "handle": "harbour-print",
        "title": "Harbour",
        "product_image": "https://cdn.example.com/h.jpg",
        "price": "49.90",
        "vendor": "Studio A",
        "meta": {
            "location": {
                "details": {
                    "latitude": "53.55",
                    "longitude": 9.99,
                    "location_photo": "photo-7",
                    "style_name": "Realism",
                }
            },
            "featured": "true",
        },
    }
    hit = hit_from_record(record)
    assert hit.object_id == "123"
    assert hit.price == 49.90
    assert hit.image_url.startswith("https://")
    assert hit.location_details.latitude == 53.55
    assert hit.location_details.longitude == 9.99
    assert hit.location_details.location_photo == "photo-7"
    assert hit.location_details.style_name == "Realism"
    assert hit.featured is True


def test_hit_from_record_degrades_malformed_values():
    record = {
        "handle": None,
        "price": "n/a",
        "image": "https://cdn.example.com/fallback.jpg",
        "meta.location.details": {"lat": "north", "lng": "2.3", "formatted_address": "  "},
    }
    hit = hit_from_record(record)
    assert hit.handle == ""
    assert hit.title == ""
    assert hit.price is None
    assert hit.image_url == "https://cdn.example.com/fallback.jpg"
    assert hit.location_details.latitude is None
    assert hit.location_details.longitude == 2.3
    assert hit.location_details.formatted_address is None
    assert hit.featured is False


def test_hit_from_record_never_raises_on_garbage():
    assert hit_from_record("not a dict") == Hit()
    assert hits_from_records(None) == []
    assert hit_from_record({"price": float("inf"), "meta": "oops"}).price is None


def test_map_hits_to_response_structure():
    hits = [Hit(object_id="1", handle="a", title="A", price=10.0), Hit(handle="b", title="B")]
    resp = map_hits_to_response(hits, total_hits=42, search_time=3)
    assert isinstance(resp, NearbySearchResponse)
    assert len(resp.hits) == 2
    data = resp.model_dump(by_alias=True, exclude_none=True)
    assert data["totalHits"] == 42
    assert data["searchTime"] == 3
    assert data["hits"][0]["objectID"] == "1"
    assert "cacheAge" not in data


def test_to_api_product_passthrough():
    product = to_api_product(Hit(handle="a", title="A", image_url=None, price=None))
    assert product.handle == "a"
    assert product.image_url is None
    assert product.price is None


def test_api_product_uses_index_field_names():
    hit = hit_from_record(
        {
            "objectID": "9",
            "handle": "harbour",
            "title": "Harbour",
            "product_image": "https://cdn.example.com/h.jpg",
            "meta": {"location": {"details": {"location_photo": "photo-7", "style_name": "Realism"}}},
        }
    )
    data = map_hits_to_response([hit], total_hits=1).model_dump(by_alias=True, exclude_none=True)
    card = data["hits"][0]
    assert card["product_image"] == "https://cdn.example.com/h.jpg"
    assert "image_url" not in card
    assert card["meta"]["location"]["details"] == {"location_photo": "photo-7", "style_name": "Realism"}


def test_api_product_without_details_has_no_meta():
    data = to_api_product(Hit(handle="a", title="A")).model_dump(by_alias=True, exclude_none=True)
    assert "meta" not in data
