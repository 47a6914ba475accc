from datetime import datetime, timezone

from nearby.config import Hit
from nearby.render import CollectionMeta, count_line, format_price, generate_collection_html


def test_format_price_german_locale():
    assert format_price(1234.5) == "1.234,50\u00a0€"
    assert format_price(9) == "9,00\u00a0€"
    assert format_price(None) == ""


def test_count_line_mentions_remaining_hits():
    meta = CollectionMeta(city_name="Köln", total_hits=40)
    assert count_line(1, meta) == "Showing 1 artwork from Köln and nearby areas (39 more available)"
    assert "more available" not in count_line(40, meta)


def test_collection_html_escapes_titles_and_city():
    products = [
        Hit(handle="a", title='<b>"Dusk"</b>', image_url="https://cdn/a.jpg", price=120.0),
        Hit(handle="b", title="Plain"),
    ]
    meta = CollectionMeta(city_name="A&B", total_hits=2)
    out = generate_collection_html(products, meta, generated_at=datetime(2024, 1, 1, tzinfo=timezone.utc))

    assert "<b>" not in out
    assert "&lt;b&gt;&quot;Dusk&quot;&lt;/b&gt;" in out
    assert 'data-city="A&amp;B"' in out
    assert 'href="/products/a"' in out
    assert "120,00\u00a0€" in out
    assert out.count('class="masonry-item"') == 2
    # no image block for products without an image
    assert out.count("<img") == 1
    assert 'data-generated="2024-01-01T00:00:00+00:00"' in out


def test_format_price_keeps_amount_and_currency_together():
    price = format_price(1500)
    assert " " not in price
    assert price == "1.500,00\u00a0€"
