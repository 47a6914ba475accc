from __future__ import annotations

"""Static HTML for pre-generated city collections."""

import html
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Sequence

from .config import Hit

_MASONRY_SCRIPT = """
    <script>
      document.addEventListener('DOMContentLoaded', function() {
        const grid = document.querySelector('.masonry-grid--static');
        if (!grid) return;

        const items = Array.from(grid.querySelectorAll('.masonry-item'));
        const columnCount = window.innerWidth >= 750 ? 3 : 2;

        function layoutStaticMasonry() {
          const columnWidth = (grid.offsetWidth - (columnCount - 1) * 30) / columnCount;
          const columns = new Array(columnCount).fill(0);
          items.forEach(function(item) {
            const shortest = columns.indexOf(Math.min(...columns));
            item.style.position = 'absolute';
            item.style.left = (shortest * (columnWidth + 30)) + 'px';
            item.style.top = columns[shortest] + 'px';
            item.style.width = columnWidth + 'px';
            columns[shortest] += item.offsetHeight + 30;
          });
          grid.style.height = Math.max(...columns) + 'px';
          grid.style.position = 'relative';
        }

        Promise.all(Array.from(grid.querySelectorAll('img')).map(function(img) {
          return new Promise(function(resolve) {
            if (img.complete) resolve();
            else { img.onload = resolve; img.onerror = resolve; }
          });
        })).then(layoutStaticMasonry);

        let resizeTimeout;
        window.addEventListener('resize', function() {
          clearTimeout(resizeTimeout);
          resizeTimeout = setTimeout(layoutStaticMasonry, 250);
        });
      });
    </script>
"""


@dataclass
class CollectionMeta:
    city_name: str
    total_hits: int
    lat: Optional[float] = None
    lng: Optional[float] = None
    radius_km: Optional[float] = None


def escape(text: Optional[str]) -> str:
    return html.escape(text or "", quote=True)


def format_price(price: Optional[float]) -> str:
    """German-locale euro amount, e.g. 1234.5 -> '1.234,50 €' with a no-break space."""
    if price is None:
        return ""
    us = f"{price:,.2f}"
    return us.replace(",", "_").replace(".", ",").replace("_", ".") + "\u00a0€"


def _product_card(hit: Hit) -> str:
    title = escape(hit.title)
    image = ""
    if hit.image_url:
        image = f"""
                <div class="card__media">
                  <img
                    src="{escape(hit.image_url)}"
                    alt="{title}"
                    loading="lazy"
                    style="width: 100%; height: auto; max-height: 400px; object-fit: cover; display: block;"
                  >
                </div>"""
    price = f'<div class="price">{format_price(hit.price)}</div>' if hit.price else ""
    return f"""
      <div class="masonry-item">
        <div class="card-wrapper product-card-wrapper">
          <div class="card card--standard card--media">
            <a href="/products/{escape(hit.handle)}" class="full-unstyled-link">{image}
              <div class="card__content">
                <h3 class="card__heading">{title}</h3>
                {price}
              </div>
            </a>
          </div>
        </div>
      </div>"""


def count_line(shown: int, meta: CollectionMeta) -> str:
    noun = "artwork" if shown == 1 else "artworks"
    line = f"Showing {shown} {noun} from {escape(meta.city_name)} and nearby areas"
    if meta.total_hits > shown:
        line += f" ({meta.total_hits - shown} more available)"
    return line


def generate_collection_html(
    products: Sequence[Hit],
    meta: CollectionMeta,
    generated_at: Optional[datetime] = None,
) -> str:
    generated = (generated_at or datetime.now(timezone.utc)).isoformat()
    cards = "".join(_product_card(p) for p in products)
    return f"""
    <div class="geo-results-static" data-generated="{generated}" data-city="{escape(meta.city_name)}">
      <div class="geo-results__inner">
        <div class="geo-results__meta">
          <p class="geo-results__count">
            {count_line(len(products), meta)}
          </p>
        </div>
        <div class="geo-results__grid">
          <div class="masonry-grid masonry-grid--static">
            {cards}
          </div>
        </div>
      </div>
    </div>
{_MASONRY_SCRIPT}"""
