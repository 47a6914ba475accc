from __future__ import annotations

"""Shared vocabularies for handle and title normalisation.

Kept apart from ``config`` so the normaliser, the collapser and the
offline report all read the same lists.
"""

# Trailing handle markers naming the medium of a product variant.  Order
# matters only for readability; stripping repeats until none applies.
MEDIUM_SUFFIXES = [
    "original-painting",
    "print",
    "canvas",
    "paper",
    "poster",
    "framed",
]

# Infix separators after which everything is a variant descriptor.
VARIANT_SEPARATORS = [
    "-variant-",
    "-v-",
]

LOCATION_KEY_PREFIXES = {
    "coordinates": "geo:",
    "place": "place:",
    "address": "addr:",
    "photo": "photo:",
    "single": "hit:",
}
