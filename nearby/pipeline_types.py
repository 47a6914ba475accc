"""Typed containers shared across engine modules."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .config import Hit


@dataclass(frozen=True)
class GroupedHit:
    """A hit annotated with the keys the engine groups and orders by."""

    hit: Hit
    position: int
    base_identity: str
    location_key: str
    style_key: Optional[str]
    grouped: bool  # False when location_key is the per-hit fallback

    @property
    def featured(self) -> bool:
        return bool(self.hit.featured)
