# nearby/eval.py
from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any, Dict, List, Sequence, Tuple

import numpy as np
import pandas as pd

from .config import DEFAULT_MAX_PER_GROUP, DEFAULT_TARGET_COUNT, DedupeOptions, LocationPolicy
from .mapping import hits_from_records
from .pipeline import run_engine
from .pipeline_types import GroupedHit

# ---------- metrics over an ordered output ----------

def adjacent_repeat_rate(keys: Sequence[Any]) -> float:
    """Share of neighbouring pairs with the same (non-null) key."""
    if len(keys) < 2:
        return 0.0
    pairs = len(keys) - 1
    repeats = sum(1 for a, b in zip(keys, keys[1:]) if a is not None and a == b)
    return repeats / float(pairs)


def mean_same_group_gap(keys: Sequence[Any]) -> float:
    """
    Mean distance between consecutive occurrences of the same key.

    Larger is better: groups are spread further apart.  Returns 0.0 when no
    key occurs twice.
    """
    positions: Dict[Any, List[int]] = {}
    for i, k in enumerate(keys):
        if k is not None:
            positions.setdefault(k, []).append(i)
    gaps = [np.diff(p) for p in positions.values() if len(p) > 1]
    if not gaps:
        return 0.0
    return float(np.concatenate(gaps).mean())


def diversity_report(output: Sequence[GroupedHit]) -> Tuple[pd.DataFrame, Dict[str, float]]:
    df = pd.DataFrame(
        [
            {
                "position": i,
                "handle": gh.hit.handle,
                "title": gh.hit.title,
                "base_identity": gh.base_identity,
                "location_key": gh.location_key,
                "style_key": gh.style_key,
                "grouped": gh.grouped,
                "featured": gh.featured,
            }
            for i, gh in enumerate(output)
        ],
        columns=[
            "position", "handle", "title", "base_identity",
            "location_key", "style_key", "grouped", "featured",
        ],
    )
    locations = df["location_key"].tolist()
    styles = [s if isinstance(s, str) else None for s in df["style_key"].tolist()]
    grouped = df[df["grouped"].astype(bool)]
    summary = {
        "shown": float(len(df)),
        "distinct_locations": float(df["location_key"].nunique()),
        "max_per_location": float(grouped["location_key"].value_counts().max()) if len(grouped) else 0.0,
        "location_repeat_rate": adjacent_repeat_rate(locations),
        "style_repeat_rate": adjacent_repeat_rate(styles),
        "mean_location_gap": mean_same_group_gap(locations),
    }
    return df, summary

# ---------- IO helpers ----------

def load_raw_hits(path: Path) -> List[Dict[str, Any]]:
    """Read a hit dump: a JSON list, or a search response with a 'hits' list."""
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    with path.open("r", encoding="utf-8") as f:
        raw = json.load(f)
    if isinstance(raw, dict):
        raw = raw.get("hits", [])
    if not isinstance(raw, list):
        raise ValueError(f"Expected a list of hits or an object with 'hits' in {path}")
    return raw

# ---------- CLI ----------

def main(argv=None):
    ap = argparse.ArgumentParser(description="Diversity report for the dedup engine on a hit dump")
    ap.add_argument("--hits", type=Path, required=True, help="JSON file with raw search hits")
    ap.add_argument("--target", type=int, default=DEFAULT_TARGET_COUNT)
    ap.add_argument("--max-per-group", type=int, default=DEFAULT_MAX_PER_GROUP)
    ap.add_argument("--policy", choices=[p.value for p in LocationPolicy], default=LocationPolicy.PHOTO.value)
    ap.add_argument("--featured-first", action="store_true")
    ap.add_argument("--similar-titles", action="store_true", help="also collapse near-identical titles")
    ap.add_argument("--out", type=Path, default=None, help="optional per-position CSV")
    args = ap.parse_args(argv)

    options = DedupeOptions(
        max_per_group=args.max_per_group,
        target_count=args.target,
        location_policy=LocationPolicy(args.policy),
        featured_first=args.featured_first,
        collapse_similar_titles=args.similar_titles,
    )
    hits = hits_from_records(load_raw_hits(args.hits))
    df, summary = diversity_report(run_engine(hits, options))

    print(f"Input hits: {len(hits)}")
    for name, value in summary.items():
        print(f"{name:>22}: {value:.4f}")

    if args.out is not None:
        args.out.parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(args.out, index=False, encoding="utf-8")
        print(f"\nWrote {len(df)} rows to {args.out}")

if __name__ == "__main__":
    main()
