# -*- coding: utf-8 -*-
"""Distance ranking and name search over shop markers."""

from __future__ import annotations
import math
from typing import List, Optional, Sequence, Tuple

from coffee_api import ShopMarker

EARTH_RADIUS_M = 6371008.8
Origin = Tuple[float, float]


def haversine_m(a: float, b: float, c: float, d: float) -> float:
    p1, p2 = math.radians(a), math.radians(c)
    dphi = math.radians(c - a); dl = math.radians(d - b)
    x = math.sin(dphi/2)**2 + math.cos(p1)*math.cos(p2)*math.sin(dl/2)**2
    return EARTH_RADIUS_M * (2*math.asin(math.sqrt(min(1.0, x))))

def distance_to(shop: ShopMarker, origin: Origin) -> float:
    return haversine_m(origin[0], origin[1], shop.latitude, shop.longitude)

def fmt_distance(m: float) -> str:
    return f"{int(m)}m" if m < 1000 else f"{m/1000:.1f} km"


def rank_by_distance(shops: Sequence[ShopMarker], origin: Origin) -> List[ShopMarker]:
    """Closest first. sorted() is stable, so equidistant shops keep their input order."""
    return sorted(shops, key=lambda s: distance_to(s, origin))

def filter_shops(shops: Sequence[ShopMarker], query: str) -> List[ShopMarker]:
    q = (query or "").strip().casefold()
    if not q:
        return list(shops)
    return [s for s in shops if q in s.name.casefold()]

def search_shops(shops: Sequence[ShopMarker], query: str, origin: Optional[Origin]) -> List[ShopMarker]:
    """Rank when we know where the user is, then filter.

    Without a position the list is filtered in its original order rather than
    coming back empty.
    """
    ordered = rank_by_distance(shops, origin) if origin is not None else list(shops)
    return filter_shops(ordered, query)


def parse_origin(text: str) -> Origin:
    parts = [p.strip() for p in (text or "").split(",")]
    if len(parts) != 2:
        raise ValueError("expected LAT,LON")
    lat, lon = float(parts[0]), float(parts[1])
    if not (-90 <= lat <= 90 and -180 <= lon <= 180):
        raise ValueError(f"coordinates out of range: {lat},{lon}")
    return lat, lon
