import math

import numpy as np

from path_sim.domain.entities.geography import BoundingBox

EARTH_RADIUS_M = 6_371_008.8
KM_PER_DEG_LAT = 110.574
KM_PER_DEG_LON_EQ = 111.320


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    p1, p2 = math.radians(lat1), math.radians(lat2)
    dp, dl = p2 - p1, math.radians(lon2 - lon1)
    a = math.sin(dp / 2) ** 2 + math.cos(p1) * math.cos(p2) * math.sin(dl / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.asin(min(1.0, math.sqrt(a)))


def haversine_many_m(lats: np.ndarray, lons: np.ndarray, lat: float, lon: float) -> np.ndarray:
    p1, p2 = np.radians(lats), math.radians(lat)
    dp, dl = p2 - p1, np.radians(lon - lons)
    a = np.sin(dp / 2) ** 2 + np.cos(p1) * math.cos(p2) * np.sin(dl / 2) ** 2
    return 2 * EARTH_RADIUS_M * np.arcsin(np.minimum(1.0, np.sqrt(a)))


def create_circle(
    lat: float, lon: float, radius_km: float, points: int = 64
) -> list[tuple[float, float]]:
    """
    Closed polygon ring approximating a circle, as (lon, lat) pairs (GeoJSON order).
    Flat-earth approximation; fine for the few-km selection radius.
    """
    dx = radius_km / (KM_PER_DEG_LON_EQ * math.cos(math.radians(lat)))
    dy = radius_km / KM_PER_DEG_LAT
    theta = np.linspace(0.0, 2 * math.pi, points, endpoint=False)
    ring = [
        (lon + dx * float(c), lat + dy * float(s)) for c, s in zip(np.cos(theta), np.sin(theta))
    ]
    ring.append(ring[0])
    return ring


def bbox_from_polygon(ring: list[tuple[float, float]]) -> BoundingBox:
    xs = [p[0] for p in ring]
    ys = [p[1] for p in ring]
    return BoundingBox(south=min(ys), west=min(xs), north=max(ys), east=max(xs))


def within_radius(
    center_lat: float, center_lon: float, radius_km: float, lat: float, lon: float
) -> bool:
    return haversine_m(center_lat, center_lon, lat, lon) <= radius_km * 1000.0
