"""Fixed-radius neighbour counting to locate the densest accident among a point set."""

from __future__ import annotations

import math
from typing import Optional, Sequence, Tuple

import numpy as np
from sklearn.neighbors import BallTree

from src.records import DensityPeak, IncidentRecord

EARTH_RADIUS_KM = 6371.0088
DEFAULT_RADIUS_KM = 0.2

# above this many points "auto" switches to the ball tree
TREE_THRESHOLD = 2000
_CHUNK = 2048


def haversine_km(lon1, lat1, lon2, lat2) -> np.ndarray:
    """Great-circle distance (km) with degree inputs; broadcast friendly."""
    lon1, lat1, lon2, lat2 = (np.radians(np.asarray(v, dtype=float)) for v in (lon1, lat1, lon2, lat2))
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    a = np.sin(dlat / 2) ** 2 + np.cos(lat1) * np.cos(lat2) * np.sin(dlon / 2) ** 2
    return 2 * EARTH_RADIUS_KM * np.arcsin(np.sqrt(np.clip(a, 0.0, 1.0)))


def _coords(records: Sequence[IncidentRecord]) -> Tuple[np.ndarray, np.ndarray]:
    lon = np.fromiter((r.position[0] for r in records), dtype=float, count=len(records))
    lat = np.fromiter((r.position[1] for r in records), dtype=float, count=len(records))
    return lon, lat


def _counts_bruteforce(lon: np.ndarray, lat: np.ndarray, radius_km: float) -> np.ndarray:
    n = len(lon)
    counts = np.empty(n, dtype=np.int64)
    # Chunked to keep the distance matrix at _CHUNK x n
    for start in range(0, n, _CHUNK):
        end = min(start + _CHUNK, n)
        dist = haversine_km(lon[start:end, None], lat[start:end, None], lon[None, :], lat[None, :])
        counts[start:end] = (dist <= radius_km).sum(axis=1)
    return counts


def _counts_balltree(lon: np.ndarray, lat: np.ndarray, radius_km: float) -> np.ndarray:
    # BallTree haversine works on [lat, lon] in radians, on the unit sphere
    coords = np.radians(np.column_stack([lat, lon]))
    tree = BallTree(coords, metric='haversine')
    counts = tree.query_radius(coords, r=radius_km / EARTH_RADIUS_KM, count_only=True)
    return np.asarray(counts, dtype=np.int64)


def neighbor_counts(records: Sequence[IncidentRecord], radius_km: float = DEFAULT_RADIUS_KM, method: str = 'auto') -> np.ndarray:
    """
    For every record, how many records (itself included) lie within radius_km.

    Args:
    records (Sequence[IncidentRecord]): Point set, usually the filtered features
    radius_km (float): Neighbour radius, inclusive
    method (str): 'bruteforce', 'balltree' or 'auto'

    Returns:
    np.ndarray: int64 counts aligned with records
    """
    if not math.isfinite(radius_km) or radius_km < 0:
        raise ValueError(f'radius_km must be a finite non-negative number, got {radius_km}')
    if method not in {'auto', 'bruteforce', 'balltree'}:
        raise ValueError(f'Unsupported method: {method}')
    if len(records) == 0:
        return np.zeros(0, dtype=np.int64)

    lon, lat = _coords(records)
    if method == 'auto':
        method = 'balltree' if len(records) > TREE_THRESHOLD else 'bruteforce'
    # zero radius: exact duplicates only, counted on the reference path
    if method == 'balltree' and radius_km > 0:
        return _counts_balltree(lon, lat, radius_km)
    return _counts_bruteforce(lon, lat, radius_km)


def densest_point(records: Sequence[IncidentRecord], radius_km: float = DEFAULT_RADIUS_KM, method: str = 'auto') -> Optional[DensityPeak]:
    """
    Position with the most neighbours within radius_km.

    Ties go to the first record in the given order. Returns None for an empty
    point set.
    """
    records = list(records)
    counts = neighbor_counts(records, radius_km, method)
    if counts.size == 0:
        return None
    best = int(np.argmax(counts))  # argmax returns the first maximum
    return DensityPeak(position=records[best].position, count=int(counts[best]), index=best)
