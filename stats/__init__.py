"""Density and share statistics over incident point sets."""

from .aggregation import report, report_frame
from .density import (
    DEFAULT_RADIUS_KM,
    EARTH_RADIUS_KM,
    densest_point,
    haversine_km,
    neighbor_counts,
)

__all__ = [
    'DEFAULT_RADIUS_KM',
    'EARTH_RADIUS_KM',
    'report',
    'report_frame',
    'densest_point',
    'haversine_km',
    'neighbor_counts',
]
