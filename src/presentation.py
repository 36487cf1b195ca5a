"""Frame and popup helpers the Streamlit map consumes. No computation of its own."""

from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

import pandas as pd

from src.config import HEAT_WEIGHT
from src.records import IncidentRecord, LaneNetwork

FEATURE_COLUMNS = ['id', 'lon', 'lat', 'severity', 'weather_label', 'lighting_label', 'on_bike_lane', 'color', 'popup']


def describe_record(record: IncidentRecord) -> str:
    """Popup text: ID, accident type, weather, lighting and bike lane."""
    accident_type = record.raw_severity or record.severity.value
    return (
        f'<b>ID:</b> {record.id}<br>'
        f'<b>Accident type:</b> {accident_type}<br>'
        f'<b>Weather:</b> {record.weather_label}<br>'
        f'<b>Lighting:</b> {record.lighting_label}<br>'
        f'<b>Bike Lane:</b> {"Yes" if record.on_bike_lane else "No"}'
    )


def records_to_frame(records: Sequence[IncidentRecord], colors: Sequence[str]) -> pd.DataFrame:
    if len(records) != len(colors):
        raise ValueError(f'Got {len(colors)} colours for {len(records)} records')
    if not records:
        return pd.DataFrame(columns=FEATURE_COLUMNS)
    return pd.DataFrame({
        'id': [r.id for r in records],
        'lon': [r.lon for r in records],
        'lat': [r.lat for r in records],
        'severity': [r.severity.value for r in records],
        'weather_label': [r.weather_label for r in records],
        'lighting_label': [r.lighting_label for r in records],
        'on_bike_lane': [r.on_bike_lane for r in records],
        'color': list(colors),
        'popup': [describe_record(r) for r in records],
    })


def heat_points(records: Iterable[IncidentRecord], weight: float = HEAT_WEIGHT) -> List[Tuple[float, float, float]]:
    """(lat, lon, weight) triples for a heat layer."""
    return [(r.lat, r.lon, weight) for r in records]


def lane_paths(lanes: LaneNetwork) -> Tuple[List[float | None], List[float | None]]:
    """
    Flatten lane LineStrings into lon/lat lists split by None, the way a
    single Plotly line trace draws disconnected segments.
    """
    lons: List[float | None] = []
    lats: List[float | None] = []
    for feature in lanes.geojson.get('features', []):
        geometry = (feature or {}).get('geometry') or {}
        gtype = geometry.get('type')
        coords = geometry.get('coordinates') or []
        if gtype == 'LineString':
            lines = [coords]
        elif gtype == 'MultiLineString':
            lines = coords
        else:
            continue
        for line in lines:
            for point in line:
                lons.append(point[0])
                lats.append(point[1])
            lons.append(None)
            lats.append(None)
    return lons, lats
