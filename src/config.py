"""Runtime settings for the bike hotspot explorer.

Values can be overridden with environment variables (or a local .env file).
"""

import math
import os
from pathlib import Path

from dotenv import load_dotenv

from src.utils.exceptions import ConfigError

load_dotenv()

ROOT = Path(__file__).resolve().parents[1]
DATA_DIR = ROOT / 'data'


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        value = float(raw)
    except ValueError as e:
        raise ConfigError(f'{name} must be a number, got {raw!r}') from e
    if not math.isfinite(value) or value < 0:
        raise ConfigError(f'{name} must be a finite non-negative number, got {raw!r}')
    return value


# Data Files
ACCIDENTS_PATH = Path(os.getenv('BIKE_HOTSPOTS_ACCIDENTS_PATH', DATA_DIR / 'bikes.geojson'))
LANES_PATH = Path(os.getenv('BIKE_HOTSPOTS_LANES_PATH', DATA_DIR / 'reseau_cyclable.json'))

LOG_DIR = os.getenv('BIKE_HOTSPOTS_LOG_DIR', 'logs')

# Hotspot search radius
DEFAULT_RADIUS_KM = _env_float('BIKE_HOTSPOTS_RADIUS_KM', 0.2)

# Raw property names in the accidents GeoJSON
PROPERTY_NAMES = {
    'id': 'NO_SEQ_COLL',
    'severity': 'ACCIDENT_TYPE',
    'weather': 'CD_COND_METEO',
    'lighting': 'CD_ECLRM',
    'bike_lane': 'ON_BIKELANE',
}

# Map Settings - Montreal downtown
DEFAULT_LAT = 45.508888
DEFAULT_LON = -73.561668
DEFAULT_ZOOM = 12
LANE_COLOR = '#003366'
HEAT_WEIGHT = 0.7
