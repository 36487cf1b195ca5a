"""
Dataset loading for the bike hotspot explorer.

Reads the two local GeoJSON files the map needs:
- the accidents FeatureCollection (normalized into a RecordStore)
- the bike lane network (kept opaque, drawn as-is)

A failure on either file is reported as a LoadFailure subclass naming the
dataset, so the front end can tell the user which file is the problem.
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Type

from src.data.preprocessing import IncidentNormalizer
from src.records import LaneNetwork, RecordStore
from src.utils.exceptions import AccidentsLoadError, LaneNetworkLoadError, LoadFailure
from src.utils.logger_config import setup_logger

logger = setup_logger(__name__)


def _read_feature_collection(path, error_cls: Type[LoadFailure]) -> Dict[str, Any]:
    """
    Reads a GeoJSON FeatureCollection from disk

    Args:
    path (str | Path): File to read
    error_cls (type): LoadFailure subclass to raise, decides which dataset gets blamed

    Returns:
    dict: The parsed FeatureCollection

    Raises:
    LoadFailure: Missing file, unreadable file, invalid JSON or not a FeatureCollection
    """
    path = Path(path)
    try:
        logger.info(f'Loading {error_cls.dataset} from {path}')
        with open(path, 'r', encoding='utf-8') as f:
            payload = json.load(f)
    except FileNotFoundError as e:
        logger.error(f'File not found: {path}')
        raise error_cls(f'File not found: {path}') from e
    except json.JSONDecodeError as e:
        logger.error(f'{path} is not valid JSON : {str(e)}')
        raise error_cls(f'{path} is not valid JSON : {str(e)}') from e
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f'Cannot read {path} : {str(e)}')
        raise error_cls(f'Cannot read {path} : {str(e)}') from e

    if not isinstance(payload, dict) or payload.get('type') != 'FeatureCollection' \
            or not isinstance(payload.get('features'), list):
        logger.error(f'{path} is not a GeoJSON FeatureCollection')
        raise error_cls(f'{path} is not a GeoJSON FeatureCollection')
    return payload


def load_accidents(path, normalizer: Optional[IncidentNormalizer] = None) -> RecordStore:
    """
    Loads and normalizes the accidents dataset

    Args:
    path (str | Path): accidents GeoJSON (bikes.geojson)
    normalizer (IncidentNormalizer): Custom normalizer, e.g. with other severity markers

    Returns:
    RecordStore: Normalized records in file order

    Raises:
    AccidentsLoadError: See _read_feature_collection
    """
    payload = _read_feature_collection(path, AccidentsLoadError)
    normalizer = normalizer or IncidentNormalizer()
    store = RecordStore(normalizer.normalize_collection(payload['features']))
    logger.info(f'Loaded {len(store)} accidents ({len(payload["features"]) - len(store)} skipped)')
    return store


def load_lane_network(path) -> LaneNetwork:
    """
    Loads the bike lane network without inspecting its geometry

    Raises:
    LaneNetworkLoadError: See _read_feature_collection
    """
    payload = _read_feature_collection(path, LaneNetworkLoadError)
    logger.info(f'Loaded lane network with {len(payload["features"])} features')
    return LaneNetwork(payload)


def load_datasets(accidents_path, lanes_path, normalizer: Optional[IncidentNormalizer] = None) -> Tuple[RecordStore, LaneNetwork]:
    """Loads accidents first, then lanes. Both must succeed."""
    store = load_accidents(accidents_path, normalizer)
    lanes = load_lane_network(lanes_path)
    return store, lanes
