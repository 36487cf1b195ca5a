import math
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from src.config import PROPERTY_NAMES
from src.records import IncidentRecord, is_valid_position
from src.utils.attribute_taxonomy import (
    SEVERITY_MARKERS,
    decode_lighting,
    decode_weather,
    normalize_severity,
    parse_bike_lane,
)
from src.utils.logger_config import setup_logger

logger = setup_logger(__name__)


class IncidentNormalizer:
    """
    Turns raw accident GeoJSON features into canonical IncidentRecords

    This class handles:
    - Reading the point geometry and dropping features without a usable position
    - Deriving severity from the narrative accident type text
    - Decoding weather and lighting codes to labels
    - Parsing the bike lane flag

    Every attribute mapping is total: malformed values never raise, they fall
    back to NoInjury / 'Undefined' / False.

    Attributes:
    property_names (dict): Raw property name for each of id, severity, weather, lighting, bike_lane
    severity_markers (tuple): Ordered (Severity, substrings) lookup used for the severity text
    """

    def __init__(
        self,
        property_names: Optional[Mapping[str, str]] = None,
        severity_markers=SEVERITY_MARKERS,
    ) -> None:
        self.property_names: Dict[str, str] = {**PROPERTY_NAMES, **(property_names or {})}
        self.severity_markers = severity_markers

    @staticmethod
    def _extract_position(feature: Mapping[str, Any]) -> Optional[Tuple[float, float]]:
        geometry = feature.get('geometry') if isinstance(feature, Mapping) else None
        if not isinstance(geometry, Mapping) or geometry.get('type') != 'Point':
            return None
        coords = geometry.get('coordinates')
        if not isinstance(coords, (list, tuple)) or len(coords) < 2:
            return None
        try:
            lon, lat = float(coords[0]), float(coords[1])
        except (TypeError, ValueError):
            return None
        if not is_valid_position(lon, lat):
            return None
        return lon, lat

    def normalize_properties(self, properties: Optional[Mapping[str, Any]], position: Tuple[float, float]) -> IncidentRecord:
        """
        Build one IncidentRecord from raw properties and an already validated position

        Args:
        properties (Mapping): Raw GeoJSON properties, may be None
        position (tuple): (longitude, latitude)

        Returns:
        IncidentRecord: The normalized record
        """
        props = properties if isinstance(properties, Mapping) else {}
        names = self.property_names
        raw_severity = props.get(names['severity'])
        if isinstance(raw_severity, float) and math.isnan(raw_severity):
            raw_severity = None

        return IncidentRecord(
            id=props.get(names['id']),
            position=position,
            severity=normalize_severity(raw_severity, self.severity_markers),
            weather_label=decode_weather(props.get(names['weather'])),
            lighting_label=decode_lighting(props.get(names['lighting'])),
            on_bike_lane=parse_bike_lane(props.get(names['bike_lane'])),
            raw_severity=None if raw_severity is None else str(raw_severity),
        )

    def normalize_feature(self, feature: Mapping[str, Any]) -> Optional[IncidentRecord]:
        """Returns None when the feature has no valid point geometry."""
        position = self._extract_position(feature)
        if position is None:
            return None
        return self.normalize_properties(feature.get('properties'), position)

    def normalize_collection(self, features: Iterable[Mapping[str, Any]]) -> List[IncidentRecord]:
        """
        Normalize a whole feature list, preserving order

        Args:
        features (Iterable): GeoJSON features

        Returns:
        list[IncidentRecord]: One record per feature with a valid position
        """
        records: List[IncidentRecord] = []
        skipped = 0
        for feature in features:
            record = self.normalize_feature(feature)
            if record is None:
                skipped += 1
                continue
            records.append(record)

        if skipped:
            logger.warning(f'Skipped {skipped} features without a valid point position')
        logger.debug(f'Normalized {len(records)} incident records')
        return records
