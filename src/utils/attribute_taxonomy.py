"""Canonical categories for the raw codes found in the SAAQ/Montreal accident export."""

from __future__ import annotations

from enum import Enum
from typing import Dict, Tuple

from .exceptions import UnknownFieldError


class Severity(str, Enum):
    NO_INJURY = 'NoInjury'
    INJURY = 'Injury'
    FATAL_OR_HOSPITALIZATION = 'FatalOrHospitalization'


class Field(str, Enum):
    """The four categorical fields a user can filter on or colour by."""
    SEVERITY = 'severity'
    WEATHER = 'weather_label'
    LIGHTING = 'lighting_label'
    BIKE_LANE = 'on_bike_lane'


# Code was absent from the known code space. Not the same thing as 'Other'.
UNDEFINED_LABEL = 'Undefined'

ON_BIKE_LANE_LABEL = 'On Bike Lane'
OFF_BIKE_LANE_LABEL = 'Off Bike Lane'

WEATHER_CODES: Dict[int, str] = {
    11: 'Clear',
    12: 'Cloudy',
    13: 'Fog',
    14: 'Rain',
    15: 'Snow',
    16: 'High Winds',
    17: 'Freezing Rain',
    18: 'Snowstorm',
    19: 'Ice',
    99: 'Other',
}

LIGHTING_CODES: Dict[int, str] = {
    1: 'Daylight',
    2: 'Semi-obscure',
    3: 'Night (lit)',
    4: 'Night (unlit)',
}

# Lower-case substrings looked up in the narrative severity text, checked in
# this order. Only the spellings seen in the export; pass your own table to
# IncidentNormalizer for other locales.
SEVERITY_MARKERS: Tuple[Tuple[Severity, Tuple[str, ...]], ...] = (
    (Severity.FATAL_OR_HOSPITALIZATION, ('fatal', 'hospitalization')),
    (Severity.INJURY, ('injury',)),
)

_TRUTHY = {'true', 't', 'yes', 'y', '1', 'oui', 'o'}


def normalize_severity(raw, markers=SEVERITY_MARKERS) -> Severity:
    """Map free severity text to a Severity. Anything unmatched is NoInjury."""
    if raw is None:
        return Severity.NO_INJURY
    text = str(raw).strip().lower()
    if not text:
        return Severity.NO_INJURY
    # the canonical NoInjury spelling contains "injury"
    if text == Severity.NO_INJURY.value.lower():
        return Severity.NO_INJURY
    for severity, needles in markers:
        if any(needle.lower() in text for needle in needles):
            return severity
    return Severity.NO_INJURY


def _as_code(raw) -> int | None:
    if raw is None or isinstance(raw, bool):
        return None
    try:
        value = float(str(raw).strip())
    except ValueError:
        return None
    if not value.is_integer():
        return None
    return int(value)


def decode_weather(raw) -> str:
    code = _as_code(raw)
    return WEATHER_CODES.get(code, UNDEFINED_LABEL) if code is not None else UNDEFINED_LABEL


def decode_lighting(raw) -> str:
    code = _as_code(raw)
    return LIGHTING_CODES.get(code, UNDEFINED_LABEL) if code is not None else UNDEFINED_LABEL


def parse_bike_lane(raw) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, (int, float)):
        return raw == raw and raw != 0  # NaN is not a lane
    if raw is None:
        return False
    return str(raw).strip().lower() in _TRUTHY


def bike_lane_label(on_bike_lane: bool) -> str:
    return ON_BIKE_LANE_LABEL if on_bike_lane else OFF_BIKE_LANE_LABEL


def as_field(field) -> Field:
    """Accept a Field or its string value ('severity', 'weather_label', ...)."""
    if isinstance(field, Field):
        return field
    try:
        return Field(field)
    except ValueError:
        raise UnknownFieldError(f'Unknown field {field!r}. Expected one of {[f.value for f in Field]}') from None


def canonical_label(record, field) -> str:
    """The label a record carries for one field, as used by filters, colours and reports."""
    field = as_field(field)
    if field is Field.SEVERITY:
        return record.severity.value
    if field is Field.WEATHER:
        return record.weather_label
    if field is Field.LIGHTING:
        return record.lighting_label
    return bike_lane_label(record.on_bike_lane)


def known_labels(field) -> Tuple[str, ...]:
    """Every label a field can take, in presentation order."""
    field = as_field(field)
    if field is Field.SEVERITY:
        return tuple(s.value for s in Severity)
    if field is Field.WEATHER:
        return tuple(WEATHER_CODES.values()) + (UNDEFINED_LABEL,)
    if field is Field.LIGHTING:
        return tuple(LIGHTING_CODES.values()) + (UNDEFINED_LABEL,)
    return (ON_BIKE_LANE_LABEL, OFF_BIKE_LANE_LABEL)


__all__ = [
    'Severity',
    'Field',
    'UNDEFINED_LABEL',
    'ON_BIKE_LANE_LABEL',
    'OFF_BIKE_LANE_LABEL',
    'WEATHER_CODES',
    'LIGHTING_CODES',
    'SEVERITY_MARKERS',
    'normalize_severity',
    'decode_weather',
    'decode_lighting',
    'parse_bike_lane',
    'bike_lane_label',
    'as_field',
    'canonical_label',
    'known_labels',
]
