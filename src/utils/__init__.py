from .attribute_taxonomy import (
    Field,
    Severity,
    UNDEFINED_LABEL,
    canonical_label,
    decode_lighting,
    decode_weather,
    normalize_severity,
    parse_bike_lane,
)

__all__ = [
    "Field",
    "Severity",
    "UNDEFINED_LABEL",
    "canonical_label",
    "decode_lighting",
    "decode_weather",
    "normalize_severity",
    "parse_bike_lane",
]
