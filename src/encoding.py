"""Point colours for the selected attribute.

Severity and bike lane use fixed mappings. Weather and lighting hash the label
into a fixed palette so a label keeps its colour across sessions without a
hand-maintained table.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Tuple

from src.records import IncidentRecord
from src.utils.attribute_taxonomy import (
    Field,
    OFF_BIKE_LANE_LABEL,
    ON_BIKE_LANE_LABEL,
    Severity,
    UNDEFINED_LABEL,
    as_field,
    canonical_label,
)

SEVERITY_COLORS: Dict[str, str] = {
    Severity.FATAL_OR_HOSPITALIZATION.value: 'red',
    Severity.INJURY.value: 'yellow',
    Severity.NO_INJURY.value: 'green',
}

BIKE_LANE_COLORS: Dict[str, str] = {
    ON_BIKE_LANE_LABEL: 'green',
    OFF_BIKE_LANE_LABEL: 'red',
}

WEATHER_PALETTE: Tuple[str, ...] = (
    '#1f77b4', '#ff7f0e', '#2ca02c', '#d62728', '#9467bd',
    '#8c564b', '#e377c2', '#7f7f7f', '#bcbd22', '#17becf',
)

LIGHTING_PALETTE: Tuple[str, ...] = ('#fdb863', '#b2abd2', '#5e3c99', '#252525')


def palette_index(label: str, palette_size: int) -> int:
    """Sum of the label's code points modulo palette_size. Empty or Undefined -> 0."""
    if palette_size <= 0:
        raise ValueError(f'palette_size must be positive, got {palette_size}')
    if not label or label == UNDEFINED_LABEL:
        return 0
    return sum(ord(ch) for ch in label) % palette_size


def color_for_label(label: str, attribute: Field | str) -> str:
    attribute = as_field(attribute)
    if attribute is Field.SEVERITY:
        return SEVERITY_COLORS.get(label, SEVERITY_COLORS[Severity.NO_INJURY.value])
    if attribute is Field.BIKE_LANE:
        return BIKE_LANE_COLORS.get(label, BIKE_LANE_COLORS[OFF_BIKE_LANE_LABEL])
    palette = WEATHER_PALETTE if attribute is Field.WEATHER else LIGHTING_PALETTE
    return palette[palette_index(label, len(palette))]


def color_for(record: IncidentRecord, attribute: Field | str) -> str:
    return color_for_label(canonical_label(record, attribute), attribute)


def colors_for(records: Iterable[IncidentRecord], attribute: Field | str) -> List[str]:
    attribute = as_field(attribute)
    return [color_for(record, attribute) for record in records]


def legend_entries(labels: Iterable[str], attribute: Field | str) -> List[Tuple[str, str]]:
    """(label, colour) pairs for a legend, one per distinct label."""
    attribute = as_field(attribute)
    seen = dict.fromkeys(labels)
    return [(label, color_for_label(label, attribute)) for label in seen]
