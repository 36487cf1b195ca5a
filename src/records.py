"""Immutable record types shared by the filter, colour, density and report code."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Iterator, Mapping, Optional, Sequence, Tuple

from src.utils.attribute_taxonomy import Field, Severity, canonical_label

Position = Tuple[float, float]  # (longitude, latitude)


def is_valid_position(lon: float, lat: float) -> bool:
    return (
        math.isfinite(lon) and math.isfinite(lat)
        and -180.0 <= lon <= 180.0
        and -90.0 <= lat <= 90.0
    )


@dataclass(frozen=True)
class IncidentRecord:
    """One bike accident after normalization.

    Attributes:
    id: Display identifier from the export, not unique
    position: (longitude, latitude)
    severity: Canonical Severity
    weather_label / lighting_label: Decoded labels, 'Undefined' for unknown codes
    on_bike_lane: Whether the accident happened on a bike lane
    raw_severity: Narrative text the severity was derived from (popups only)
    """
    id: Any
    position: Position
    severity: Severity
    weather_label: str
    lighting_label: str
    on_bike_lane: bool
    raw_severity: Optional[str] = None

    def __post_init__(self) -> None:
        lon, lat = self.position
        if not is_valid_position(lon, lat):
            raise ValueError(f'Invalid position {self.position!r} for record {self.id!r}')

    @property
    def lon(self) -> float:
        return self.position[0]

    @property
    def lat(self) -> float:
        return self.position[1]

    def label(self, field: Field | str) -> str:
        return canonical_label(self, field)


@dataclass(frozen=True)
class LaneNetwork:
    """Bike lane geometry, passed through to the map untouched."""
    geojson: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, 'geojson', MappingProxyType(dict(self.geojson)))


@dataclass(frozen=True)
class DensityPeak:
    position: Position
    count: int
    index: int  # position of the peak record in the input sequence


class RecordStore(Sequence[IncidentRecord]):
    """Read-only, ordered collection of normalized incidents."""

    def __init__(self, records: Iterable[IncidentRecord] = ()) -> None:
        self._records: Tuple[IncidentRecord, ...] = tuple(records)

    def __getitem__(self, index):
        return self._records[index]

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[IncidentRecord]:
        return iter(self._records)

    def __repr__(self) -> str:
        return f'RecordStore({len(self._records)} records)'

    def labels(self, field: Field | str) -> Tuple[str, ...]:
        """Distinct labels present for a field, in first-seen order."""
        seen: dict[str, None] = {}
        for record in self._records:
            seen.setdefault(record.label(field), None)
        return tuple(seen)
