"""Multi-select categorical filters over the record store.

Each field holds a FieldFilter that is either unrestricted (every label passes)
or an explicit allowed set. Fields combine with AND, labels inside one field's
allowed set combine with OR.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import FrozenSet, Iterable, Mapping, Optional, Tuple

from src.records import IncidentRecord
from src.utils.attribute_taxonomy import Field, as_field


@dataclass(frozen=True)
class FieldFilter:
    """Either Unrestricted (allowed is None) or AllowedSet(allowed).

    An AllowedSet with no labels is a real restriction and matches nothing.
    """
    allowed: Optional[FrozenSet[str]] = None

    @classmethod
    def unrestricted(cls) -> 'FieldFilter':
        return cls(None)

    @classmethod
    def allowing(cls, labels: Iterable[str]) -> 'FieldFilter':
        return cls(frozenset(labels))

    @property
    def is_unrestricted(self) -> bool:
        return self.allowed is None

    def accepts(self, label: str) -> bool:
        return self.allowed is None or label in self.allowed

    def toggled(self, label: str) -> 'FieldFilter':
        if self.allowed is None:
            return FieldFilter.allowing([label])
        if label in self.allowed:
            remaining = self.allowed - {label}
            # dropping the last selected label means "no filter" again
            return FieldFilter.allowing(remaining) if remaining else FieldFilter.unrestricted()
        return FieldFilter.allowing(self.allowed | {label})


UNRESTRICTED = FieldFilter.unrestricted()

FilterState = Mapping[Field, FieldFilter]


def default_filter_state() -> FilterState:
    """Every field explicitly unrestricted."""
    return MappingProxyType({f: UNRESTRICTED for f in Field})


def make_filter_state(**allowed: Iterable[str]) -> FilterState:
    """Build a state from keyword labels, e.g. make_filter_state(severity=['Injury'])."""
    state = {f: UNRESTRICTED for f in Field}
    for name, labels in allowed.items():
        state[as_field(name)] = FieldFilter.allowing(labels)
    return MappingProxyType(state)


def is_visible(record: IncidentRecord, filter_state: FilterState) -> bool:
    for field in Field:
        field_filter = filter_state[field]
        if not field_filter.accepts(record.label(field)):
            return False
    return True


def filtered_set(store: Iterable[IncidentRecord], filter_state: FilterState) -> Tuple[IncidentRecord, ...]:
    """Records passing every field filter, in store order."""
    return tuple(record for record in store if is_visible(record, filter_state))


class FilterEngine:
    """Owns the mutable filter state for one session.

    toggle_value is the per-label mutator; reset clears every field. Both swap
    in a new immutable snapshot so callers holding `state` never see it change.
    """

    def __init__(self, initial: Optional[FilterState] = None) -> None:
        state = dict(default_filter_state())
        if initial is not None:
            state.update({as_field(k): v for k, v in initial.items()})
        self._state: FilterState = MappingProxyType(state)

    @property
    def state(self) -> FilterState:
        return self._state

    def allowed(self, field: Field | str) -> Optional[FrozenSet[str]]:
        return self._state[as_field(field)].allowed

    def toggle_value(self, field: Field | str, value: str) -> FilterState:
        field = as_field(field)
        state = dict(self._state)
        state[field] = state[field].toggled(value)
        self._state = MappingProxyType(state)
        return self._state

    def reset(self) -> FilterState:
        self._state = default_filter_state()
        return self._state

    def is_visible(self, record: IncidentRecord) -> bool:
        return is_visible(record, self._state)

    def filtered_set(self, store: Iterable[IncidentRecord]) -> Tuple[IncidentRecord, ...]:
        return filtered_set(store, self._state)
