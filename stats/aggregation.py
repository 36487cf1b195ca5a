"""Category share report for the selected attribute."""

from __future__ import annotations

from typing import Iterable, List, Tuple

import pandas as pd

from src.records import IncidentRecord
from src.utils.attribute_taxonomy import Field, as_field, canonical_label


def _category_counts(records: Iterable[IncidentRecord], attribute: Field) -> pd.Series:
    """Records per label, largest first. Ties keep first-seen order."""
    labels = pd.Series([canonical_label(r, attribute) for r in records])
    if labels.empty:
        return labels
    counts = labels.groupby(labels, sort=False).size()
    return counts.sort_values(ascending=False, kind='stable')


def _round_shares(counts: List[int]) -> List[float]:
    """Percentages rounded to one decimal, total kept within 100.0 +/- 0.1.

    Plain rounding can drift by 0.05 per category (six equal groups give
    100.2). When the drift passes one tenth, the shares rounded furthest in
    the offending direction are moved back one tenth.
    """
    total = sum(counts)
    exact = [c * 1000 / total for c in counts]
    tenths = [int(e + 0.5) for e in exact]
    drift = sum(tenths) - 1000
    if abs(drift) > 1:
        step = 1 if drift > 0 else -1
        worst_first = sorted(range(len(counts)), key=lambda i: (tenths[i] - exact[i]) * step, reverse=True)
        for i in worst_first[:abs(drift) - 1]:
            tenths[i] -= step
    return [t / 10 for t in tenths]


def report(records: Iterable[IncidentRecord], attribute: Field | str) -> List[Tuple[str, float]]:
    """
    Share of each category among records, largest first.

    Args:
    records (Iterable[IncidentRecord]): Usually the filtered features
    attribute (Field | str): Field to group on

    Returns:
    list[tuple[str, float]]: (label, percentage) with one decimal. Empty when there are no records.
    """
    attribute = as_field(attribute)
    counts = _category_counts(records, attribute)
    if counts.empty:
        return []
    shares = _round_shares(counts.tolist())
    return [(str(label), share) for label, share in zip(counts.index, shares)]


def report_frame(records: Iterable[IncidentRecord], attribute: Field | str) -> pd.DataFrame:
    """Same ordering as report(), with raw counts, for tables and charts."""
    attribute = as_field(attribute)
    counts = _category_counts(records, attribute)
    if counts.empty:
        return pd.DataFrame(columns=['label', 'count', 'percentage'])
    frame = counts.rename_axis('label').reset_index(name='count')
    frame['percentage'] = _round_shares(frame['count'].tolist())
    return frame
