#!/usr/bin/env python3
"""Generate a smoke summary CSV for the configured datasets.

Loads accidents and bike lanes, then writes the unfiltered share report for
every attribute plus the density hotspot.

Writes: reports/smoke_summary.csv
"""
from pathlib import Path
import sys

import pandas as pd

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from src.explorer import HotspotExplorer
from src.utils.attribute_taxonomy import Field
from src.utils.exceptions import LoadFailure

OUT = ROOT / 'reports' / 'smoke_summary.csv'


def summarise(explorer: HotspotExplorer):
    rows = []
    features = explorer.get_filtered_features()
    for field in Field:
        for label, share in explorer.report(features, field):
            rows.append({
                'type': 'share',
                'attribute': field.value,
                'label': label,
                'percentage': share,
            })
    peak = explorer.densest_point()
    if peak is not None:
        rows.append({
            'type': 'hotspot',
            'attribute': None,
            'label': f'{peak.position[1]:.6f},{peak.position[0]:.6f}',
            'count': peak.count,
            'radius_km': explorer.radius_km,
        })
    return rows


def main(out: Path = OUT, accidents_path=None, lanes_path=None):
    explorer = HotspotExplorer()
    try:
        explorer.load(accidents_path, lanes_path)
    except LoadFailure as e:
        print(f'Cannot load the {e.dataset} dataset: {e.reason}', file=sys.stderr)
        return 2
    rows = summarise(explorer)
    if not rows:
        print('No accidents loaded; nothing to report.', file=sys.stderr)
        return 2
    df = pd.DataFrame(rows)
    out.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(out, index=False)
    print('Wrote', out)
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
