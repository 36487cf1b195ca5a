"""
Session state for the hotspot map.

HotspotExplorer ties the loaded datasets to one user's filter state and
selected attribute. Every mutation runs one full recomputation of the visible
features, their colours, the density peak and the share report, and publishes
the result as an immutable ExplorerView. Nothing is patched incrementally.

Until both datasets have loaded every query and mutation raises
DatasetNotLoadedError.
"""

import threading
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from src import config
from src.data.load_data import load_datasets
from src.data.preprocessing import IncidentNormalizer
from src.encoding import color_for, colors_for
from src.filters import FilterEngine, FilterState
from src.records import DensityPeak, IncidentRecord, LaneNetwork, RecordStore
from src.utils.attribute_taxonomy import Field, as_field, known_labels
from src.utils.exceptions import DatasetNotLoadedError, LoadFailure
from src.utils.logger_config import setup_logger
from stats.aggregation import report
from stats.density import densest_point

logger = setup_logger(__name__)


@dataclass(frozen=True)
class ExplorerView:
    """Everything the map needs after one filter pass."""
    features: Tuple[IncidentRecord, ...]
    colors: Tuple[str, ...]
    peak: Optional[DensityPeak]
    report: Tuple[Tuple[str, float], ...]
    attribute: Field
    filter_state: FilterState

    @property
    def is_empty(self) -> bool:
        return not self.features


class HotspotExplorer:
    """
    Owns the record store, lane network, filter state and selected attribute

    Attributes:
    radius_km (float): Neighbour radius for the density peak
    normalizer (IncidentNormalizer): Used by load() to build records

    Example:
        >>> explorer = HotspotExplorer()
        >>> explorer.load('data/bikes.geojson', 'data/reseau_cyclable.json')
        >>> explorer.toggle_value('severity', 'Injury')
        >>> explorer.view.peak
    """

    def __init__(self, radius_km: float = config.DEFAULT_RADIUS_KM, normalizer: Optional[IncidentNormalizer] = None) -> None:
        self.radius_km = radius_km
        self.normalizer = normalizer or IncidentNormalizer()
        self._lock = threading.RLock()
        self._store: Optional[RecordStore] = None
        self._lanes: Optional[LaneNetwork] = None
        self._filters = FilterEngine()
        self._attribute = Field.SEVERITY
        self._view: Optional[ExplorerView] = None

    # === Loading ===

    def load(self, accidents_path=None, lanes_path=None) -> ExplorerView:
        """
        Loads both datasets and runs the first filter pass

        Args:
        accidents_path: Defaults to config.ACCIDENTS_PATH
        lanes_path: Defaults to config.LANES_PATH

        Raises:
        LoadFailure: The explorer stays (or becomes) disabled until a later load succeeds
        """
        with self._lock:
            try:
                store, lanes = load_datasets(
                    accidents_path or config.ACCIDENTS_PATH,
                    lanes_path or config.LANES_PATH,
                    self.normalizer,
                )
            except LoadFailure:
                self._store, self._lanes, self._view = None, None, None
                raise
            return self.attach(store, lanes)

    def attach(self, store: RecordStore, lanes: LaneNetwork) -> ExplorerView:
        """Use datasets that were already loaded, e.g. shared across sessions."""
        with self._lock:
            self._store = store if isinstance(store, RecordStore) else RecordStore(store)
            self._lanes = lanes
            return self._recompute()

    @property
    def is_loaded(self) -> bool:
        return self._view is not None

    def _require_loaded(self) -> None:
        if self._view is None:
            raise DatasetNotLoadedError('Datasets are not loaded yet. Call load() first.')

    # === Recompute ===

    def _recompute(self) -> ExplorerView:
        state = self._filters.state
        features = self._filters.filtered_set(self._store)
        self._view = ExplorerView(
            features=features,
            colors=tuple(colors_for(features, self._attribute)),
            peak=densest_point(features, self.radius_km),
            report=tuple(report(features, self._attribute)),
            attribute=self._attribute,
            filter_state=state,
        )
        logger.debug(f'Filter pass: {len(features)}/{len(self._store)} visible, attribute={self._attribute.value}')
        return self._view

    # === Mutators ===

    def toggle_value(self, field, value: str) -> ExplorerView:
        with self._lock:
            self._require_loaded()
            self._filters.toggle_value(field, value)
            return self._recompute()

    def reset_filters(self) -> ExplorerView:
        with self._lock:
            self._require_loaded()
            self._filters.reset()
            return self._recompute()

    def set_selected_attribute(self, attribute) -> ExplorerView:
        with self._lock:
            self._require_loaded()
            self._attribute = as_field(attribute)
            return self._recompute()

    # === Queries ===

    @property
    def view(self) -> ExplorerView:
        self._require_loaded()
        return self._view

    @property
    def store(self) -> RecordStore:
        self._require_loaded()
        return self._store

    @property
    def lane_network(self) -> LaneNetwork:
        self._require_loaded()
        return self._lanes

    @property
    def filter_state(self) -> FilterState:
        self._require_loaded()
        return self._view.filter_state

    @property
    def selected_attribute(self) -> Field:
        return self._attribute

    def get_filtered_features(self) -> Tuple[IncidentRecord, ...]:
        return self.view.features

    def color_for(self, record: IncidentRecord, attribute=None) -> str:
        self._require_loaded()
        return color_for(record, attribute or self._attribute)

    def densest_point(self, features: Optional[Sequence[IncidentRecord]] = None) -> Optional[DensityPeak]:
        if features is None:
            return self.view.peak
        self._require_loaded()
        return densest_point(features, self.radius_km)

    def report(self, features: Optional[Sequence[IncidentRecord]] = None, attribute=None):
        if features is None and attribute is None:
            return list(self.view.report)
        self._require_loaded()
        return report(self.view.features if features is None else features, attribute or self._attribute)

    def available_values(self, field) -> Tuple[str, ...]:
        """Labels for a filter control: known labels first, then any others present in the data."""
        field = as_field(field)
        present = self.store.labels(field)
        known = [label for label in known_labels(field) if label in present]
        extra = [label for label in present if label not in known]
        return tuple(known + extra)
