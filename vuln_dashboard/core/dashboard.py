"""
Dashboard Session Module
Holds the loaded inventory and recomputes the filtered view on demand.
"""

import logging
import threading
from typing import Any, Callable, Dict, List, Optional, Tuple

import pandas as pd

from ..config import COMPARISON_MAX_ITEMS, RECORD_COLUMNS
from ..filters.filter_engine import apply_filters
from ..filters.filter_spec import FilterSpec
from ..models import DashboardMetrics
from ..statistics.aggregations import calculate_dashboard_metrics
from ..statistics.comparison import create_comparison_table
from .data_loader import DataLoader, DataLoadError, LoadState
from .data_processing import process_vulnerability_data
from .indexing import IndexSet, build_index_map
from .sorting import SORT_ASCENDING, SORT_DESCENDING, sort_vulnerabilities

logger = logging.getLogger(__name__)


class DashboardSession:
    """
    Pipeline state for one dashboard session.

    The raw document and the normalized records are replaced only by a new
    load. Every change of filters or sort order calls refresh(), which
    recomputes the filtered view and its metrics from the full record set.
    """

    def __init__(self, filter_spec: Optional[FilterSpec] = None,
                 sort_field: str = 'cvss', sort_direction: str = SORT_DESCENDING,
                 loader: Optional[DataLoader] = None):
        self.loader = loader or DataLoader()
        self.filter_spec = filter_spec or FilterSpec()
        self.sort_field = sort_field
        self.sort_direction = sort_direction

        self.raw_data: Optional[Dict[str, Any]] = None
        self.records = pd.DataFrame(columns=RECORD_COLUMNS)
        self.index: Optional[IndexSet] = None
        self.filtered = self.records
        self.metrics = DashboardMetrics()
        self.selected_ids: List[str] = []
        self._lock = threading.RLock()

    @property
    def load_state(self) -> LoadState:
        return self.loader.state

    @property
    def error(self) -> Optional[str]:
        return self.loader.error

    @property
    def comparison_mode(self) -> bool:
        return bool(self.selected_ids)

    # Loading

    def load(self, source: str) -> pd.DataFrame:
        """
        Load and process a vulnerability document.

        On failure the previous data is cleared and DataLoadError is raised.
        """
        try:
            data = self.loader.load(source)
        except DataLoadError:
            self._set_data(None)
            raise
        return self._set_data(data)

    def load_async(self, source: str, callback: Optional[Callable[['DashboardSession'], None]] = None
                   ) -> threading.Thread:
        """
        Load on a background thread; callback receives this session when done.

        The new state is swapped in under the session lock. Other threads
        should read the filtered records and metrics together through view(),
        or join the returned thread before reading the attributes directly.
        """
        def _on_loaded(data, error):
            self._set_data(data)
            if callback:
                callback(self)

        return self.loader.load_async(source, _on_loaded)

    def set_data(self, data: Dict[str, Any]) -> pd.DataFrame:
        """Use an already parsed document."""
        return self._set_data(data)

    def _set_data(self, data: Optional[Dict[str, Any]]) -> pd.DataFrame:
        if data is None:
            records = pd.DataFrame(columns=RECORD_COLUMNS)
        else:
            records = process_vulnerability_data(data)
        index = build_index_map(records)

        with self._lock:
            self.raw_data = data
            self.records = records
            self.index = index
            self.selected_ids = []
            self.refresh()
        return records

    def view(self) -> Tuple[pd.DataFrame, DashboardMetrics]:
        """Get the filtered records and their metrics as one consistent pair."""
        with self._lock:
            return self.filtered, self.metrics

    # Filters and sorting

    def refresh(self) -> pd.DataFrame:
        """Recompute the filtered, sorted view and its metrics."""
        with self._lock:
            filtered = apply_filters(self.records, self.filter_spec)
            filtered = sort_vulnerabilities(filtered, self.sort_field, self.sort_direction)
            self.filtered = filtered
            self.metrics = calculate_dashboard_metrics(filtered)
        logger.debug(f"Refreshed view: {len(filtered)} of {len(self.records)} records")
        return filtered

    def set_filters(self, spec: FilterSpec) -> pd.DataFrame:
        self.filter_spec = spec
        return self.refresh()

    def update_filters(self, **changes: Any) -> pd.DataFrame:
        """Change individual filter options, e.g. update_filters(severity=['critical'])."""
        data = self.filter_spec.to_dict()
        unknown = set(changes) - set(data)
        if unknown:
            raise TypeError(f"Unknown filter options: {', '.join(sorted(unknown))}")
        data.update(changes)
        return self.set_filters(FilterSpec.from_dict(data))

    def reset_filters(self) -> pd.DataFrame:
        return self.set_filters(FilterSpec())

    def apply_analysis_filter(self) -> pd.DataFrame:
        """Switch to the manual analysis view (hide 'invalid - norisk')."""
        return self.set_filters(self.filter_spec.copy().apply_analysis_preset())

    def apply_ai_analysis_filter(self) -> pd.DataFrame:
        """Switch to the AI analysis view (hide 'ai-invalid-norisk')."""
        return self.set_filters(self.filter_spec.copy().apply_ai_analysis_preset())

    def set_sort(self, field: str, direction: str = SORT_DESCENDING) -> pd.DataFrame:
        if direction not in (SORT_ASCENDING, SORT_DESCENDING):
            raise ValueError(f"Sort direction must be '{SORT_ASCENDING}' or '{SORT_DESCENDING}', got {direction!r}")
        self.sort_field = field
        self.sort_direction = direction
        return self.refresh()

    # Comparison selection

    def toggle_selection(self, record_id: str) -> bool:
        """
        Select or deselect a record for comparison.

        Returns:
            True if the record is now selected
        """
        with self._lock:
            if record_id in self.selected_ids:
                self.selected_ids.remove(record_id)
                return False
            self.selected_ids.append(record_id)
            return True

    def clear_selection(self) -> None:
        with self._lock:
            self.selected_ids = []

    def comparison_table(self, max_items: int = COMPARISON_MAX_ITEMS) -> pd.DataFrame:
        """Compare the selected records that survive the current filters."""
        with self._lock:
            return create_comparison_table(self.filtered, list(self.selected_ids), max_items)

    def summary(self) -> Dict[str, Any]:
        """Counts shown in the filter status banner."""
        with self._lock:
            return {
                'state': self.load_state.value,
                'total_records': len(self.records),
                'filtered_records': len(self.filtered),
                'active_filters': self.filter_spec.active_filter_count(),
                'metrics': self.metrics.to_dict()
            }
