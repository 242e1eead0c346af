"""
Core modules for loading, normalizing, indexing and sorting vulnerability data.
"""

from .data_processing import (
    parse_date,
    to_sortable_timestamp,
    process_vulnerability_data,
    get_unique_values,
    get_search_suggestions,
    create_severity_summary,
    create_cve_summary
)

from .indexing import (
    IndexSet,
    build_index_map
)

from .sorting import (
    sort_vulnerabilities,
    get_sort_key,
    SORT_ASCENDING,
    SORT_DESCENDING
)

from .data_loader import (
    DataLoader,
    DataLoadError,
    LoadState,
    load_vulnerability_data
)

__all__ = [
    'parse_date',
    'to_sortable_timestamp',
    'process_vulnerability_data',
    'get_unique_values',
    'get_search_suggestions',
    'create_severity_summary',
    'create_cve_summary',
    'IndexSet',
    'build_index_map',
    'sort_vulnerabilities',
    'get_sort_key',
    'SORT_ASCENDING',
    'SORT_DESCENDING',
    'DataLoader',
    'DataLoadError',
    'LoadState',
    'load_vulnerability_data'
]
