"""
Filter modules for vulnerability record filtering.
"""

from .filter_spec import FilterSpec

from .filter_engine import (
    FilterEngine,
    FilterCriteria,
    FilterOperator,
    build_filter_engine,
    apply_filters
)

__all__ = [
    'FilterSpec',
    'FilterEngine',
    'FilterCriteria',
    'FilterOperator',
    'build_filter_engine',
    'apply_filters'
]
