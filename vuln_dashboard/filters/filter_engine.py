"""
Filter Engine Module
Centralized filtering logic for vulnerability records.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Optional, Sequence, Tuple, Union

import pandas as pd

from ..config import (
    AI_INVALID_NORISK_STATUS, INVALID_NORISK_STATUS, SEARCH_COLUMNS, UNKNOWN_KEY
)
from .filter_spec import FilterSpec

logger = logging.getLogger(__name__)


class FilterOperator(Enum):
    """Filter comparison operators."""
    EQUALS = 'equals'
    NOT_EQUALS = 'not_equals'
    CONTAINS = 'contains'
    IN_LIST = 'in_list'
    GREATER_EQUAL = 'greater_equal'
    LESS_EQUAL = 'less_equal'
    BETWEEN = 'between'


@dataclass
class FilterCriteria:
    """A single filter criterion."""

    column: str
    operator: FilterOperator
    value: Any = None
    value2: Any = None  # For BETWEEN operator
    case_sensitive: bool = False
    fill_value: Optional[str] = None  # Substituted for missing values before comparing

    def apply(self, df: pd.DataFrame) -> pd.DataFrame:
        """Apply this filter to a DataFrame."""
        if self.column not in df.columns:
            return df

        return df[self.mask(df)]

    def mask(self, df: pd.DataFrame) -> pd.Series:
        """Get the boolean mask of rows that satisfy this criterion."""
        series = df[self.column]
        if self.fill_value is not None:
            series = series.fillna(self.fill_value)

        value = self.value
        # pandas 3 infers text columns as 'str' rather than 'object'
        is_text = pd.api.types.is_string_dtype(series) or pd.api.types.is_object_dtype(series)
        if not self.case_sensitive and is_text and _has_text(value):
            series = series.str.lower()
            if isinstance(value, str):
                value = value.lower()
            elif isinstance(value, (list, tuple, set)):
                value = [v.lower() if isinstance(v, str) else v for v in value]

        # Missing values never equal the criterion value
        if self.operator == FilterOperator.EQUALS:
            return (series == value) & series.notna()
        if self.operator == FilterOperator.NOT_EQUALS:
            return (series != value) | series.isna()
        if self.operator == FilterOperator.CONTAINS:
            return series.fillna('').astype(str).str.contains(str(value), case=self.case_sensitive, regex=False)
        if self.operator == FilterOperator.IN_LIST:
            return series.isin(list(value) if isinstance(value, (list, tuple, set)) else [value])
        if self.operator == FilterOperator.GREATER_EQUAL:
            if isinstance(value, str):
                return series.notna() & (series.fillna('').astype(str) >= value)
            return pd.to_numeric(series, errors='coerce') >= value
        if self.operator == FilterOperator.LESS_EQUAL:
            if isinstance(value, str):
                return series.notna() & (series.fillna('').astype(str) <= value)
            return pd.to_numeric(series, errors='coerce') <= value
        if self.operator == FilterOperator.BETWEEN:
            numeric = pd.to_numeric(series, errors='coerce')
            return (numeric >= value) & (numeric <= self.value2)

        raise ValueError(f"Unsupported filter operator: {self.operator}")


def _has_text(value: Any) -> bool:
    if isinstance(value, str):
        return True
    return isinstance(value, (list, tuple, set)) and any(isinstance(v, str) for v in value)


FilterStage = Union[FilterCriteria, Tuple[str, Callable[[pd.DataFrame], pd.DataFrame]]]


class FilterEngine:
    """
    Ordered chain of filter stages.

    Stages run in the order they were added, each one filtering the output
    of the previous one, so the cheapest and most selective stages should be
    added first. Row order is never changed.
    """

    def __init__(self):
        self.stages: List[FilterStage] = []

    def clear(self) -> None:
        """Clear all filter stages."""
        self.stages = []

    def add_criterion(self, criterion: FilterCriteria) -> 'FilterEngine':
        """Add a filter criterion."""
        self.stages.append(criterion)
        return self

    def add_custom_filter(self, name: str, filter_func: Callable[[pd.DataFrame], pd.DataFrame]) -> 'FilterEngine':
        """Add a custom filter function."""
        self.stages.append((name, filter_func))
        return self

    def apply(self, df: pd.DataFrame) -> pd.DataFrame:
        """Apply all stages to a DataFrame."""
        result = df
        for stage in self.stages:
            if isinstance(stage, FilterCriteria):
                result = stage.apply(result)
            else:
                _, filter_func = stage
                result = filter_func(result)
        return result

    # Convenience methods for the dashboard filters

    def filter_exclude_kai_status(self, status: str) -> 'FilterEngine':
        """Drop records whose triage status is exactly the given value."""
        return self.add_criterion(FilterCriteria(
            column='kai_status',
            operator=FilterOperator.NOT_EQUALS,
            value=status,
            case_sensitive=True
        ))

    def filter_by_kai_status(self, statuses: Sequence[str]) -> 'FilterEngine':
        """Keep records whose triage status is listed; missing counts as 'unknown'."""
        return self.add_criterion(FilterCriteria(
            column='kai_status',
            operator=FilterOperator.IN_LIST,
            value=list(statuses),
            case_sensitive=True,
            fill_value=UNKNOWN_KEY
        ))

    def filter_by_severity(self, severities: Sequence[str]) -> 'FilterEngine':
        """Filter by severity level(s)."""
        return self.add_criterion(FilterCriteria(
            column='severity',
            operator=FilterOperator.IN_LIST,
            value=list(severities),
            case_sensitive=True
        ))

    def filter_by_cvss_range(self, min_score: float, max_score: float) -> 'FilterEngine':
        """Filter by inclusive CVSS score range."""
        return self.add_criterion(FilterCriteria(
            column='cvss',
            operator=FilterOperator.BETWEEN,
            value=min_score,
            value2=max_score
        ))

    def filter_by_package(self, package_name: str) -> 'FilterEngine':
        """Keep packages whose name contains the text, ignoring case."""
        return self.add_criterion(FilterCriteria(
            column='package_name',
            operator=FilterOperator.CONTAINS,
            value=package_name
        ))

    def filter_by_cve(self, cve: str) -> 'FilterEngine':
        """Keep CVE ids containing the text, ignoring case."""
        return self.add_criterion(FilterCriteria(
            column='cve',
            operator=FilterOperator.CONTAINS,
            value=cve
        ))

    def filter_published_after(self, start: str) -> 'FilterEngine':
        """Keep records published at or after a sortable timestamp."""
        return self.add_criterion(FilterCriteria(
            column='published_date',
            operator=FilterOperator.GREATER_EQUAL,
            value=start,
            case_sensitive=True
        ))

    def filter_published_before(self, end: str) -> 'FilterEngine':
        """Keep records published at or before a sortable timestamp."""
        return self.add_criterion(FilterCriteria(
            column='published_date',
            operator=FilterOperator.LESS_EQUAL,
            value=end,
            case_sensitive=True
        ))

    def filter_by_search(self, query: str, columns: Sequence[str] = SEARCH_COLUMNS) -> 'FilterEngine':
        """Keep records where any of the columns contains the query, ignoring case."""
        def search_filter(df: pd.DataFrame) -> pd.DataFrame:
            mask = pd.Series(False, index=df.index)
            for column in columns:
                if column in df.columns:
                    mask |= df[column].fillna('').astype(str).str.contains(query, case=False, regex=False)
            return df[mask]

        return self.add_custom_filter('search', search_filter)


def build_filter_engine(spec: FilterSpec) -> FilterEngine:
    """
    Build the filter chain for a filter specification.

    Triage exclusions run first, the free-text search last.
    """
    engine = FilterEngine()

    if spec.exclude_invalid_norisk:
        engine.filter_exclude_kai_status(INVALID_NORISK_STATUS)

    if spec.exclude_ai_invalid_norisk:
        engine.filter_exclude_kai_status(AI_INVALID_NORISK_STATUS)

    if spec.kai_status:
        engine.filter_by_kai_status(spec.kai_status)

    if spec.severity:
        engine.filter_by_severity(spec.severity)

    engine.filter_by_cvss_range(spec.min_cvss, spec.max_cvss)

    if spec.package_name:
        engine.filter_by_package(spec.package_name)

    if spec.cve:
        engine.filter_by_cve(spec.cve)

    if spec.date_start:
        engine.filter_published_after(spec.date_start)

    if spec.date_end:
        engine.filter_published_before(spec.date_end)

    if spec.search_query:
        engine.filter_by_search(spec.search_query)

    return engine


def apply_filters(df: pd.DataFrame, spec: Optional[FilterSpec] = None) -> pd.DataFrame:
    """
    Apply a filter specification to vulnerability records.

    Args:
        df: Normalized record DataFrame
        spec: Filter options; None applies the defaults (CVSS 0-10 only)

    Returns:
        Filtered DataFrame, rows in their input order
    """
    spec = spec or FilterSpec()
    filtered = build_filter_engine(spec).apply(df)
    logger.debug(f"Filters kept {len(filtered)} of {len(df)} records")
    return filtered
