"""
Sorting Module
Orders vulnerability records by a chosen field and direction.
"""

import logging
from typing import Callable, Dict

import pandas as pd

from ..config import SEVERITY_WEIGHTS

logger = logging.getLogger(__name__)

SORT_ASCENDING = 'asc'
SORT_DESCENDING = 'desc'

# Field names used by the web dashboard
SORT_FIELD_ALIASES = {
    'packageName': 'package_name',
    'packageVersion': 'package_version',
    'kaiStatus': 'kai_status',
    'publishedDate': 'published',
    'fixDate': 'fix_date',
    'groupName': 'group_name',
    'repoName': 'repo_name',
    'imageName': 'image_name',
    'imageVersion': 'image_version',
}


def _text_key(series: pd.Series) -> pd.Series:
    return series.map(lambda value: '' if _is_absent(value) else str(value))


def _is_absent(value) -> bool:
    if value is None:
        return True
    return isinstance(value, float) and pd.isna(value)


SORT_KEYS: Dict[str, Callable[[pd.DataFrame], pd.Series]] = {
    'cvss': lambda df: pd.to_numeric(df['cvss'], errors='coerce'),
    'severity': lambda df: df['severity'].map(SEVERITY_WEIGHTS).fillna(0),
    'cve': lambda df: _text_key(df['cve']),
    'package_name': lambda df: _text_key(df['package_name']),
    # Sortable timestamps compare correctly as text; absent dates sort first
    'published': lambda df: _text_key(df['published_date']),
}


def get_sort_key(df: pd.DataFrame, field: str) -> pd.Series:
    """
    Build the comparison key for a sort field.

    Known fields use their typed key; any other column compares numerically
    when numeric and on its text projection otherwise.

    Raises:
        KeyError: If the field is neither known nor a column of df
    """
    field = SORT_FIELD_ALIASES.get(field, field)

    if field in SORT_KEYS:
        return SORT_KEYS[field](df)

    if field not in df.columns:
        raise KeyError(field)

    series = df[field]
    if pd.api.types.is_numeric_dtype(series) and not pd.api.types.is_bool_dtype(series):
        return series
    return _text_key(series)


def sort_vulnerabilities(df: pd.DataFrame, field: str, direction: str = SORT_DESCENDING) -> pd.DataFrame:
    """
    Sort vulnerability records without modifying the input.

    The sort is stable in both directions: records with equal keys keep
    their relative input order.

    Args:
        df: Record DataFrame
        field: Field to sort by ('cvss', 'severity', 'cve', 'package_name',
            'published' or any other column)
        direction: 'asc' or 'desc'

    Returns:
        New sorted DataFrame
    """
    if direction not in (SORT_ASCENDING, SORT_DESCENDING):
        raise ValueError(f"Sort direction must be '{SORT_ASCENDING}' or '{SORT_DESCENDING}', got {direction!r}")

    if df.empty:
        return df.copy()

    try:
        sort_key = get_sort_key(df, field)
    except KeyError:
        logger.warning(f"Unknown sort field '{field}', keeping input order")
        return df.copy()

    sorted_df = df.assign(_sort_key=sort_key.values).sort_values(
        '_sort_key',
        ascending=direction == SORT_ASCENDING,
        kind='stable'
    )
    return sorted_df.drop(columns=['_sort_key'])
