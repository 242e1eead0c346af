"""
Data Processing and Normalization Module
Flattens the group/repo/image vulnerability inventory into a record DataFrame
and provides summary transformations over it.
"""

import logging
from datetime import date, datetime
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

import pandas as pd

from ..config import (
    DATE_FORMAT_FULL, ID_PREFIX, RAW_FIELD_MAP, RECORD_COLUMNS, SENTINEL_DATE,
    SEVERITY_ORDER, SEVERITY_WEIGHTS
)

logger = logging.getLogger(__name__)


def parse_date(date_string: Optional[str]) -> Optional[str]:
    """
    Parse a "YYYY-MM-DD HH:MM:SS" date string into sortable ISO text.

    Empty values and the 1970-01-01 00:00:00 placeholder are treated as
    absent, as is anything that is not a valid calendar date/time.

    Args:
        date_string: Raw date string from the inventory document

    Returns:
        "YYYY-MM-DDTHH:MM:SS" string or None
    """
    if not date_string or date_string == SENTINEL_DATE:
        return None

    try:
        parsed = datetime.strptime(date_string, DATE_FORMAT_FULL)
    except (ValueError, TypeError):
        logger.debug(f"Ignoring unparseable date: {date_string!r}")
        return None

    return parsed.isoformat(timespec='seconds')


def to_sortable_timestamp(value: Any, end_of_day: bool = False) -> Optional[str]:
    """
    Convert a date bound to the sortable text used by published_date.

    Accepts datetime, date, pandas Timestamp or a string in either the
    inventory format or any ISO 8601 form. Timezone-aware values are
    converted to UTC. Values already in sortable form come back unchanged.

    Args:
        value: The bound to convert
        end_of_day: Make a bound without a time of day ("2024-01-15" or a
            date) cover the whole day, i.e. end at 23:59:59

    Raises:
        ValueError: If a string cannot be interpreted as a date
    """
    timestamp = _sortable_timestamp(value)
    if timestamp is not None and end_of_day and _is_date_only(value):
        return f"{timestamp[:10]}T23:59:59"
    return timestamp


def _is_date_only(value: Any) -> bool:
    # pd.Timestamp is a datetime, datetime is a date
    if isinstance(value, datetime):
        return False
    if isinstance(value, date):
        return True
    return isinstance(value, str) and len(value.strip()) == 10


def _sortable_timestamp(value: Any) -> Optional[str]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None

    if isinstance(value, str):
        parsed = parse_date(value)
        if parsed is not None:
            return parsed
        try:
            value = pd.Timestamp(value)
        except (ValueError, TypeError) as e:
            raise ValueError(f"Invalid date bound: {value!r}") from e
        if pd.isna(value):
            raise ValueError("Invalid date bound: not a time")

    if isinstance(value, pd.Timestamp):
        if value.tzinfo is not None:
            value = value.tz_convert('UTC').tz_localize(None)
        value = value.to_pydatetime()
    elif isinstance(value, datetime):
        if value.tzinfo is not None:
            value = pd.Timestamp(value).tz_convert('UTC').tz_localize(None).to_pydatetime()
    elif isinstance(value, date):
        value = datetime(value.year, value.month, value.day)
    else:
        raise ValueError(f"Unsupported date bound type: {type(value).__name__}")

    return value.isoformat(timespec='seconds')


def _iter_children(mapping: Mapping[str, Any], sort_keys: bool) -> Iterator[Tuple[str, Dict[str, Any]]]:
    keys = sorted(mapping) if sort_keys else list(mapping)
    for key in keys:
        yield key, mapping[key]


def _to_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return float('nan')


def _normalize_entry(vulnerability: Dict[str, Any]) -> Dict[str, Any]:
    record = {column: vulnerability.get(raw_key, '') for raw_key, column in RAW_FIELD_MAP.items()}
    record['cvss'] = _to_float(vulnerability.get('cvss'))
    record['kai_status'] = vulnerability.get('kaiStatus') or None
    record['risk_factors'] = dict(vulnerability.get('riskFactors') or {})
    return record


def process_vulnerability_data(data: Mapping[str, Any], sort_keys: bool = False) -> pd.DataFrame:
    """
    Flatten a vulnerability inventory into one row per vulnerability.

    Groups, repos, images and vulnerabilities are visited in document order
    (or sorted key order when sort_keys is set), and each row receives a
    synthetic id "vuln-<n>" from a zero-based counter in that order.

    Args:
        data: Parsed document with a top-level "groups" mapping
        sort_keys: Visit group/repo/image keys in sorted order

    Returns:
        DataFrame with RECORD_COLUMNS, one row per raw vulnerability entry
    """
    records: List[Dict[str, Any]] = []
    id_counter = 0

    for group_key, group in _iter_children(data.get('groups') or {}, sort_keys):
        group_name = group.get('name', group_key)
        for repo_key, repo in _iter_children(group.get('repos') or {}, sort_keys):
            repo_name = repo.get('name', repo_key)
            for image_key, image in _iter_children(repo.get('images') or {}, sort_keys):
                for vulnerability in image.get('vulnerabilities') or []:
                    record = _normalize_entry(vulnerability)
                    record['id'] = f"{ID_PREFIX}{id_counter}"
                    record['group_name'] = group_name
                    record['repo_name'] = repo_name
                    record['image_name'] = image.get('name', image_key)
                    record['image_version'] = image.get('version', '')
                    record['published_date'] = parse_date(record['published'])
                    record['fix_date_parsed'] = parse_date(record['fix_date'])
                    records.append(record)
                    id_counter += 1

    df = pd.DataFrame(records, columns=RECORD_COLUMNS)
    logger.info(f"Normalized {len(df)} vulnerabilities")
    return df


def get_unique_values(df: pd.DataFrame, field: str) -> List[str]:
    """
    Get the sorted distinct values of a column, for filter option lists.

    None, NaN and empty strings are skipped; values are returned as text.
    """
    if df.empty or field not in df.columns:
        return []

    values = set()
    for value in df[field]:
        if value is None or value == '':
            continue
        if isinstance(value, float) and pd.isna(value):
            continue
        values.add(str(value))

    return sorted(values)


def get_search_suggestions(df: pd.DataFrame, query: str, max_results: int = 10) -> List[str]:
    """
    Suggest CVE ids and package names matching a partial query.

    CVE matches come first, then package names. Queries shorter than two
    characters produce no suggestions.
    """
    if not query or len(query) < 2 or df.empty:
        return []

    query_lower = query.lower()
    suggestions: List[str] = []

    for column in ('cve', 'package_name'):
        for value in df[column].fillna('').astype(str):
            if query_lower in value.lower() and value not in suggestions:
                suggestions.append(value)
                if len(suggestions) >= max_results:
                    return suggestions

    return suggestions


def create_severity_summary(df: pd.DataFrame, group_by: str = 'repo_name') -> pd.DataFrame:
    """
    Create severity summary grouped by specified column.

    Args:
        df: Normalized record DataFrame
        group_by: Column to group by (default: 'repo_name')

    Returns:
        DataFrame with severity counts by group, plus a Total row and column
    """
    if df.empty:
        return pd.DataFrame()

    severity_summary = pd.crosstab(
        df[group_by],
        df['severity'],
        margins=True,
        margins_name='Total'
    )

    # Reorder columns by severity
    available_columns = [col for col in SEVERITY_ORDER + ['Total'] if col in severity_summary.columns]

    if available_columns:
        severity_summary = severity_summary[available_columns]

    return severity_summary


def create_cve_summary(df: pd.DataFrame) -> pd.DataFrame:
    """
    Create summary of CVEs with the images and packages they affect.

    Args:
        df: Normalized record DataFrame

    Returns:
        DataFrame with one row per CVE, most severe first
    """
    if df.empty:
        return pd.DataFrame()

    cve_df = df.copy()
    cve_df['severity_value'] = cve_df['severity'].map(SEVERITY_WEIGHTS).fillna(0).astype(int)
    cve_df['image_ref'] = cve_df['image_name'].astype(str) + ':' + cve_df['image_version'].astype(str)

    cve_summary = cve_df.groupby('cve', sort=False).agg({
        'severity_value': 'max',
        'cvss': 'max',
        'image_ref': lambda x: sorted(set(x)),
        'package_name': lambda x: sorted(set(x)),
    }).reset_index()

    cve_summary['image_count'] = cve_summary['image_ref'].apply(len)
    cve_summary['affected_images'] = cve_summary['image_ref'].apply(lambda x: '\n'.join(x))
    cve_summary['packages'] = cve_summary['package_name'].apply(lambda x: ', '.join(x))
    cve_summary['occurrences'] = cve_summary['cve'].map(cve_df['cve'].value_counts())
    cve_summary = cve_summary.drop(columns=['image_ref', 'package_name'])

    return cve_summary.sort_values(['severity_value', 'cvss'], ascending=False, kind='stable')
