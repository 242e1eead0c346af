"""
Comparison Module
Side-by-side comparison of selected vulnerability records.
"""

from typing import List, Sequence, Tuple

import pandas as pd

from ..config import COMPARISON_MAX_ITEMS

COMPARISON_FIELDS: List[Tuple[str, str]] = [
    ('CVE', 'cve'),
    ('Severity', 'severity'),
    ('CVSS', 'cvss'),
    ('Package Name', 'package_name'),
    ('Package Version', 'package_version'),
    ('Status', 'status'),
    ('Kai Status', 'kai_status'),
]

MISSING_VALUE = 'N/A'


def select_for_comparison(df: pd.DataFrame, ids: Sequence[str],
                          max_items: int = COMPARISON_MAX_ITEMS) -> pd.DataFrame:
    """
    Get the selected records that are present in df.

    Records keep the order of df, and at most max_items of the requested
    ids are considered.
    """
    if df.empty or not ids:
        return df.iloc[0:0]

    wanted = list(ids)[:max_items]
    return df[df['id'].isin(wanted)]


def create_comparison_table(df: pd.DataFrame, ids: Sequence[str],
                            max_items: int = COMPARISON_MAX_ITEMS) -> pd.DataFrame:
    """
    Build a field-by-record comparison table.

    Args:
        df: Record DataFrame the selection is drawn from
        ids: Record ids to compare; ids not in df are skipped
        max_items: Maximum number of records compared

    Returns:
        DataFrame indexed by field label with one column per record,
        headed by its CVE. Empty values are shown as 'N/A'.
    """
    selected = select_for_comparison(df, ids, max_items)
    labels = [label for label, _ in COMPARISON_FIELDS]
    if selected.empty:
        return pd.DataFrame(index=pd.Index(labels, name='Field'))

    columns = {}
    for _, record in selected.iterrows():
        values = []
        for _, column in COMPARISON_FIELDS:
            value = record.get(column)
            values.append(MISSING_VALUE if _is_empty(value) else str(value))
        header = record['cve']
        # CVE ids repeat across images, so disambiguate the column header
        if header in columns:
            header = f"{header} ({record['id']})"
        columns[header] = values

    table = pd.DataFrame(columns, index=labels)
    table.index.name = 'Field'
    return table


def _is_empty(value) -> bool:
    if value is None or value == '':
        return True
    return isinstance(value, float) and pd.isna(value)
