"""
Aggregation Functions Module
Functions for aggregating and summarizing vulnerability data.
"""

import logging
from typing import Any, Dict, List

import numpy as np
import pandas as pd

from ..config import FIXED_STATUS_MARKER, SEVERITY_ORDER, SEVERITY_WEIGHTS
from ..models import DashboardMetrics

logger = logging.getLogger(__name__)


def calculate_dashboard_metrics(df: pd.DataFrame) -> DashboardMetrics:
    """
    Calculate the summary metrics shown on the dashboard cards.

    Args:
        df: Record DataFrame (normally the filtered view)

    Returns:
        DashboardMetrics; all zeros for an empty frame
    """
    if df.empty:
        return DashboardMetrics()

    severity_counts = df['severity'].value_counts()
    scores = pd.to_numeric(df['cvss'], errors='coerce')
    average_cvss = scores.mean()

    with_fix = df['status'].fillna('').astype(str).str.contains(
        FIXED_STATUS_MARKER, case=False, regex=False
    )

    return DashboardMetrics(
        total_vulnerabilities=len(df),
        critical_count=int(severity_counts.get('critical', 0)),
        high_count=int(severity_counts.get('high', 0)),
        medium_count=int(severity_counts.get('medium', 0)),
        low_count=int(severity_counts.get('low', 0)),
        average_cvss=0.0 if pd.isna(average_cvss) else float(average_cvss),
        vulnerabilities_with_fix=int(with_fix.sum()),
        unique_packages=int(df['package_name'].nunique(dropna=False)),
        unique_cves=int(df['cve'].nunique(dropna=False))
    )


def aggregate_by_image(df: pd.DataFrame, attribute: str = 'image_name') -> pd.DataFrame:
    """
    Aggregate findings by an owning container attribute.

    Args:
        df: Record DataFrame
        attribute: Column to aggregate by ('group_name', 'repo_name', 'image_name')

    Returns:
        DataFrame with counts, severity breakdown and risk score per value,
        highest risk first
    """
    if df.empty:
        return pd.DataFrame()

    data = df.copy()
    data['_group_key'] = data[attribute].fillna('Unknown')
    data['_cvss'] = pd.to_numeric(data['cvss'], errors='coerce')

    aggregated = data.groupby('_group_key', sort=False).agg(
        finding_count=('id', 'size'),
        unique_cves=('cve', 'nunique'),
        unique_packages=('package_name', 'nunique'),
        avg_cvss=('_cvss', 'mean'),
        max_cvss=('_cvss', 'max')
    ).reset_index().rename(columns={'_group_key': attribute})

    # Add severity breakdown
    severity_pivot = data.groupby(['_group_key', 'severity']).size().unstack(fill_value=0)
    severity_pivot = severity_pivot.reset_index().rename(columns={'_group_key': attribute})
    aggregated = aggregated.merge(severity_pivot, on=attribute, how='left')

    for severity in SEVERITY_ORDER:
        if severity not in aggregated.columns:
            aggregated[severity] = 0

    aggregated['avg_cvss'] = aggregated['avg_cvss'].round(2)
    aggregated['risk_score'] = (
        aggregated['critical'] * SEVERITY_WEIGHTS['critical'] * 2 +
        aggregated['high'] * SEVERITY_WEIGHTS['high'] * 1.5 +
        aggregated['medium'] * SEVERITY_WEIGHTS['medium'] +
        aggregated['low'] * SEVERITY_WEIGHTS['low'] * 0.5
    ).round(1)

    return aggregated.sort_values('risk_score', ascending=False, kind='stable').reset_index(drop=True)


def get_top_n_summary(df: pd.DataFrame, n: int = 10) -> Dict[str, List[Dict[str, Any]]]:
    """
    Get top N items for various categories.

    Args:
        df: Record DataFrame
        n: Number of top items to return

    Returns:
        Dictionary with top packages, CVEs and most exposed images
    """
    if df.empty:
        return {}

    result = {}

    # Packages by number of findings
    top_packages = df.groupby('package_name', sort=False).agg(
        finding_count=('id', 'size'),
        unique_cves=('cve', 'nunique'),
        max_cvss=('cvss', 'max')
    ).reset_index()
    top_packages = top_packages.nlargest(n, 'finding_count', keep='first')
    result['top_packages'] = top_packages.to_dict('records')

    # CVEs by number of affected images
    top_cves = df.groupby('cve', sort=False).agg(
        occurrences=('id', 'size'),
        affected_images=('image_name', 'nunique'),
        severity=('severity', 'first'),
        cvss=('cvss', 'max')
    ).reset_index()
    top_cves = top_cves.nlargest(n, 'occurrences', keep='first')
    result['top_cves'] = top_cves.to_dict('records')

    # Images by weighted severity
    images = df.copy()
    images['severity_value'] = images['severity'].map(SEVERITY_WEIGHTS).fillna(0).astype(int)
    top_images = images.groupby(['repo_name', 'image_name', 'image_version'], sort=False).agg(
        finding_count=('id', 'size'),
        severity_score=('severity_value', 'sum'),
        max_cvss=('cvss', 'max')
    ).reset_index()
    top_images['risk_score'] = top_images['severity_score'] + (top_images['max_cvss'].fillna(0) * 5)
    top_images['risk_score'] = np.round(top_images['risk_score'].astype(float), 1)
    top_images = top_images.nlargest(n, 'risk_score', keep='first')
    result['highest_risk_images'] = top_images.to_dict('records')

    return result
