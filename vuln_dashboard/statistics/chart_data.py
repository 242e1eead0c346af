"""
Chart Data Module
Prepares the series behind the dashboard charts.
"""

from collections import Counter
from typing import Dict, List, Tuple

import numpy as np
import pandas as pd

from ..config import (
    AI_INVALID_NORISK_STATUS, AI_STATUS_PREFIX, CVSS_BINS, INVALID_NORISK_STATUS,
    SEVERITY_ORDER, UNKNOWN_KEY, VALID_STATUS
)


def get_severity_distribution(df: pd.DataFrame) -> Dict[str, int]:
    """
    Count records per severity, highest first.

    Severities outside the known levels are counted as 'unknown'.
    """
    counts = {severity: 0 for severity in SEVERITY_ORDER}
    if df.empty:
        return counts

    severities = df['severity'].where(df['severity'].isin(SEVERITY_ORDER), UNKNOWN_KEY)
    for severity, count in severities.value_counts().items():
        counts[severity] = int(count)
    return counts


def get_risk_factor_frequency(df: pd.DataFrame, top_n: int = 10) -> List[Tuple[str, int]]:
    """
    Count how often each risk factor name appears.

    Args:
        df: Record DataFrame
        top_n: Number of factors to return

    Returns:
        List of (factor, count), most frequent first
    """
    if df.empty:
        return []

    counter: Counter = Counter()
    for risk_factors in df['risk_factors']:
        if isinstance(risk_factors, dict):
            counter.update(risk_factors.keys())

    # most_common keeps first-seen order among equal counts
    return counter.most_common(top_n)


def get_trend_data(df: pd.DataFrame) -> Dict[str, int]:
    """
    Count published vulnerabilities per month.

    Returns:
        Dictionary of "YYYY-MM" -> count, in chronological order
    """
    if df.empty:
        return {}

    published = df['published_date'].dropna()
    if published.empty:
        return {}

    months = published.astype(str).str.slice(0, 7)
    return {month: int(count) for month, count in months.value_counts().sort_index().items()}


def get_cvss_distribution(df: pd.DataFrame) -> Dict[str, int]:
    """
    Bucket CVSS scores into 2-point bins.

    Bins are closed on the left: a score of 2.0 falls in '2-4', and
    anything from 8.0 up falls in '8-10'.
    """
    labels = [label for label, _ in CVSS_BINS]
    counts = {label: 0 for label in labels}
    if df.empty:
        return counts

    scores = pd.to_numeric(df['cvss'], errors='coerce').dropna()
    edges = [-np.inf] + [lower for _, lower in CVSS_BINS[1:]] + [np.inf]
    binned = pd.cut(scores, bins=edges, labels=labels, right=False)

    for label, count in binned.value_counts().items():
        counts[str(label)] = int(count)
    return counts


def classify_triage_status(kai_status) -> str:
    """Classify a triage status into the AI vs manual analysis buckets."""
    status = kai_status if isinstance(kai_status, str) and kai_status else UNKNOWN_KEY
    if status == AI_INVALID_NORISK_STATUS:
        return 'ai_invalid'
    if status.startswith(AI_STATUS_PREFIX):
        return 'ai_valid'
    if status == INVALID_NORISK_STATUS:
        return 'manual_invalid'
    if status == VALID_STATUS:
        return 'manual_valid'
    return 'unknown'


def get_ai_vs_manual_data(df: pd.DataFrame) -> Dict[str, int]:
    """Count records by who triaged them and with what outcome."""
    counts = {'ai_invalid': 0, 'ai_valid': 0, 'manual_invalid': 0, 'manual_valid': 0, 'unknown': 0}
    if df.empty:
        return counts

    for bucket, count in df['kai_status'].map(classify_triage_status).value_counts().items():
        counts[bucket] = int(count)
    return counts
