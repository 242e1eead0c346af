"""
JSON Export Module
Functions for exporting vulnerability records to JSON format.
"""

import json
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import pandas as pd

from ..config import VERSION
from ..models import DashboardMetrics
from .export_utils import prepare_export_frame

logger = logging.getLogger(__name__)


class DateTimeEncoder(json.JSONEncoder):
    """Custom JSON encoder for datetime and numpy scalar values."""

    def default(self, obj):
        if isinstance(obj, (datetime, pd.Timestamp)):
            return obj.isoformat()
        if hasattr(obj, 'item'):
            return obj.item()
        return super().default(obj)


def df_to_records(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """Convert a record frame to plain dictionaries, None for missing values."""
    if df.empty:
        return []
    return prepare_export_frame(df, serialize_risk_factors=False).to_dict('records')


def export_to_json(df: pd.DataFrame, filepath: str,
                   metrics: Optional[DashboardMetrics] = None,
                   include_metadata: bool = False) -> bool:
    """
    Export vulnerability records to a JSON file.

    Without metadata the file holds a plain array of records; with metadata
    it holds an object with 'metadata', 'summary' and 'vulnerabilities'.

    Args:
        df: Record DataFrame
        filepath: Output JSON file path
        metrics: Optional metrics for the summary section
        include_metadata: Whether to wrap the records with export metadata

    Returns:
        True if successful
    """
    if df.empty:
        logger.warning("No data to export")
        return False

    records = df_to_records(df)

    if include_metadata:
        export_data: Any = {
            'metadata': {
                'export_timestamp': datetime.now().isoformat(),
                'version': VERSION,
                'record_count': len(records)
            },
            'summary': metrics.to_dict() if metrics else {},
            'vulnerabilities': records
        }
    else:
        export_data = records

    try:
        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(export_data, f, indent=2, cls=DateTimeEncoder)
    except OSError as e:
        logger.error(f"Error exporting to JSON: {e}")
        return False

    logger.info(f"JSON exported to: {filepath}")
    return True


def load_from_json(filepath: str) -> pd.DataFrame:
    """
    Load records previously written by export_to_json.

    Args:
        filepath: JSON file path

    Returns:
        Record DataFrame
    """
    with open(filepath, 'r', encoding='utf-8') as f:
        data = json.load(f)

    if isinstance(data, dict):
        data = data.get('vulnerabilities', [])

    return pd.DataFrame(data)
