"""
CSV Export Module
Functions for exporting vulnerability records to delimited text.
"""

import logging

import pandas as pd

from ..config import CSV_EXPORT_COLUMNS
from .export_utils import prepare_export_frame

logger = logging.getLogger(__name__)


def export_to_csv(df: pd.DataFrame, filepath: str) -> bool:
    """
    Export vulnerability records to a CSV file.

    Every record field is written; fields are quoted where needed, so
    commas, quotes and line breaks in descriptions survive.

    Args:
        df: Record DataFrame
        filepath: Output CSV file path

    Returns:
        True if successful, False when there is nothing to export or the
        file cannot be written
    """
    if df.empty:
        logger.warning("No data to export")
        return False

    export_df = prepare_export_frame(df)
    columns = [(header, column) for header, column in CSV_EXPORT_COLUMNS if column in export_df.columns]
    export_df = export_df[[column for _, column in columns]]
    export_df.columns = [header for header, _ in columns]

    try:
        export_df.to_csv(filepath, index=False, encoding='utf-8')
    except OSError as e:
        logger.error(f"Error exporting to CSV: {e}")
        return False

    logger.info(f"Exported {len(export_df)} vulnerabilities to {filepath}")
    return True
