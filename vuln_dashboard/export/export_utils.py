"""
Export Helpers
Shared preparation of record frames for file export.
"""

import json
from datetime import datetime
from typing import Optional

import pandas as pd

from ..config import DATE_FORMAT_DISPLAY, EXPORT_FILENAME_PREFIX, RECORD_COLUMNS


def build_export_filename(prefix: str = EXPORT_FILENAME_PREFIX, extension: str = 'csv',
                          export_date: Optional[datetime] = None) -> str:
    """Build a dated file name such as vulnerabilities_2024-05-01.csv."""
    export_date = export_date or datetime.now()
    return f"{prefix}_{export_date.strftime(DATE_FORMAT_DISPLAY)}.{extension.lstrip('.')}"


def prepare_export_frame(df: pd.DataFrame, serialize_risk_factors: bool = True) -> pd.DataFrame:
    """
    Prepare records for flat file formats.

    Columns are put in record order (extra columns last), missing values
    become None and risk factor mappings are written as JSON text.
    """
    ordered = [col for col in RECORD_COLUMNS if col in df.columns]
    ordered += [col for col in df.columns if col not in ordered]
    export_df = df[ordered].copy()

    if serialize_risk_factors and 'risk_factors' in export_df.columns:
        export_df['risk_factors'] = export_df['risk_factors'].apply(
            lambda value: json.dumps(value, sort_keys=True) if isinstance(value, dict) else value
        )

    # Replace NaN with None
    export_df = export_df.astype(object).where(pd.notnull(export_df), None)
    return export_df
