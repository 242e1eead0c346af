"""
Excel Export Module
Functions for exporting vulnerability records to Excel workbooks with formatting.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

import pandas as pd

from ..config import EXCEL_MAX_COLUMN_WIDTH
from ..models import DashboardMetrics
from ..statistics.aggregations import calculate_dashboard_metrics
from ..statistics.chart_data import get_severity_distribution
from .export_utils import prepare_export_frame

logger = logging.getLogger(__name__)


def export_to_excel(df: pd.DataFrame, filepath: str,
                    metrics: Optional[DashboardMetrics] = None,
                    include_summary: bool = True) -> bool:
    """
    Export vulnerability records to an Excel workbook.

    Args:
        df: Record DataFrame
        filepath: Output Excel file path
        metrics: Metrics for the summary sheet; computed from df when omitted
        include_summary: Whether to include Summary and Severity sheets

    Returns:
        True if successful
    """
    if df.empty:
        logger.warning("No data to export")
        return False

    try:
        with pd.ExcelWriter(filepath, engine='openpyxl') as writer:
            # Summary sheet
            if include_summary:
                summary_data = create_summary_data(df, metrics)
                summary_df = pd.DataFrame(list(summary_data.items()), columns=['Metric', 'Value'])
                summary_df.to_excel(writer, sheet_name='Summary', index=False)

                severity_df = pd.DataFrame(
                    list(get_severity_distribution(df).items()),
                    columns=['Severity', 'Count']
                )
                severity_df.to_excel(writer, sheet_name='Severity_Summary', index=False)

            prepare_export_frame(df).to_excel(writer, sheet_name='Vulnerabilities', index=False)

            for sheet_name in writer.sheets:
                worksheet = writer.sheets[sheet_name]
                worksheet.freeze_panes = 'A2'
                auto_fit_columns(worksheet)

    except OSError as e:
        logger.error(f"Error exporting to Excel: {e}")
        return False

    logger.info(f"Excel workbook exported to: {filepath}")
    return True


def auto_fit_columns(worksheet) -> None:
    """
    Auto-fit column widths in an openpyxl worksheet.

    Args:
        worksheet: openpyxl worksheet object
    """
    for column in worksheet.columns:
        max_length = 0
        column_letter = column[0].column_letter

        for cell in column:
            if cell.value is not None:
                max_length = max(max_length, len(str(cell.value)))

        adjusted_width = min(max_length + 2, EXCEL_MAX_COLUMN_WIDTH)
        worksheet.column_dimensions[column_letter].width = adjusted_width


def create_summary_data(df: pd.DataFrame, metrics: Optional[DashboardMetrics] = None) -> Dict[str, Any]:
    """
    Create summary data for the summary sheet.

    Args:
        df: Record DataFrame
        metrics: Precomputed metrics for df, if available

    Returns:
        Dictionary of metric label -> value
    """
    metrics = metrics or calculate_dashboard_metrics(df)

    return {
        'Report Generated': datetime.now().strftime('%Y-%m-%d %H:%M:%S'),
        'Total Vulnerabilities': metrics.total_vulnerabilities,
        'Critical': metrics.critical_count,
        'High': metrics.high_count,
        'Medium': metrics.medium_count,
        'Low': metrics.low_count,
        'Average CVSS': round(metrics.average_cvss, 2),
        'With Fix': metrics.vulnerabilities_with_fix,
        'Unique Packages': metrics.unique_packages,
        'Unique CVEs': metrics.unique_cves,
        'Groups': df['group_name'].nunique(),
        'Repos': df['repo_name'].nunique(),
        'Images': df[['image_name', 'image_version']].drop_duplicates().shape[0]
    }
