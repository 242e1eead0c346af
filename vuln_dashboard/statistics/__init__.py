"""
Statistics modules for vulnerability metrics, chart data and comparisons.
"""

from .aggregations import (
    calculate_dashboard_metrics,
    aggregate_by_image,
    get_top_n_summary
)

from .chart_data import (
    get_severity_distribution,
    get_risk_factor_frequency,
    get_trend_data,
    get_cvss_distribution,
    get_ai_vs_manual_data
)

from .comparison import (
    COMPARISON_FIELDS,
    create_comparison_table,
    select_for_comparison
)

__all__ = [
    'calculate_dashboard_metrics',
    'aggregate_by_image',
    'get_top_n_summary',
    'get_severity_distribution',
    'get_risk_factor_frequency',
    'get_trend_data',
    'get_cvss_distribution',
    'get_ai_vs_manual_data',
    'COMPARISON_FIELDS',
    'create_comparison_table',
    'select_for_comparison'
]
