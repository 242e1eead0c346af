"""
Data models for the Container Vulnerability Dashboard.
"""

from .vulnerability import VulnerabilityRecord, DashboardMetrics

__all__ = [
    'VulnerabilityRecord', 'DashboardMetrics'
]
