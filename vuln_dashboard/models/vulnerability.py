"""
Vulnerability data models for container image inventories.
"""

from dataclasses import dataclass, field, asdict
from typing import Optional, Dict, Any

import pandas as pd

from ..config import FIXED_STATUS_MARKER, SEVERITY_WEIGHTS


@dataclass
class VulnerabilityRecord:
    """A single normalized vulnerability found in a container image."""

    id: str
    cve: str
    severity: str
    cvss: float
    package_name: str
    package_version: str = ''
    status: str = ''
    kai_status: Optional[str] = None
    description: str = ''
    risk_factors: Dict[str, str] = field(default_factory=dict)
    published: str = ''
    fix_date: str = ''
    link: str = ''

    # Owning containers
    group_name: str = ''
    repo_name: str = ''
    image_name: str = ''
    image_version: str = ''

    # Sortable timestamps (None when absent)
    published_date: Optional[str] = None
    fix_date_parsed: Optional[str] = None

    @property
    def severity_value(self) -> int:
        """Ordinal severity, 0 for unrecognized values."""
        return SEVERITY_WEIGHTS.get(self.severity, 0)

    @property
    def has_fix(self) -> bool:
        """Check if the remediation status mentions a fix."""
        return FIXED_STATUS_MARKER in (self.status or '').lower()

    @property
    def exposure_key(self) -> str:
        """Identify this exposure by image and package."""
        return f"{self.group_name}/{self.repo_name}/{self.image_name}:{self.image_version}|{self.package_name}|{self.cve}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return asdict(self)

    @classmethod
    def from_row(cls, row: pd.Series) -> 'VulnerabilityRecord':
        """Create from a row of a normalized record frame."""
        data = row.to_dict()
        known_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: (None if _is_missing(v) else v) for k, v in data.items() if k in known_fields}
        if filtered.get('risk_factors') is None:
            filtered['risk_factors'] = {}
        if filtered.get('cvss') is None:
            filtered['cvss'] = 0.0
        return cls(**filtered)


@dataclass
class DashboardMetrics:
    """Summary metrics for a set of vulnerability records."""

    total_vulnerabilities: int = 0
    critical_count: int = 0
    high_count: int = 0
    medium_count: int = 0
    low_count: int = 0
    average_cvss: float = 0.0
    vulnerabilities_with_fix: int = 0
    unique_packages: int = 0
    unique_cves: int = 0

    @property
    def critical_high_count(self) -> int:
        return self.critical_count + self.high_count

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return asdict(self)


def _is_missing(value: Any) -> bool:
    # pd.isna on dicts and lists returns arrays, only scalars can be missing
    if isinstance(value, (dict, list)):
        return False
    return value is None or bool(pd.isna(value))
