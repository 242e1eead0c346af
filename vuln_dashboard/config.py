"""
Configuration constants for the Container Vulnerability Dashboard.
"""

from typing import Dict, List, Tuple


# Application version
VERSION = "1.0"

# Severity levels, highest first
SEVERITY_ORDER = ['critical', 'high', 'medium', 'low', 'unknown']

SEVERITY_LABELS = {
    'critical': 'Critical',
    'high': 'High',
    'medium': 'Medium',
    'low': 'Low',
    'unknown': 'Unknown'
}

SEVERITY_COLORS = {
    'critical': '#dc2626',
    'high': '#ef4444',
    'medium': '#fb923c',
    'low': '#facc15',
    'unknown': '#9ca3af'
}

# Ordinal used when sorting by severity; anything not listed maps to 0
SEVERITY_WEIGHTS = {
    'critical': 4,
    'high': 3,
    'medium': 2,
    'low': 1,
    'unknown': 0
}

# Triage (kaiStatus) values
INVALID_NORISK_STATUS = 'invalid - norisk'
AI_INVALID_NORISK_STATUS = 'ai-invalid-norisk'
VALID_STATUS = 'valid'
AI_STATUS_PREFIX = 'ai-'
UNKNOWN_KEY = 'unknown'

# Remediation status substring counted as "with fix"
FIXED_STATUS_MARKER = 'fixed'

# Synthetic record identifiers
ID_PREFIX = 'vuln-'

# Dates
SENTINEL_DATE = '1970-01-01 00:00:00'
DATE_FORMAT_DISPLAY = '%Y-%m-%d'
DATE_FORMAT_FULL = '%Y-%m-%d %H:%M:%S'

# CVSS domain
CVSS_MIN = 0.0
CVSS_MAX = 10.0

# Histogram bins for CVSS distribution: (label, lower bound inclusive)
CVSS_BINS: List[Tuple[str, float]] = [
    ('0-2', 0.0),
    ('2-4', 2.0),
    ('4-6', 4.0),
    ('6-8', 6.0),
    ('8-10', 8.0)
]

# Raw document entry key -> normalized column
RAW_FIELD_MAP: Dict[str, str] = {
    'cve': 'cve',
    'severity': 'severity',
    'cvss': 'cvss',
    'packageName': 'package_name',
    'packageVersion': 'package_version',
    'status': 'status',
    'kaiStatus': 'kai_status',
    'description': 'description',
    'riskFactors': 'risk_factors',
    'published': 'published',
    'fixDate': 'fix_date',
    'link': 'link'
}

# Columns of a normalized record frame, in export order
RECORD_COLUMNS = [
    'id',
    'cve',
    'severity',
    'cvss',
    'package_name',
    'package_version',
    'status',
    'kai_status',
    'description',
    'risk_factors',
    'published',
    'fix_date',
    'link',
    'group_name',
    'repo_name',
    'image_name',
    'image_version',
    'published_date',
    'fix_date_parsed'
]

# Columns scanned by the free-text search filter
SEARCH_COLUMNS = ['cve', 'package_name', 'description', 'severity', 'group_name', 'repo_name']

# Index dimensions -> column
INDEX_DIMENSIONS = {
    'cve': 'cve',
    'package': 'package_name',
    'severity': 'severity',
    'kai_status': 'kai_status',
    'group': 'group_name',
    'repo': 'repo_name'
}

# Comparison view
COMPARISON_MAX_ITEMS = 5

# Data loading
DEFAULT_DATA_PATH = 'data/vulnerabilities.json'
FETCH_TIMEOUT = 30  # seconds

# Export settings
EXCEL_MAX_COLUMN_WIDTH = 50
EXPORT_FILENAME_PREFIX = 'vulnerabilities'

CSV_EXPORT_COLUMNS = [
    ('CVE', 'cve'),
    ('Severity', 'severity'),
    ('CVSS', 'cvss'),
    ('Package Name', 'package_name'),
    ('Package Version', 'package_version'),
    ('Status', 'status'),
    ('Kai Status', 'kai_status'),
    ('Description', 'description'),
    ('Published', 'published'),
    ('Fix Date', 'fix_date'),
    ('Link', 'link'),
    ('Group', 'group_name'),
    ('Repo', 'repo_name'),
    ('Image', 'image_name'),
    ('Image Version', 'image_version'),
    ('Risk Factors', 'risk_factors'),
    ('Published Date', 'published_date'),
    ('Fix Date Parsed', 'fix_date_parsed'),
    ('ID', 'id')
]
