"""
User Settings Management
Handles persistent user preferences and configuration.
"""

import json
import logging
import os
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional

from .config import CVSS_MAX, CVSS_MIN, DEFAULT_DATA_PATH, SEVERITY_COLORS
from .filters.filter_spec import FilterSpec

logger = logging.getLogger(__name__)


@dataclass
class UserSettings:
    """User-configurable settings with defaults."""

    # Data source (file path or URL)
    data_source: str = DEFAULT_DATA_PATH
    recent_sources: List[str] = field(default_factory=list)
    max_recent_sources: int = 5

    # Default sort
    sort_field: str = 'cvss'
    sort_direction: str = 'desc'

    # Default filter settings
    default_severity: List[str] = field(default_factory=list)
    default_kai_status: List[str] = field(default_factory=list)
    default_cvss_min: float = CVSS_MIN
    default_cvss_max: float = CVSS_MAX
    default_exclude_invalid_norisk: bool = False
    default_exclude_ai_invalid_norisk: bool = False

    # Severity colors (hex)
    severity_colors: Dict[str, str] = field(default_factory=lambda: dict(SEVERITY_COLORS))

    # Table settings
    items_per_page: int = 50

    # Export settings
    export_directory: str = ''

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'UserSettings':
        """Create from dictionary."""
        # Filter to only known fields
        known_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in data.items() if k in known_fields}
        return cls(**filtered)

    def default_filter_spec(self) -> FilterSpec:
        """Build the filter specification a new session starts with."""
        return FilterSpec(
            severity=list(self.default_severity),
            kai_status=list(self.default_kai_status),
            min_cvss=self.default_cvss_min,
            max_cvss=self.default_cvss_max,
            exclude_invalid_norisk=self.default_exclude_invalid_norisk,
            exclude_ai_invalid_norisk=self.default_exclude_ai_invalid_norisk
        )


class SettingsManager:
    """Manages user settings persistence."""

    DEFAULT_PATH = os.path.join(os.path.expanduser('~'), '.vuln_dashboard', 'settings.json')

    def __init__(self, settings_path: Optional[str] = None):
        """Initialize settings manager."""
        self.settings_path = settings_path or self.DEFAULT_PATH
        self.settings = UserSettings()

        # Ensure directory exists
        os.makedirs(os.path.dirname(self.settings_path) or '.', exist_ok=True)

        # Load existing settings
        self.load()

    def load(self) -> bool:
        """Load settings from file, keeping defaults when unavailable."""
        if not os.path.exists(self.settings_path):
            return True

        try:
            with open(self.settings_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("settings file does not contain a JSON object")
            self.settings = UserSettings.from_dict(data)
        except (OSError, ValueError, TypeError) as e:
            logger.error(f"Error loading settings: {e}")
            return False

        return True

    def save(self) -> bool:
        """Save settings to file."""
        try:
            with open(self.settings_path, 'w', encoding='utf-8') as f:
                json.dump(self.settings.to_dict(), f, indent=2)
        except OSError as e:
            logger.error(f"Error saving settings: {e}")
            return False

        return True

    def reset_to_defaults(self) -> bool:
        """Reset all settings to defaults."""
        self.settings = UserSettings()
        return self.save()

    def update_recent_source(self, source: str) -> bool:
        """Make a data source the current one and remember it."""
        self.settings.data_source = source
        recent = [s for s in self.settings.recent_sources if s != source]
        self.settings.recent_sources = ([source] + recent)[:self.settings.max_recent_sources]
        return self.save()
