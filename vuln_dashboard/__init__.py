"""
Container Vulnerability Dashboard
Normalizes, filters and summarizes group/repo/image vulnerability inventories.
"""

from .config import VERSION

__version__ = VERSION
