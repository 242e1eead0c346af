"""
Index Map Module
Secondary lookups over normalized vulnerability records.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List

import pandas as pd

from ..config import INDEX_DIMENSIONS, UNKNOWN_KEY

logger = logging.getLogger(__name__)


@dataclass
class IndexSet:
    """
    Buckets of row labels keyed by CVE, package, severity, triage status,
    group and repo.

    Buckets hold labels of the frame the index was built from, so the index
    must be rebuilt whenever that frame is replaced.
    """

    frame: pd.DataFrame
    buckets: Dict[str, Dict[str, pd.Index]] = field(default_factory=dict)

    @property
    def by_cve(self) -> Dict[str, pd.Index]:
        return self.buckets['cve']

    @property
    def by_package(self) -> Dict[str, pd.Index]:
        return self.buckets['package']

    @property
    def by_severity(self) -> Dict[str, pd.Index]:
        return self.buckets['severity']

    @property
    def by_kai_status(self) -> Dict[str, pd.Index]:
        return self.buckets['kai_status']

    @property
    def by_group(self) -> Dict[str, pd.Index]:
        return self.buckets['group']

    @property
    def by_repo(self) -> Dict[str, pd.Index]:
        return self.buckets['repo']

    def keys(self, dimension: str) -> List[str]:
        """Get bucket keys of a dimension in first-seen order."""
        return list(self._dimension(dimension).keys())

    def counts(self, dimension: str) -> Dict[str, int]:
        """Get the number of records per bucket of a dimension."""
        return {key: len(labels) for key, labels in self._dimension(dimension).items()}

    def lookup(self, dimension: str, key: str) -> pd.DataFrame:
        """
        Get the records sharing a key, in input order.

        Unknown keys give an empty frame with the same columns.
        """
        labels = self._dimension(dimension).get(key)
        if labels is None:
            return self.frame.iloc[0:0]
        return self.frame.loc[labels]

    def _dimension(self, dimension: str) -> Dict[str, pd.Index]:
        if dimension not in self.buckets:
            raise KeyError(f"Unknown index dimension: {dimension}")
        return self.buckets[dimension]


def build_index_map(df: pd.DataFrame) -> IndexSet:
    """
    Create an index map for fast grouped lookups.

    Args:
        df: Normalized record DataFrame

    Returns:
        IndexSet with one bucket mapping per dimension
    """
    index_set = IndexSet(frame=df)

    for dimension, column in INDEX_DIMENSIONS.items():
        keys = df[column]
        if dimension == 'kai_status':
            keys = keys.fillna(UNKNOWN_KEY)

        if df.empty:
            index_set.buckets[dimension] = {}
            continue

        # sort=False keeps buckets in first-seen order
        grouped = keys.groupby(keys, sort=False, dropna=False)
        index_set.buckets[dimension] = {key: members.index for key, members in grouped}

    logger.debug(f"Built index map over {len(df)} records")
    return index_set
