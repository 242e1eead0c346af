"""
Data Loader Module
Fetches the vulnerability inventory document from disk or over HTTP.
"""

import json
import logging
import threading
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional

import requests

from ..config import FETCH_TIMEOUT

logger = logging.getLogger(__name__)


class DataLoadError(Exception):
    """Raised when the vulnerability document cannot be retrieved or parsed."""


class LoadState(Enum):
    """State of a document load attempt."""
    IDLE = "idle"
    PENDING = "pending"
    FULFILLED = "fulfilled"
    REJECTED = "rejected"


def is_url(source: str) -> bool:
    """Check if a data source refers to an HTTP(S) location."""
    return source.lower().startswith(('http://', 'https://'))


def validate_document(data: Any) -> Dict[str, Any]:
    """
    Check the top-level shape of a vulnerability document.

    Raises:
        DataLoadError: If the document has no 'groups' mapping
    """
    if not isinstance(data, Mapping):
        raise DataLoadError("Failed to load vulnerability data: document is not a JSON object")

    groups = data.get('groups')
    if not isinstance(groups, Mapping):
        raise DataLoadError("Failed to load vulnerability data: missing 'groups' mapping")

    return dict(data)


def fetch_document(url: str, timeout: int = FETCH_TIMEOUT) -> Any:
    """Download and decode a JSON document."""
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.exceptions.Timeout as e:
        raise DataLoadError(f"Failed to load vulnerability data: request timed out ({url})") from e
    except requests.exceptions.RequestException as e:
        raise DataLoadError(f"Failed to load vulnerability data: {e}") from e

    try:
        return response.json()
    except ValueError as e:
        raise DataLoadError(f"Failed to load vulnerability data: invalid JSON ({e})") from e


def read_document(path: str) -> Any:
    """Read and decode a JSON document from disk."""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except OSError as e:
        raise DataLoadError(f"Failed to load vulnerability data: {e}") from e
    except ValueError as e:
        raise DataLoadError(f"Failed to load vulnerability data: invalid JSON ({e})") from e


def load_vulnerability_data(source: str, timeout: int = FETCH_TIMEOUT) -> Dict[str, Any]:
    """
    Load a vulnerability inventory document.

    Args:
        source: File path or http(s) URL of the JSON document
        timeout: Request timeout in seconds for URLs

    Returns:
        The parsed document

    Raises:
        DataLoadError: On any retrieval, decoding or shape failure
    """
    logger.info(f"Loading vulnerability data from {source}")
    data = fetch_document(source, timeout) if is_url(source) else read_document(source)
    return validate_document(data)


class DataLoader:
    """
    One-shot loader for the vulnerability document.

    Tracks the pending/fulfilled/rejected state of the latest attempt. There
    is no retry: a rejected load stays rejected until load() is called again.
    """

    def __init__(self, timeout: int = FETCH_TIMEOUT):
        self.timeout = timeout
        self._state = LoadState.IDLE
        self._error: Optional[str] = None
        self._data: Optional[Dict[str, Any]] = None
        self._lock = threading.Lock()

    @property
    def state(self) -> LoadState:
        return self._state

    @property
    def error(self) -> Optional[str]:
        """Message of the last rejected load."""
        return self._error

    @property
    def data(self) -> Optional[Dict[str, Any]]:
        return self._data

    def load(self, source: str) -> Dict[str, Any]:
        """
        Load the document synchronously.

        Raises:
            DataLoadError: If the load is rejected
        """
        with self._lock:
            self._state = LoadState.PENDING
            self._error = None
            self._data = None

        try:
            data = load_vulnerability_data(source, self.timeout)
        except DataLoadError as e:
            logger.error(str(e))
            with self._lock:
                self._state = LoadState.REJECTED
                self._error = str(e)
            raise

        with self._lock:
            self._data = data
            self._state = LoadState.FULFILLED
        return data

    def load_async(self, source: str,
                   callback: Optional[Callable[[Optional[Dict[str, Any]], Optional[str]], None]] = None
                   ) -> threading.Thread:
        """
        Load the document on a background thread.

        Args:
            source: File path or URL
            callback: Called with (data, None) on success or (None, message)
                on failure

        Returns:
            The started thread
        """
        with self._lock:
            self._state = LoadState.PENDING

        def _load():
            try:
                data = self.load(source)
            except DataLoadError as e:
                if callback:
                    callback(None, str(e))
                return
            if callback:
                callback(data, None)

        thread = threading.Thread(target=_load, daemon=True)
        thread.start()
        return thread
