import json
from unittest.mock import MagicMock

import pytest
import requests

from vuln_dashboard.core import data_loader
from vuln_dashboard.core.data_loader import (
    DataLoader,
    DataLoadError,
    LoadState,
    is_url,
    load_vulnerability_data,
    validate_document,
)


def _response(payload=None, status_error=None, json_error=None):
    response = MagicMock()
    if status_error is not None:
        response.raise_for_status.side_effect = status_error
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = payload
    return response


def test_is_url():
    assert is_url("https://example.org/data.json")
    assert is_url("HTTP://example.org/data.json")
    assert not is_url("data/vulnerabilities.json")


def test_load_from_file(inventory_file, inventory_document):
    assert load_vulnerability_data(str(inventory_file)) == inventory_document


def test_load_missing_file(tmp_path):
    with pytest.raises(DataLoadError, match="Failed to load vulnerability data"):
        load_vulnerability_data(str(tmp_path / "missing.json"))


def test_load_malformed_file(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(DataLoadError, match="invalid JSON"):
        load_vulnerability_data(str(path))


@pytest.mark.parametrize("document", [[], {"items": []}, {"groups": []}, "groups"])
def test_validate_document_requires_groups_mapping(document):
    with pytest.raises(DataLoadError):
        validate_document(document)


def test_load_from_url(monkeypatch, scenario_document):
    get = MagicMock(return_value=_response(scenario_document))
    monkeypatch.setattr(data_loader.requests, "get", get)

    assert load_vulnerability_data("https://example.org/vulns.json", timeout=5) == scenario_document
    get.assert_called_once_with("https://example.org/vulns.json", timeout=5)


def test_load_from_url_http_error(monkeypatch):
    error = requests.exceptions.HTTPError("404 Client Error: Not Found")
    monkeypatch.setattr(data_loader.requests, "get", MagicMock(return_value=_response(status_error=error)))

    with pytest.raises(DataLoadError, match="404"):
        load_vulnerability_data("https://example.org/vulns.json")


def test_load_from_url_timeout(monkeypatch):
    monkeypatch.setattr(data_loader.requests, "get", MagicMock(side_effect=requests.exceptions.Timeout()))

    with pytest.raises(DataLoadError, match="timed out"):
        load_vulnerability_data("https://example.org/vulns.json")


def test_load_from_url_malformed_json(monkeypatch):
    response = _response(json_error=ValueError("Expecting value"))
    monkeypatch.setattr(data_loader.requests, "get", MagicMock(return_value=response))

    with pytest.raises(DataLoadError, match="invalid JSON"):
        load_vulnerability_data("https://example.org/vulns.json")


def test_loader_states(inventory_file, tmp_path):
    loader = DataLoader()
    assert loader.state == LoadState.IDLE

    data = loader.load(str(inventory_file))
    assert loader.state == LoadState.FULFILLED
    assert loader.data == data
    assert loader.error is None

    with pytest.raises(DataLoadError):
        loader.load(str(tmp_path / "missing.json"))
    assert loader.state == LoadState.REJECTED
    assert loader.data is None
    assert "Failed to load vulnerability data" in loader.error


def test_loader_async_success(inventory_file, inventory_document):
    results = []
    loader = DataLoader()
    thread = loader.load_async(str(inventory_file), lambda data, error: results.append((data, error)))
    thread.join(timeout=5)

    assert results == [(inventory_document, None)]
    assert loader.state == LoadState.FULFILLED


def test_loader_async_failure(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text(json.dumps({"no_groups": True}), encoding="utf-8")
    results = []
    loader = DataLoader()
    thread = loader.load_async(str(path), lambda data, error: results.append((data, error)))
    thread.join(timeout=5)

    assert len(results) == 1
    data, error = results[0]
    assert data is None
    assert "groups" in error
    assert loader.state == LoadState.REJECTED
