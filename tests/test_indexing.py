import pytest

from vuln_dashboard.core.indexing import build_index_map


def test_index_buckets_partition_records(inventory_records):
    index = build_index_map(inventory_records)
    for dimension in ("cve", "package", "severity", "kai_status", "group", "repo"):
        labels = [label for bucket in index.buckets[dimension].values() for label in bucket]
        assert sorted(labels) == list(inventory_records.index)


def test_index_keys_first_seen_order(inventory_records):
    index = build_index_map(inventory_records)
    assert index.keys("group") == ["platform", "data"]
    assert index.keys("severity") == ["critical", "high", "medium", "low", "unknown"]
    assert index.keys("cve")[0] == "CVE-2023-0001"


def test_index_missing_triage_status_is_unknown(inventory_records):
    index = build_index_map(inventory_records)
    assert index.counts("kai_status") == {
        "valid": 1,
        "invalid - norisk": 1,
        "ai-invalid-norisk": 1,
        "ai-valid": 1,
        "unknown": 3,
    }


def test_index_lookup_keeps_input_order(inventory_records):
    index = build_index_map(inventory_records)
    matches = index.lookup("cve", "CVE-2023-0001")
    assert list(matches["id"]) == ["vuln-0", "vuln-3"]
    assert list(index.by_cve["CVE-2023-0001"]) == [0, 3]
    assert len(index.by_package["openssl"]) == 2
    assert len(index.by_repo["etl"]) == 3


def test_index_lookup_unknown_key(inventory_records):
    index = build_index_map(inventory_records)
    result = index.lookup("package", "no-such-package")
    assert result.empty
    assert list(result.columns) == list(inventory_records.columns)


def test_index_unknown_dimension(inventory_records):
    index = build_index_map(inventory_records)
    with pytest.raises(KeyError):
        index.keys("image")


def test_index_empty_frame(inventory_records):
    index = build_index_map(inventory_records.iloc[0:0])
    assert index.by_cve == {}
    assert index.counts("severity") == {}
