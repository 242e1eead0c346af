from vuln_dashboard.models import DashboardMetrics, VulnerabilityRecord


def test_record_from_row(scenario_records):
    record = VulnerabilityRecord.from_row(scenario_records.iloc[0])
    assert record.id == "vuln-0"
    assert record.cve == "CVE-1"
    assert record.cvss == 9.8
    assert record.severity_value == 4
    assert record.has_fix
    assert record.exposure_key == "g1/r1/img1:v1|openssl|CVE-1"
    assert record.to_dict()["published_date"] == "2024-01-15T00:00:00"


def test_record_missing_values(scenario_records):
    record = VulnerabilityRecord.from_row(scenario_records.iloc[1])
    assert record.kai_status is None
    assert record.published_date is None
    assert record.risk_factors == {}
    assert not record.has_fix


def test_unrecognized_severity_value():
    record = VulnerabilityRecord(id="vuln-9", cve="CVE-9", severity="negligible", cvss=0.1, package_name="p")
    assert record.severity_value == 0


def test_metrics_defaults():
    metrics = DashboardMetrics()
    assert metrics.total_vulnerabilities == 0
    assert metrics.critical_high_count == 0
    assert metrics.to_dict()["average_cvss"] == 0.0
