import copy
import json

import pytest

from vuln_dashboard.core.data_processing import process_vulnerability_data


SCENARIO_DOCUMENT = {
    "groups": {
        "g1": {
            "name": "g1",
            "repos": {
                "r1": {
                    "name": "r1",
                    "images": {
                        "img1:v1": {
                            "name": "img1",
                            "version": "v1",
                            "vulnerabilities": [
                                {
                                    "cve": "CVE-1",
                                    "severity": "critical",
                                    "cvss": 9.8,
                                    "packageName": "openssl",
                                    "packageVersion": "1.1.1",
                                    "status": "fixed in 1.1.1w",
                                    "description": "Buffer overflow in openssl",
                                    "riskFactors": {"Has fix": "", "Remote execution": ""},
                                    "published": "2024-01-15 00:00:00",
                                    "fixDate": "2024-02-01 12:00:00",
                                    "link": "https://nvd.nist.gov/vuln/detail/CVE-1",
                                },
                                {
                                    "cve": "CVE-2",
                                    "severity": "low",
                                    "cvss": 1.2,
                                    "packageName": "zlib",
                                    "packageVersion": "1.2.11",
                                    "status": "open",
                                    "description": "Minor issue in zlib",
                                    "riskFactors": {},
                                    "published": "1970-01-01 00:00:00",
                                    "fixDate": "",
                                    "link": "",
                                },
                            ],
                        }
                    },
                }
            },
        }
    }
}


def _vuln(cve, severity, cvss, package, published, kai_status=None, status="open", risk_factors=None):
    entry = {
        "cve": cve,
        "severity": severity,
        "cvss": cvss,
        "packageName": package,
        "packageVersion": "1.0",
        "status": status,
        "description": f"{cve} affects {package}",
        "riskFactors": risk_factors or {},
        "published": published,
        "fixDate": "",
        "link": f"https://example.org/{cve}",
    }
    if kai_status is not None:
        entry["kaiStatus"] = kai_status
    return entry


INVENTORY_DOCUMENT = {
    "groups": {
        "platform": {
            "name": "platform",
            "repos": {
                "api": {
                    "name": "api",
                    "images": {
                        "api:1.0": {
                            "name": "api",
                            "version": "1.0",
                            "vulnerabilities": [
                                _vuln("CVE-2023-0001", "critical", 9.1, "openssl", "2023-03-10 08:00:00",
                                      kai_status="valid", status="fixed in 3.0.8",
                                      risk_factors={"Has fix": "", "Remote execution": ""}),
                                _vuln("CVE-2023-0002", "high", 7.5, "libxml2", "2023-05-02 10:30:00",
                                      kai_status="invalid - norisk"),
                                _vuln("CVE-2023-0003", "medium", 5.3, "curl", "2023-05-20 00:00:00",
                                      kai_status="ai-invalid-norisk",
                                      risk_factors={"Has fix": ""}),
                            ],
                        },
                        "api:1.1": {
                            "name": "api",
                            "version": "1.1",
                            "vulnerabilities": [
                                _vuln("CVE-2023-0001", "critical", 9.1, "openssl", "2023-03-10 08:00:00",
                                      kai_status="ai-valid", status="fixed in 3.0.8",
                                      risk_factors={"Has fix": ""}),
                            ],
                        },
                    },
                },
            },
        },
        "data": {
            "name": "data",
            "repos": {
                "etl": {
                    "name": "etl",
                    "images": {
                        "etl:2.3": {
                            "name": "etl",
                            "version": "2.3",
                            "vulnerabilities": [
                                _vuln("CVE-2022-1000", "low", 2.0, "zlib", "1970-01-01 00:00:00"),
                                _vuln("CVE-2022-1001", "high", 7.5, "openssl-libs", "2022-11-30 23:59:59",
                                      kai_status=""),
                                _vuln("CVE-2022-1002", "unknown", 0.0, "tzdata", "not a date"),
                            ],
                        }
                    },
                }
            },
        },
    }
}


@pytest.fixture
def scenario_document():
    return copy.deepcopy(SCENARIO_DOCUMENT)


@pytest.fixture
def inventory_document():
    return copy.deepcopy(INVENTORY_DOCUMENT)


@pytest.fixture
def scenario_records(scenario_document):
    return process_vulnerability_data(scenario_document)


@pytest.fixture
def inventory_records(inventory_document):
    return process_vulnerability_data(inventory_document)


@pytest.fixture
def inventory_file(tmp_path, inventory_document):
    path = tmp_path / "vulnerabilities.json"
    path.write_text(json.dumps(inventory_document), encoding="utf-8")
    return path
