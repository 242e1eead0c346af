import csv
import json
from datetime import datetime

import pandas as pd
import pytest
from openpyxl import load_workbook

from vuln_dashboard.config import CSV_EXPORT_COLUMNS, RECORD_COLUMNS
from vuln_dashboard.export import (
    build_export_filename,
    export_to_csv,
    export_to_excel,
    export_to_json,
    load_from_json,
    prepare_export_frame,
)
from vuln_dashboard.statistics import calculate_dashboard_metrics


def test_build_export_filename():
    assert build_export_filename("vulnerabilities", "csv", datetime(2024, 5, 1)) == "vulnerabilities_2024-05-01.csv"
    assert build_export_filename("report", ".xlsx", datetime(2024, 12, 31)) == "report_2024-12-31.xlsx"


def test_prepare_export_frame(scenario_records):
    frame = prepare_export_frame(scenario_records)
    assert list(frame.columns) == RECORD_COLUMNS
    assert json.loads(frame.iloc[0]["risk_factors"]) == {"Has fix": "", "Remote execution": ""}
    assert frame.iloc[1]["published_date"] is None


def test_export_to_csv(tmp_path, inventory_records):
    path = tmp_path / "out.csv"
    assert export_to_csv(inventory_records, str(path)) is True

    with open(path, newline="", encoding="utf-8") as f:
        rows = list(csv.reader(f))

    assert rows[0] == [header for header, _ in CSV_EXPORT_COLUMNS]
    assert rows[0][:14] == [
        "CVE", "Severity", "CVSS", "Package Name", "Package Version", "Status", "Kai Status",
        "Description", "Published", "Fix Date", "Link", "Group", "Repo", "Image",
    ]
    assert len(rows) == 8
    assert rows[1][0] == "CVE-2023-0001"
    assert rows[1][-1] == "vuln-0"


def test_export_to_csv_quotes_awkward_text(tmp_path, scenario_records):
    records = scenario_records.copy()
    records.loc[0, "description"] = 'Overflow, "remote"\nsecond line'
    path = tmp_path / "out.csv"
    export_to_csv(records, str(path))

    reread = pd.read_csv(path, keep_default_na=False)
    assert reread.loc[0, "Description"] == 'Overflow, "remote"\nsecond line'


def test_export_empty_frame_is_refused(tmp_path, inventory_records):
    empty = inventory_records.iloc[0:0]
    assert export_to_csv(empty, str(tmp_path / "a.csv")) is False
    assert export_to_json(empty, str(tmp_path / "a.json")) is False
    assert export_to_excel(empty, str(tmp_path / "a.xlsx")) is False
    assert not (tmp_path / "a.csv").exists()


def test_export_write_failure_returns_false(tmp_path, scenario_records):
    target = tmp_path / "missing-dir" / "out.csv"
    assert export_to_csv(scenario_records, str(target)) is False


def test_export_to_json_plain(tmp_path, scenario_records):
    path = tmp_path / "out.json"
    assert export_to_json(scenario_records, str(path)) is True

    data = json.loads(path.read_text(encoding="utf-8"))
    assert isinstance(data, list)
    assert set(data[0]) == set(RECORD_COLUMNS)
    assert data[0]["risk_factors"] == {"Has fix": "", "Remote execution": ""}
    assert data[1]["published_date"] is None
    assert data[1]["kai_status"] is None


def test_export_to_json_with_metadata(tmp_path, scenario_records):
    path = tmp_path / "out.json"
    metrics = calculate_dashboard_metrics(scenario_records)
    export_to_json(scenario_records, str(path), metrics=metrics, include_metadata=True)

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["metadata"]["record_count"] == 2
    assert data["summary"]["average_cvss"] == pytest.approx(5.5)
    assert len(data["vulnerabilities"]) == 2

    loaded = load_from_json(str(path))
    assert list(loaded["cve"]) == ["CVE-1", "CVE-2"]


def test_export_to_excel(tmp_path, inventory_records):
    path = tmp_path / "out.xlsx"
    assert export_to_excel(inventory_records, str(path)) is True

    workbook = load_workbook(path)
    assert workbook.sheetnames == ["Summary", "Severity_Summary", "Vulnerabilities"]

    sheet = workbook["Vulnerabilities"]
    header = [cell.value for cell in sheet[1]]
    assert header == RECORD_COLUMNS
    assert sheet.max_row == 8
    assert sheet.freeze_panes == "A2"

    summary = {row[0]: row[1] for row in workbook["Summary"].iter_rows(min_row=2, values_only=True)}
    assert summary["Total Vulnerabilities"] == 7
    assert summary["Images"] == 3


def test_export_to_excel_without_summary(tmp_path, scenario_records):
    path = tmp_path / "out.xlsx"
    export_to_excel(scenario_records, str(path), include_summary=False)
    assert load_workbook(path).sheetnames == ["Vulnerabilities"]
