import json

import pytest

from vuln_dashboard.main import main


def _run(argv):
    with pytest.raises(SystemExit) as excinfo:
        main(argv)
    return excinfo.value.code


@pytest.fixture
def settings_file(tmp_path):
    return str(tmp_path / "settings" / "settings.json")


def test_cli_prints_summary(inventory_file, settings_file, capsys):
    code = _run(["--input", str(inventory_file), "--settings", settings_file, "--severity", "critical", "high"])
    assert code == 0

    out = capsys.readouterr().out
    assert "Showing 4 of 7 vulnerabilities" in out
    assert "Critical" in out


def test_cli_exports_filtered_records(inventory_file, settings_file, tmp_path):
    output = tmp_path / "report.json"
    code = _run([
        "-i", str(inventory_file), "--settings", settings_file,
        "--exclude-invalid-norisk", "--exclude-ai-invalid-norisk",
        "--sort", "severity", "--direction", "asc", "-o", str(output),
    ])
    assert code == 0

    data = json.loads(output.read_text(encoding="utf-8"))
    ids = [record["id"] for record in data["vulnerabilities"]]
    assert ids == ["vuln-6", "vuln-4", "vuln-5", "vuln-0", "vuln-3"]
    assert data["summary"]["total_vulnerabilities"] == 5


def test_cli_date_range(inventory_file, settings_file, capsys):
    code = _run(["-i", str(inventory_file), "--settings", settings_file, "--start", "2023-01-01", "--end", "2023-03-31"])
    assert code == 0
    assert "Showing 2 of 7 vulnerabilities" in capsys.readouterr().out


def test_cli_load_failure(tmp_path, settings_file, capsys):
    code = _run(["-i", str(tmp_path / "missing.json"), "--settings", settings_file])
    assert code == 1
    assert "Failed to load vulnerability data" in capsys.readouterr().out


def test_cli_unknown_output_format(inventory_file, settings_file, tmp_path):
    code = _run(["-i", str(inventory_file), "--settings", settings_file, "-o", str(tmp_path / "report.txt")])
    assert code == 1


def test_cli_remembers_source(inventory_file, settings_file, capsys):
    assert _run(["-i", str(inventory_file), "--settings", settings_file]) == 0
    capsys.readouterr()

    assert _run(["--settings", settings_file]) == 0
    assert f"Loading: {inventory_file}" in capsys.readouterr().out


def test_cli_rejects_bad_date(inventory_file, settings_file):
    assert _run(["-i", str(inventory_file), "--settings", settings_file, "--start", "soon"]) == 2
