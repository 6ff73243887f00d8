# tests/test_cli.py
"""
Unit tests for the KubeHealth Command-Line Interface (CLI).
"""

import json
from unittest.mock import MagicMock

import pytest
from typer.testing import CliRunner

from kubehealth import __version__
from kubehealth.cli import app
from kubehealth.models.health import HealthState

runner = CliRunner()


@pytest.fixture
def snapshot_file(tmp_path):
    snapshot = {
        "samples": [
            {
                "InstanceName": "ns1/pod1/c1",
                "CounterName": "cpuUsageNanoCores",
                "CounterValue": 950000000,
                "Timestamp": "2024-05-01T10:00:00Z",
            }
        ],
        "pod_lookup": {
            "pod1/c1": {
                "namespace": "ns1",
                "workload_name": "ns1~~wl1",
                "container": "c1",
                "pod_name": "pod1",
                "cpu_limit": 1000000000,
            }
        },
        "workload_container_count": {"ns1_wl1_c1": 1},
    }
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps(snapshot), encoding="utf-8")
    return path


@pytest.fixture
def mock_reporter(mocker):
    """
    Fixture to patch ConsoleReporter and provide a mock instance.
    """
    mock_reporter_class = mocker.patch("kubehealth.cli.evaluate.ConsoleReporter")
    mock_reporter_instance = MagicMock()
    mock_reporter_class.return_value = mock_reporter_instance
    return mock_reporter_instance


def test_version():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert __version__ in result.stdout


def test_evaluate_reports_records(mocker, mock_reporter, snapshot_file):
    mocker.patch("kubehealth.core.engine.DiagnosticEventReporter")

    result = runner.invoke(app, ["evaluate", str(snapshot_file)])

    assert result.exit_code == 0, result.output
    mock_reporter.report.assert_called_once()
    records = mock_reporter.report.call_args.args[0]
    assert len(records) == 1
    assert records[0].state == HealthState.FAIL


def test_evaluate_exports_json(mocker, snapshot_file, tmp_path):
    mocker.patch("kubehealth.core.engine.DiagnosticEventReporter")
    out = tmp_path / "out" / "records.json"

    result = runner.invoke(app, ["evaluate", str(snapshot_file), "--output", str(out)])

    assert result.exit_code == 0, result.output
    rows = json.loads(out.read_text(encoding="utf-8"))
    assert rows[0]["monitor_id"] == "container_cpu_utilization"
    assert rows[0]["details"]["state"] == "fail"
    assert rows[0]["details"]["details"]["cpu_usage_instances"][0]["counter_value"] == 950.0


def test_evaluate_missing_snapshot_exits_with_error(tmp_path):
    result = runner.invoke(app, ["evaluate", str(tmp_path / "absent.json")])
    assert result.exit_code == 1


def test_start_rejects_bad_interval(snapshot_file):
    result = runner.invoke(app, ["start", str(snapshot_file), "--interval", "often"])
    assert result.exit_code != 0


def test_start_runs_the_service(mocker, snapshot_file):
    mock_serve = mocker.patch("kubehealth.cli.start.serve", new=MagicMock(return_value=None))
    mocker.patch("kubehealth.cli.start.asyncio.run")
    mocker.patch("kubehealth.core.engine.DiagnosticEventReporter")

    result = runner.invoke(app, ["start", str(snapshot_file), "--interval", "30s"])

    assert result.exit_code == 0, result.output
    engine, interval, output = mock_serve.call_args.args
    assert interval == "30s"
    assert output is None
    assert engine.provider.path == snapshot_file


def test_version_option_exits_early():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert f"KubeHealth version: {__version__}" in result.stdout


def test_help_describes_commands():
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "evaluate" in result.stdout
    assert "start" in result.stdout
    assert "health" in result.stdout
