# tests/reporters/test_console_reporter.py
"""
Unit tests for the ConsoleReporter class.
"""

from unittest.mock import MagicMock

from kubehealth.models.health import HealthRecord, HealthState, MonitorDetails, MonitorId
from kubehealth.reporters.console_reporter import ConsoleReporter

TIME_NOW = "2024-05-01T10:00:00Z"


def _record(monitor_id, state, details):
    return HealthRecord(
        monitor_id=monitor_id,
        monitor_instance_id=f"{monitor_id.value}-abc",
        details=MonitorDetails(timestamp=TIME_NOW, state=state, details=details),
        time_generated=TIME_NOW,
        time_first_observed=TIME_NOW,
    )


def test_console_reporter_with_records(mocker):
    mock_console_class = mocker.patch("kubehealth.reporters.console_reporter.Console")
    mock_table_class = mocker.patch("kubehealth.reporters.console_reporter.Table")
    mock_console_instance = MagicMock()
    mock_table_instance = MagicMock()
    mock_console_class.return_value = mock_console_instance
    mock_table_class.return_value = mock_table_instance

    records = [
        _record(
            MonitorId.CONTAINER_CPU,
            HealthState.FAIL,
            {
                "cpu_limit_millicores": 1000.0,
                "cpu_usage_instances": [
                    {"pod_name": "pod1", "counter_value": 900.0, "container": "c1", "state": "fail"},
                    {"pod_name": "???", "counter_value": -1e-06, "container": "c1", "state": "unknown"},
                ],
                "workload_name": "ns1~~wl1",
                "namespace": "ns1",
                "container": "c1",
            },
        ),
        _record(
            MonitorId.CONTAINER_MEMORY,
            HealthState.NONE,
            {
                "reason": "No record received for workload ns1~~wl2",
                "workload_name": "ns1~~wl2",
                "namespace": "ns1",
                "container": "c1",
            },
        ),
    ]

    ConsoleReporter().report(records)

    assert mock_table_class.call_args.kwargs.get("title") == "KubeHealth Container Health"
    assert mock_table_instance.add_row.call_count == 2
    cpu_row = mock_table_instance.add_row.call_args_list[0].args
    assert cpu_row[0] == "CPU"
    assert cpu_row[4] == "[bold red]fail[/]"
    assert cpu_row[5] == "1000 m"
    assert cpu_row[6] == "900 (+1 silent)"
    none_row = mock_table_instance.add_row.call_args_list[1].args
    assert none_row[0] == "Memory"
    assert none_row[6] == "No record received for workload ns1~~wl2"
    mock_console_instance.print.assert_called_once_with(mock_table_instance)


def test_console_reporter_no_records(mocker):
    mock_console_class = mocker.patch("kubehealth.reporters.console_reporter.Console")
    mock_console_instance = MagicMock()
    mock_console_class.return_value = mock_console_instance

    ConsoleReporter().report([])

    mock_console_instance.print.assert_called_once_with("No health records to report.", style="yellow")
