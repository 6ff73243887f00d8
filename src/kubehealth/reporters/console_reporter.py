# src/kubehealth/reporters/console_reporter.py
"""
A reporter that displays health records in a formatted table in the console.
"""

import logging
from typing import Any, Dict, List

from rich.console import Console
from rich.table import Table

from ..models.health import UNKNOWN_POD_NAME, HealthRecord, HealthState, MonitorId
from .base_reporter import BaseReporter

logger = logging.getLogger(__name__)

STATE_STYLES = {
    HealthState.PASS: "green",
    HealthState.WARNING: "yellow",
    HealthState.FAIL: "bold red",
    HealthState.UNKNOWN: "magenta",
    HealthState.NONE: "dim",
}

MONITOR_LABELS = {
    MonitorId.CONTAINER_CPU: "CPU",
    MonitorId.CONTAINER_MEMORY: "Memory",
}


def _format_limit(record: HealthRecord) -> str:
    details = record.details.details
    if record.monitor_id == MonitorId.CONTAINER_CPU:
        limit = details.get("cpu_limit_millicores")
        return f"{limit:.0f} m" if isinstance(limit, (int, float)) else ""
    limit = details.get("memory_limit_bytes")
    return f"{limit / (1024 * 1024):.0f} Mi" if isinstance(limit, (int, float)) else ""


def _format_usage(record: HealthRecord) -> str:
    details = record.details.details
    if record.monitor_id == MonitorId.CONTAINER_CPU:
        instances: List[Dict[str, Any]] = details.get("cpu_usage_instances", [])
        values = [f"{i['counter_value']:.0f}" for i in instances if i["pod_name"] != UNKNOWN_POD_NAME]
    else:
        instances = details.get("memory_usage_instances", [])
        values = [
            f"{i['counter_value'] / (1024 * 1024):.0f}" for i in instances if i["pod_name"] != UNKNOWN_POD_NAME
        ]
    missing = sum(1 for i in instances if i["pod_name"] == UNKNOWN_POD_NAME)
    text = ", ".join(values)
    if missing:
        text = f"{text} (+{missing} silent)" if text else f"{missing} silent"
    return text


class ConsoleReporter(BaseReporter):
    """
    Renders health records to the console using the 'rich' library.
    """

    def __init__(self):
        self.console = Console()

    def report(self, data: List[HealthRecord]):
        if not data:
            self.console.print("No health records to report.", style="yellow")
            return

        table = Table(
            title="KubeHealth Container Health",
            header_style="bold magenta",
            show_lines=True,
        )
        table.add_column("Monitor", style="cyan")
        table.add_column("Namespace", style="cyan")
        table.add_column("Workload", style="cyan")
        table.add_column("Container", style="cyan")
        table.add_column("State", justify="center")
        table.add_column("Limit", style="blue", justify="right")
        table.add_column("Usage", style="blue", justify="right")

        for record in data:
            details = record.details.details
            state = record.state
            if state == HealthState.NONE:
                usage = details.get("reason", "")
                limit = ""
            else:
                usage = _format_usage(record)
                limit = _format_limit(record)
            table.add_row(
                MONITOR_LABELS.get(record.monitor_id, record.monitor_id.value),
                details.get("namespace", ""),
                details.get("workload_name", ""),
                details.get("container", ""),
                f"[{STATE_STYLES[state]}]{state.value}[/]",
                limit,
                usage,
            )

        self.console.print(table)
