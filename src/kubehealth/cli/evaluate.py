# src/kubehealth/cli/evaluate.py
"""
Implements the `evaluate` command: run a single health cycle over a snapshot
file and display or export the resulting records.
"""

import asyncio
import logging
import traceback
from typing import Optional

import typer
from typing_extensions import Annotated

from ..core.engine import HealthAggregationEngine
from ..providers.snapshot import SnapshotFileProvider
from ..reporters.console_reporter import ConsoleReporter
from .utils import handle_export

logger = logging.getLogger(__name__)


def evaluate(
    snapshot: Annotated[str, typer.Argument(help="Path to a JSON snapshot of samples, pod lookup and counts.")],
    output: Annotated[
        Optional[str],
        typer.Option("--output", "-o", help="Write the records as JSON to this path instead of printing a table."),
    ] = None,
) -> None:
    """
    Run one aggregation cycle and report the health records.
    """
    try:
        provider = SnapshotFileProvider(snapshot)
        engine = HealthAggregationEngine(provider=provider)
        records = engine.compute_cycle()
    except FileNotFoundError:
        logger.error(f"Snapshot file not found: {snapshot}")
        raise typer.Exit(code=1)
    except Exception as e:
        logger.error(f"Failed to evaluate snapshot {snapshot}: {e}")
        logger.error(traceback.format_exc())
        raise typer.Exit(code=1)

    if output:
        asyncio.run(handle_export(records, output))
        return

    ConsoleReporter().report(records)
