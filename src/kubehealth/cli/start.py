# src/kubehealth/cli/start.py
"""
Start command for the KubeHealth CLI.

Runs health cycles on a fixed interval against a snapshot file that an
external collector keeps up to date, exporting each cycle's records.
"""

import asyncio
import logging
import signal
import traceback
from typing import Optional

import typer
from typing_extensions import Annotated

from ..core.config import config
from ..core.engine import HealthAggregationEngine
from ..core.scheduler import Scheduler
from ..core.telemetry import initialize_telemetry
from ..providers.snapshot import SnapshotFileProvider
from .utils import handle_export

logger = logging.getLogger(__name__)


def make_cycle_job(engine: HealthAggregationEngine, output: Optional[str]):
    """Builds the scheduled job for one engine. A failed cycle emits nothing."""

    async def run_health_cycle():
        records = engine.compute_cycle()
        if output:
            await handle_export(records, output)
        else:
            for record in records:
                logger.info(
                    "%s %s -> %s",
                    record.monitor_id.value,
                    record.monitor_instance_id,
                    record.state.value,
                )

    return run_health_cycle


async def serve(engine: HealthAggregationEngine, interval: str, output: Optional[str]) -> None:
    scheduler = Scheduler()
    scheduler.add_job_from_string(make_cycle_job(engine, output), interval)

    shutdown_requested = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, shutdown_requested.set)

    logger.info("KubeHealth is running. Press CTRL+C to exit.")
    await shutdown_requested.wait()
    logger.info("Shutting down KubeHealth service gracefully.")
    await scheduler.stop()


def start(
    snapshot: Annotated[str, typer.Argument(help="Path to the JSON snapshot refreshed by the collector.")],
    interval: Annotated[
        Optional[str],
        typer.Option("--interval", help="Time between cycles (e.g. '30s', '1m', '1h'). Defaults to CYCLE_INTERVAL."),
    ] = None,
    output: Annotated[
        Optional[str],
        typer.Option("--output", "-o", help="JSON file that receives each cycle's records."),
    ] = None,
) -> None:
    """
    Start the scheduler loop.
    """
    interval = interval or config.CYCLE_INTERVAL
    try:
        config.parse_interval(interval)
    except ValueError as e:
        raise typer.BadParameter(str(e))

    logger.info("Initializing KubeHealth...")
    if config.TELEMETRY_ENABLED:
        initialize_telemetry()

    try:
        engine = HealthAggregationEngine(provider=SnapshotFileProvider(snapshot))
        asyncio.run(serve(engine, interval, output))
    except KeyboardInterrupt:
        logger.info("Shutting down KubeHealth service.")
        raise typer.Exit()
    except Exception as e:
        logger.error(f"An unexpected error occurred during startup: {e}")
        logger.error("Startup failed: %s", traceback.format_exc())
        raise typer.Exit(code=1)
