# src/kubehealth/cli/main.py
"""
Entry point of the `kubehealth` command.

`evaluate` runs a single health cycle over a snapshot file and prints or
exports the resulting records; `start` keeps re-reading the snapshot and
emitting records on a fixed interval until interrupted.
"""

import logging

import typer

from ..core.config import config
from . import evaluate, start

logging.basicConfig(
    level=config.LOG_LEVEL.upper(),
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


app = typer.Typer(
    name="kubehealth",
    help=(
        "Turn per-container CPU and memory counters into pass/warn/fail health "
        "records per workload container, once with 'evaluate' or periodically with 'start'."
    ),
    add_completion=False,
)


def _print_version():
    from .. import __version__

    typer.echo(f"KubeHealth version: {__version__}")


def version_callback(value: bool):
    if value:
        _print_version()
        raise typer.Exit()


@app.command()
def version():
    """
    Show the installed kubehealth version.
    """
    _print_version()


@app.callback()
def main(
    show_version: bool = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show the version and exit.",
    ),
):
    """
    Container health aggregation. Thresholds come from CPU_MONITOR_* and
    MEMORY_MONITOR_* environment variables (or a .env file).
    """


app.command(
    name="evaluate",
    help="Run one health cycle over a snapshot and print or export the records.",
)(evaluate.evaluate)
app.command(
    name="start",
    help="Re-evaluate a snapshot every interval until stopped (SIGINT/SIGTERM).",
)(start.start)


if __name__ == "__main__":
    app()
