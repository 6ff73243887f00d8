import logging
import sys
import traceback
from pathlib import Path
from typing import List, Optional

import typer

from ..exporters.json_exporter import JSONExporter
from ..models.health import HealthRecord

logger = logging.getLogger(__name__)


async def handle_export(records: List[HealthRecord], output_path: Optional[str]) -> str:
    """Writes one cycle's health records to a JSON file."""
    exporter = JSONExporter()

    if not output_path:
        path = Path.cwd() / "data" / exporter.DEFAULT_FILENAME
    else:
        path = Path(output_path)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except Exception as e:
        logger.error(f"Failed to create output directory {path.parent}: {e}")
        raise typer.Exit(code=1)

    try:
        rows = [record.model_dump(mode="json") for record in records]
    except Exception as e:
        logger.error(f"Failed to serialize health records for export: {e}")
        logger.error(traceback.format_exc())
        raise typer.Exit(code=1)

    try:
        written_path = await exporter.export(rows, str(path))
    except Exception as e:
        logger.error(f"Failed to export health records to {path}: {e}")
        logger.error(traceback.format_exc())
        raise typer.Exit(code=1)

    logger.info(f"Successfully exported {len(rows)} health record(s) to {written_path}")
    print(f"Health records exported to: {written_path}", file=sys.stderr)
    return written_path
