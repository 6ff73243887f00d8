import json
import os
from typing import Any, Dict, List

import aiofiles

from .base_exporter import BaseExporter


class JSONExporter(BaseExporter):
    """Writes one cycle's health records as a JSON array, replacing the previous cycle's file."""

    DEFAULT_FILENAME = "kubehealth-records.json"

    async def export(self, data: List[Dict[str, Any]], path: str | None = None) -> str:
        out_path = path or self.DEFAULT_FILENAME
        rows = list(data or [])
        os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)

        # Readers of out_path only ever see a complete cycle.
        tmp_path = f"{out_path}.tmp"
        async with aiofiles.open(tmp_path, "w", encoding="utf-8") as fh:
            await fh.write(json.dumps(rows, ensure_ascii=False, indent=2))
        os.replace(tmp_path, out_path)
        return out_path
