from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List


class BaseExporter(ABC):
    """Abstract base class for health record exporters.

    Subclasses should provide a DEFAULT_FILENAME and implement `export`.
    """

    DEFAULT_FILENAME: str = "kubehealth-records"

    @abstractmethod
    async def export(self, data: List[Dict[str, Any]], path: str | None = None) -> str:
        """Write the serialized health records. Return the written path."""
        raise NotImplementedError()
