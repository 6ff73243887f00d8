# src/kubehealth/providers/snapshot.py
"""
A provider that reads the engine's inputs from a JSON snapshot on disk, as
written by an external collector:

    {
        "samples": [{"InstanceName": ..., "CounterName": ..., "CounterValue": ..., "Timestamp": ...}],
        "pod_lookup": {"<pod_uid>/<container>": {"namespace": ..., "workload_name": ..., ...}},
        "workload_container_count": {"<namespace>_<workload>_<container>": 3}
    }
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, ValidationError

from ..models.samples import LookupEntry, PodLookup, RawSample, RawSamples, WorkloadContainerCount
from .base import HealthInputProvider

logger = logging.getLogger(__name__)

_COLLECTOR_FIELD_NAMES = {
    "InstanceName": "instance_name",
    "CounterName": "counter_name",
    "CounterValue": "counter_value",
    "Timestamp": "timestamp",
}


class HealthSnapshot(BaseModel):
    samples: List[Dict[str, Any]] = Field(default_factory=list)
    pod_lookup: Dict[str, LookupEntry] = Field(default_factory=dict)
    workload_container_count: Dict[str, int] = Field(default_factory=dict)


def parse_sample(record: Dict[str, Any]) -> RawSample:
    """Build a RawSample from either the collector's field names or snake_case ones."""
    normalized = {_COLLECTOR_FIELD_NAMES.get(k, k): v for k, v in record.items()}
    return RawSample(**normalized)


class SnapshotFileProvider(HealthInputProvider):
    """
    Reads inputs from a snapshot file. `get_raw_samples` re-reads the file,
    and the lookup and counts come from that same read, so a collector can
    replace the file between cycles without mixing two snapshots in one cycle.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._snapshot: Optional[HealthSnapshot] = None

    def refresh(self) -> HealthSnapshot:
        with open(self.path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
        self._snapshot = HealthSnapshot.model_validate(data)
        logger.debug(f"Loaded snapshot from {self.path} with {len(self._snapshot.samples)} sample(s)")
        return self._snapshot

    @property
    def snapshot(self) -> HealthSnapshot:
        if self._snapshot is None:
            return self.refresh()
        return self._snapshot

    def get_raw_samples(self) -> RawSamples:
        snapshot = self.refresh()
        samples: RawSamples = []
        for record in snapshot.samples:
            try:
                samples.append(parse_sample(record))
            except (ValidationError, TypeError) as e:
                logger.warning(f"Skipping malformed sample {record}: {e}")
        return samples

    def get_pod_lookup(self) -> PodLookup:
        return dict(self.snapshot.pod_lookup)

    def get_workload_container_count(self) -> WorkloadContainerCount:
        return dict(self.snapshot.workload_container_count)
