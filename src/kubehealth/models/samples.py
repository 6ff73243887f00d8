# src/kubehealth/models/samples.py
"""
Pydantic models for the inputs consumed by the health aggregation engine:
raw counter samples from the collector and the pod metadata lookup that
maps each container instance to its workload and resource limits.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..utils.date_utils import ensure_utc


class CounterName(str, Enum):
    """Counters the engine aggregates. Anything else is dropped."""

    CPU = "cpuUsageNanoCores"
    MEMORY = "memoryRssBytes"


class RawSample(BaseModel):
    """
    A single counter reading for one container instance, as supplied by the
    collector. The counter name is kept as the raw string so unexpected
    counters can be detected and logged instead of failing validation.
    """

    model_config = ConfigDict(frozen=True)

    instance_name: str = Field(..., description="Full instance path, e.g. '<cluster>/<pod_uid>/<container>'.")
    counter_name: str = Field(..., description="The collector's counter name.")
    counter_value: float = Field(..., description="Nanocores for CPU, bytes for memory.")
    timestamp: datetime = Field(..., description="When the counter was collected.")

    @field_validator("timestamp", mode="before")
    @classmethod
    def _normalize_timestamp(cls, value):
        # Naive and aware timestamps must stay comparable during dedup.
        return ensure_utc(value)

    @property
    def counter_type(self) -> Optional[CounterName]:
        try:
            return CounterName(self.counter_name)
        except ValueError:
            return None


class NumericLimit(BaseModel):
    """A resource limit that is a plain number."""

    model_config = ConfigDict(frozen=True)

    value: Union[int, float]


class AnomalousLimit(BaseModel):
    """A resource limit the metadata source returned in an unexpected shape (e.g. a list)."""

    model_config = ConfigDict(frozen=True)

    raw: Any

    def as_properties(self) -> Dict[str, str]:
        """Flatten the raw value into event properties, one entry per array item."""
        properties = {"limit": str(self.raw)}
        if isinstance(self.raw, (list, tuple)):
            for index, item in enumerate(self.raw):
                properties[str(index)] = str(item)
        return properties


LimitValue = Union[NumericLimit, AnomalousLimit]


def resolve_limit(raw: Any) -> Optional[LimitValue]:
    """Tag a raw limit from the lookup. Returns None when no limit is present."""
    if raw is None:
        return None
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return NumericLimit(value=raw)
    return AnomalousLimit(raw=raw)


class LookupEntry(BaseModel):
    """
    Workload metadata and limits for one '<pod_uid>/<container>' instance key,
    as resolved by the pod metadata source.
    """

    namespace: str
    workload_name: str = Field(..., description="'<namespace>~~<workload>' as produced by the metadata source.")
    workload_kind: Optional[str] = None
    container: str
    pod_name: str
    cpu_limit: Any = None
    cpu_limit_set: Optional[bool] = None
    memory_limit: Any = None
    memory_limit_set: Optional[bool] = None

    def limit_for(self, counter: CounterName) -> Optional[LimitValue]:
        raw = self.cpu_limit if counter == CounterName.CPU else self.memory_limit
        return resolve_limit(raw)

    def limit_set_for(self, counter: CounterName) -> Optional[bool]:
        return self.cpu_limit_set if counter == CounterName.CPU else self.memory_limit_set


PodLookup = Dict[str, LookupEntry]
WorkloadContainerCount = Dict[str, int]
RawSamples = List[RawSample]
