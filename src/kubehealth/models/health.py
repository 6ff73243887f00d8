# src/kubehealth/models/health.py
"""
Data models produced by the health aggregation engine: monitor settings,
per-cycle resource buckets and the health records handed to the downstream
emitter.
"""

from enum import Enum
from typing import Any, Dict, List, NamedTuple, Optional

from pydantic import BaseModel, Field, model_validator

from .samples import CounterName, LimitValue

UNKNOWN_POD_NAME = "???"
UNKNOWN_COUNTER_VALUE = -1
WORKLOAD_SEPARATOR = "~~"
BUCKET_KEY_SEPARATOR = "_"


class HealthState(str, Enum):
    """Health states a monitor can report. NONE is reserved for transition records."""

    PASS = "pass"
    WARNING = "warn"
    FAIL = "fail"
    UNKNOWN = "unknown"
    NONE = "none"


class MonitorId(str, Enum):
    CONTAINER_CPU = "container_cpu_utilization"
    CONTAINER_MEMORY = "container_memory_utilization"

    @classmethod
    def for_counter(cls, counter: CounterName) -> "MonitorId":
        return cls.CONTAINER_CPU if counter == CounterName.CPU else cls.CONTAINER_MEMORY


class MonitorConfig(BaseModel):
    """Threshold settings for one monitor."""

    state_threshold_percentage: float = Field(..., ge=0, le=100)
    fail_threshold_percentage: float = Field(..., ge=0)
    warn_threshold_percentage: float = Field(..., ge=0)

    @model_validator(mode="after")
    def _warn_not_above_fail(self):
        if self.warn_threshold_percentage > self.fail_threshold_percentage:
            raise ValueError("warn_threshold_percentage must not exceed fail_threshold_percentage")
        return self


class BucketKey(NamedTuple):
    """
    Identity of a resource bucket. The string form is
    '<namespace>_<workload>_<container>'; Kubernetes names cannot contain
    underscores, so the tokens split back unambiguously.
    """

    namespace: str
    workload: str
    container: str

    def __str__(self) -> str:
        return BUCKET_KEY_SEPARATOR.join(self)

    @property
    def workload_name(self) -> str:
        return f"{self.namespace}{WORKLOAD_SEPARATOR}{self.workload}"

    @classmethod
    def parse(cls, key: str) -> "BucketKey":
        tokens = key.split(BUCKET_KEY_SEPARATOR)
        if len(tokens) != 3:
            raise ValueError(f"Bucket key '{key}' does not have the form <namespace>_<workload>_<container>")
        return cls(*tokens)


class InstanceRecord(BaseModel):
    """One container instance's reading inside a bucket."""

    pod_name: str
    counter_value: float
    container: str
    state: HealthState

    @property
    def is_placeholder(self) -> bool:
        return self.pod_name == UNKNOWN_POD_NAME and self.counter_value == UNKNOWN_COUNTER_VALUE

    @classmethod
    def placeholder(cls, container: str) -> "InstanceRecord":
        """Stands in for an expected instance that did not report this cycle."""
        return cls(
            pod_name=UNKNOWN_POD_NAME,
            counter_value=UNKNOWN_COUNTER_VALUE,
            container=container,
            state=HealthState.UNKNOWN,
        )


class ResourceBucket(BaseModel):
    """
    The aggregation unit: all instances of one container of one workload, for
    a single counter type, during a single cycle.
    """

    key: str
    counter: CounterName
    limit: Optional[LimitValue] = None
    limit_set: Optional[bool] = None
    expected_record_count: Optional[int] = None
    workload_name: str
    workload_kind: Optional[str] = None
    namespace: str
    container: str
    records: List[InstanceRecord] = Field(default_factory=list)
    state: Optional[HealthState] = None

    @property
    def container_key(self) -> str:
        return f"{self.workload_name}{WORKLOAD_SEPARATOR}{self.container}"


class MonitorDetails(BaseModel):
    timestamp: str
    state: HealthState
    details: Dict[str, Any]


class HealthRecord(BaseModel):
    """A monitor signal as handed to the downstream telemetry emitter."""

    monitor_id: MonitorId
    monitor_instance_id: str
    details: MonitorDetails
    time_generated: str
    time_first_observed: str

    @property
    def state(self) -> HealthState:
        return self.details.state
