# src/kubehealth/core/emitter.py
"""
Formats computed buckets and disappearance transitions into HealthRecords
for the downstream telemetry emitter.
"""

import hashlib
import logging
from typing import Any, Callable, Dict, List, Optional, Set

from ..models.health import (
    BUCKET_KEY_SEPARATOR,
    BucketKey,
    HealthRecord,
    HealthState,
    InstanceRecord,
    MonitorDetails,
    MonitorId,
    ResourceBucket,
)
from ..models.samples import AnomalousLimit, NumericLimit

logger = logging.getLogger(__name__)

LIMIT_IS_ARRAY_EVENT = "ResourceLimitIsAnArrayEvent"
NANOCORES_PER_MILLICORE = 1000000.0
DEFAULT_CPU_LIMIT_MILLICORES = 1.0


def get_monitor_instance_id(monitor_id: MonitorId, tokens: List[str]) -> str:
    """Stable id for one monitor on one bucket: '<monitor_id>-<md5 of the joined key tokens>'."""
    digest = hashlib.md5("/".join(tokens).encode("utf-8")).hexdigest()
    return f"{MonitorId(monitor_id).value}-{digest}"


def _to_millicores(record: InstanceRecord) -> Dict[str, Any]:
    usage = record.model_dump(mode="json")
    usage["counter_value"] = record.counter_value / NANOCORES_PER_MILLICORE
    return usage


class RecordEmitter:
    """
    Builds HealthRecords for one cycle.

    `limit_notified` is owned by the engine; an anomalous limit is reported
    once per bucket key for the life of the engine.
    """

    def __init__(
        self,
        emit_event: Callable[[str, Dict[str, Any]], None],
        limit_notified: Optional[Set[str]] = None,
    ):
        self.emit_event = emit_event
        self.limit_notified = limit_notified if limit_notified is not None else set()

    def _health_record(self, monitor_id: MonitorId, key: str, state: HealthState, details, time_now: str):
        return HealthRecord(
            monitor_id=monitor_id,
            monitor_instance_id=get_monitor_instance_id(monitor_id, key.split(BUCKET_KEY_SEPARATOR)),
            details=MonitorDetails(timestamp=time_now, state=state, details=details),
            time_generated=time_now,
            time_first_observed=time_now,
        )

    def cpu_limit_millicores(self, bucket: ResourceBucket) -> float:
        if isinstance(bucket.limit, NumericLimit):
            return bucket.limit.value / NANOCORES_PER_MILLICORE

        raw = bucket.limit.raw if isinstance(bucket.limit, AnomalousLimit) else None
        logger.info(f"CPU Limit is not a number {raw}")
        if isinstance(bucket.limit, AnomalousLimit) and bucket.key not in self.limit_notified:
            self.limit_notified.add(bucket.key)
            self.emit_event(LIMIT_IS_ARRAY_EVENT, bucket.limit.as_properties())
        return DEFAULT_CPU_LIMIT_MILLICORES

    def cpu_record(self, bucket: ResourceBucket, time_now: str) -> HealthRecord:
        details = {
            "cpu_limit_millicores": self.cpu_limit_millicores(bucket),
            "cpu_usage_instances": [_to_millicores(r) for r in bucket.records],
            "workload_name": bucket.workload_name,
            "workload_kind": bucket.workload_kind,
            "namespace": bucket.namespace,
            "container": bucket.container,
            "limit_set": bucket.limit_set,
        }
        return self._health_record(MonitorId.CONTAINER_CPU, bucket.key, bucket.state, details, time_now)

    def memory_record(self, bucket: ResourceBucket, time_now: str) -> HealthRecord:
        if isinstance(bucket.limit, NumericLimit):
            limit = bucket.limit.value
        elif isinstance(bucket.limit, AnomalousLimit):
            logger.info(f"Memory Limit is not a number {bucket.limit.raw}")
            limit = bucket.limit.raw
        else:
            limit = None

        details = {
            "memory_limit_bytes": limit,
            "memory_usage_instances": [r.model_dump(mode="json") for r in bucket.records],
            "workload_name": bucket.workload_name,
            "workload_kind": bucket.workload_kind,
            "namespace": bucket.namespace,
            "container": bucket.container,
            "limit_set": bucket.limit_set,
        }
        return self._health_record(MonitorId.CONTAINER_MEMORY, bucket.key, bucket.state, details, time_now)

    def none_record(self, monitor_id: MonitorId, key: str, time_now: str) -> HealthRecord:
        """Transition record for a bucket that reported last cycle and is silent now."""
        bucket_key = BucketKey.parse(key)
        details = {
            "reason": f"No record received for workload {bucket_key.workload_name}",
            "workload_name": bucket_key.workload_name,
            "namespace": bucket_key.namespace,
            "container": bucket_key.container,
        }
        return self._health_record(monitor_id, key, HealthState.NONE, details, time_now)
