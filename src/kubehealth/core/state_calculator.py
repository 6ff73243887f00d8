# src/kubehealth/core/state_calculator.py
"""
Derives the aggregate health state of a resource bucket from the states of
its container instances.
"""

import logging
import math
from typing import Any, Callable, Dict, Optional, Set

from ..models.health import HealthState, InstanceRecord, MonitorConfig, ResourceBucket
from ..models.samples import WorkloadContainerCount
from .exceptions import MissingExpectedCountError
from .outcome import Outcome

logger = logging.getLogger(__name__)

WORKLOAD_CONTAINER_COUNT_EMPTY_EVENT = "WorkloadContainerCountEmptyEvent"


def select_state_index(size: int, state_threshold_percentage: float) -> int:
    """
    Index of the record whose state represents a bucket of `size` records
    sorted by descending usage: the bucket is at least as bad as its worst
    `state_threshold_percentage` percent of instances. Rounding up keeps more
    instances in that tail.
    """
    if size <= 1:
        return 0
    count = math.ceil(state_threshold_percentage * size / 100)
    return min(max(size - count, 0), size - 1)


class StateCalculator:
    """
    Computes bucket states for one cycle.

    `notified` is owned by the engine and lives as long as it does, so the
    missing-count event is sent once per container key for the life of the
    process rather than once per cycle.
    """

    def __init__(
        self,
        workload_container_count: WorkloadContainerCount,
        emit_event: Callable[[str, Dict[str, Any]], None],
        notified: Optional[Set[str]] = None,
    ):
        self.workload_container_count = workload_container_count
        self.emit_event = emit_event
        self.notified = notified if notified is not None else set()

    def compute(self, bucket: ResourceBucket, monitor_config: MonitorConfig) -> Outcome[HealthState]:
        if bucket.expected_record_count is None:
            bucket.state = HealthState.UNKNOWN
            self._report_missing_count(bucket)
            return Outcome.skip(MissingExpectedCountError(f"no expected instance count for {bucket.key}"))

        missing = bucket.expected_record_count - len(bucket.records)
        if missing > 0:
            # Which pods went silent is not known, only how many.
            placeholders = [InstanceRecord.placeholder(bucket.container) for _ in range(missing)]
            bucket.records = placeholders + bucket.records

        bucket.records.sort(key=lambda record: record.counter_value, reverse=True)

        if not bucket.records:
            bucket.state = HealthState.UNKNOWN
        else:
            index = select_state_index(len(bucket.records), monitor_config.state_threshold_percentage)
            bucket.state = bucket.records[index].state
        return Outcome.success(bucket.state)

    def _report_missing_count(self, bucket: ResourceBucket) -> None:
        container_key = bucket.container_key
        logger.info(
            "ContainerKey: %s Records Size: %d Record Count: %s",
            container_key,
            len(bucket.records),
            bucket.expected_record_count,
        )
        if container_key in self.notified:
            return
        self.notified.add(container_key)

        properties: Dict[str, Any] = bucket.model_dump(mode="json", exclude={"records", "limit"})
        properties["records"] = len(bucket.records)
        properties.update(self.workload_container_count)
        self.emit_event(WORKLOAD_CONTAINER_COUNT_EMPTY_EVENT, properties)
