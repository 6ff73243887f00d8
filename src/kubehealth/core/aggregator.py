# src/kubehealth/core/aggregator.py
"""
Groups deduplicated counter samples into per-(namespace, workload, container)
resource buckets, one map for CPU and one for memory, and computes the health
state of every individual container instance.

The pod lookup is keyed by '<pod_uid>/<container>', the last two segments of
a sample's instance name. Workload names arrive as '<namespace>~~<workload>'.
Both conventions belong to the pod metadata source and are validated here
rather than guessed around.
"""

import logging
from typing import Dict, Iterable, Optional

from ..models.health import (
    BUCKET_KEY_SEPARATOR,
    WORKLOAD_SEPARATOR,
    BucketKey,
    HealthState,
    InstanceRecord,
    MonitorConfig,
    ResourceBucket,
)
from ..models.samples import (
    AnomalousLimit,
    CounterName,
    LimitValue,
    PodLookup,
    RawSample,
    WorkloadContainerCount,
)
from .exceptions import (
    AnomalousLimitError,
    ComputationFault,
    MalformedSampleError,
    NamingContractError,
    UnmappedInstanceError,
)
from .outcome import Outcome, OutcomeStatus

logger = logging.getLogger(__name__)


def instance_lookup_key(instance_name: str) -> str:
    """Return '<pod_uid>/<container>' from an instance name such as '<cluster>/<pod_uid>/<container>'."""
    segments = instance_name.split("/")
    if len(segments) < 2 or not all(segments[-2:]):
        raise NamingContractError(f"Instance name '{instance_name}' has no '<pod>/<container>' suffix")
    return "/".join(segments[-2:])


def workload_short_name(workload_name: str) -> str:
    """Strip the '<namespace>~~' prefix the metadata source puts on workload names."""
    tokens = workload_name.split(WORKLOAD_SEPARATOR)
    if len(tokens) != 2 or not tokens[1]:
        raise NamingContractError(f"Workload name '{workload_name}' is not of the form '<namespace>~~<workload>'")
    return tokens[1]


def make_bucket_key(namespace: str, workload_name: str, container: str) -> BucketKey:
    key = BucketKey(namespace, workload_short_name(workload_name), container)
    if any(BUCKET_KEY_SEPARATOR in token or not token for token in key):
        raise NamingContractError(f"Cannot build a bucket key from {tuple(key)}")
    return key


def calculate_instance_state(
    counter_value: float, limit: Optional[LimitValue], monitor_config: MonitorConfig
) -> Outcome[HealthState]:
    """Classify one reading against its limit using the monitor's fail/warn percentages."""
    if limit is None:
        return Outcome.fault(ComputationFault("no limit is available for this container"))
    if isinstance(limit, AnomalousLimit):
        return Outcome.fault(AnomalousLimitError(f"limit is not a number: {limit.raw!r}"))
    if limit.value == 0:
        return Outcome.fault(ComputationFault("limit is zero"))

    percent_value = counter_value * 100 / limit.value
    if percent_value > monitor_config.fail_threshold_percentage:
        return Outcome.success(HealthState.FAIL)
    elif percent_value > monitor_config.warn_threshold_percentage:
        return Outcome.success(HealthState.WARNING)
    return Outcome.success(HealthState.PASS)


class ResourceAggregator:
    """Builds one cycle's CPU and memory buckets from deduplicated samples."""

    def __init__(
        self,
        pod_lookup: PodLookup,
        workload_container_count: WorkloadContainerCount,
        monitor_configs: Dict[CounterName, MonitorConfig],
    ):
        self.pod_lookup = pod_lookup
        self.workload_container_count = workload_container_count
        self.monitor_configs = monitor_configs
        self.cpu_buckets: Dict[str, ResourceBucket] = {}
        self.memory_buckets: Dict[str, ResourceBucket] = {}

    def buckets_for(self, counter: CounterName) -> Dict[str, ResourceBucket]:
        return self.cpu_buckets if counter == CounterName.CPU else self.memory_buckets

    def aggregate(self, samples: Iterable[RawSample]) -> None:
        for sample in samples:
            try:
                outcome = self.add_sample(sample)
            except Exception as e:
                outcome = Outcome.fault(ComputationFault(f"unexpected error: {e}"))

            if outcome.status == OutcomeStatus.FAULT:
                logger.warning(
                    "Skipping sample for instance %s (%s=%s): %s",
                    sample.instance_name,
                    sample.counter_name,
                    sample.counter_value,
                    outcome.error,
                )
            elif outcome.status == OutcomeStatus.SKIPPED:
                logger.debug("Skipping sample for instance %s: %s", sample.instance_name, outcome.error)

    def add_sample(self, sample: RawSample) -> Outcome[InstanceRecord]:
        """Attach one sample to its bucket, creating the bucket on first touch."""
        counter = sample.counter_type
        if counter is None:
            return Outcome.skip(MalformedSampleError(f"Unexpected Counter Name {sample.counter_name}"))

        try:
            lookup_key = instance_lookup_key(sample.instance_name)
        except NamingContractError as e:
            return Outcome.fault(e)

        entry = self.pod_lookup.get(lookup_key)
        if entry is None:
            # Pods that are starting or terminating are not in the lookup yet.
            return Outcome.skip(UnmappedInstanceError(f"'{lookup_key}' is not in the pod lookup"))

        container_name = lookup_key.split("/")[1]
        try:
            bucket_key = str(make_bucket_key(entry.namespace, entry.workload_name, container_name))
        except NamingContractError as e:
            return Outcome.fault(e)

        buckets = self.buckets_for(counter)
        bucket = buckets.get(bucket_key)
        if bucket is None:
            bucket = ResourceBucket(
                key=bucket_key,
                counter=counter,
                limit=entry.limit_for(counter),
                limit_set=entry.limit_set_for(counter),
                expected_record_count=self.workload_container_count.get(bucket_key),
                workload_name=entry.workload_name,
                workload_kind=entry.workload_kind,
                namespace=entry.namespace,
                container=entry.container,
            )
            buckets[bucket_key] = bucket

        state = calculate_instance_state(sample.counter_value, bucket.limit, self.monitor_configs[counter])
        if not state.ok:
            return Outcome.fault(state.error)

        record = InstanceRecord(
            pod_name=entry.pod_name,
            counter_value=sample.counter_value,
            container=entry.container,
            state=state.value,
        )
        bucket.records.append(record)
        return Outcome.success(record)
