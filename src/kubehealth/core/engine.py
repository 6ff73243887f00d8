# src/kubehealth/core/engine.py
"""
The health aggregation engine: turns one cycle of raw container counters into
CPU and memory HealthRecords, remembering across cycles which buckets it has
signaled so that disappearances are reported.
"""

import logging
import threading
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Set

from ..models.health import HealthRecord, HealthState, MonitorConfig, MonitorId, ResourceBucket
from ..models.samples import CounterName, PodLookup, RawSample, WorkloadContainerCount
from ..providers.base import HealthInputProvider
from ..utils.date_utils import to_iso_z, utc_now
from .aggregator import ResourceAggregator
from .config import Config, config
from .deduplicator import dedupe_samples
from .emitter import RecordEmitter
from .state_calculator import StateCalculator
from .telemetry import DiagnosticEventReporter, EventEmitter, tracer
from .transitions import TransitionTracker

logger = logging.getLogger(__name__)


class HealthAggregationEngine:
    """
    Computes container CPU/memory health, one cycle at a time.

    State that outlives a cycle is held on the instance and starts empty:
    the CPU and memory transition histories, and the sets of buckets for
    which a diagnostic event was already sent. Bucket maps are rebuilt on
    every `aggregate` call. Cycles on one instance are serialized by a lock;
    independent resource kinds should use separate instances.
    """

    def __init__(
        self,
        provider: Optional[HealthInputProvider] = None,
        settings: Config = config,
        emit_event: Optional[EventEmitter] = None,
    ):
        self.provider = provider
        self.settings = settings
        self._emit_event = emit_event if emit_event is not None else DiagnosticEventReporter().send_event

        self.cpu_history = TransitionTracker("cpu")
        self.memory_history = TransitionTracker("memory")
        self.workload_container_count_empty_event_sent: Set[str] = set()
        self.limit_is_array_event_sent: Set[str] = set()

        self.workload_container_count: WorkloadContainerCount = {}
        self.cpu_buckets: Dict[str, ResourceBucket] = {}
        self.memory_buckets: Dict[str, ResourceBucket] = {}
        self._lock = threading.Lock()

    def _send_event(self, event_name: str, properties: Dict[str, Any]) -> None:
        try:
            self._emit_event(event_name, properties)
        except Exception as e:
            logger.warning(f"Diagnostic event '{event_name}' could not be sent: {e}")

    def monitor_configs(self) -> Dict[CounterName, MonitorConfig]:
        return {
            counter: self.settings.get_monitor_config(MonitorId.for_counter(counter)) for counter in CounterName
        }

    def aggregate(
        self,
        samples: Iterable[RawSample],
        pod_lookup: PodLookup,
        workload_container_count: WorkloadContainerCount,
        monitor_configs: Optional[Dict[CounterName, MonitorConfig]] = None,
    ) -> None:
        """Deduplicate the samples and build this cycle's CPU and memory buckets."""
        self.workload_container_count = dict(workload_container_count or {})
        aggregator = ResourceAggregator(
            pod_lookup or {},
            self.workload_container_count,
            monitor_configs or self.monitor_configs(),
        )
        aggregator.aggregate(dedupe_samples(samples))
        self.cpu_buckets = aggregator.cpu_buckets
        self.memory_buckets = aggregator.memory_buckets
        logger.info(
            "Aggregated %d CPU and %d memory bucket(s)",
            len(self.cpu_buckets),
            len(self.memory_buckets),
        )

    def compute_state(self, monitor_configs: Optional[Dict[CounterName, MonitorConfig]] = None) -> None:
        monitor_configs = monitor_configs or self.monitor_configs()
        calculator = StateCalculator(
            self.workload_container_count,
            self._send_event,
            self.workload_container_count_empty_event_sent,
        )
        for counter, buckets in ((CounterName.MEMORY, self.memory_buckets), (CounterName.CPU, self.cpu_buckets)):
            for key, bucket in buckets.items():
                try:
                    calculator.compute(bucket, monitor_configs[counter])
                except Exception as e:
                    logger.warning(f"Failed to compute {counter.name} state for {key}: {e}", exc_info=True)
                    bucket.state = HealthState.UNKNOWN
        logger.info("Finished computing state")

    def _bucket_records(
        self, buckets: Dict[str, ResourceBucket], history: TransitionTracker, build, time_now: str
    ) -> List[HealthRecord]:
        records = []
        for key, bucket in buckets.items():
            # Still reporting, so no transition is needed for this key.
            history.mark_present(key)
            if bucket.state is None:
                bucket.state = HealthState.UNKNOWN
            try:
                records.append(build(bucket, time_now))
            except Exception as e:
                logger.error(f"Failed to build health record for {key}: {e}", exc_info=True)
        return records

    def _none_records(
        self, monitor_id: MonitorId, history: TransitionTracker, emitter: RecordEmitter, time_now: str
    ) -> List[HealthRecord]:
        records = []
        for key in history.missing_keys():
            logger.info(f"{monitor_id.value} monitor {key} not present in current set. Sending none state transition")
            try:
                records.append(emitter.none_record(monitor_id, key, time_now))
            except Exception as e:
                logger.error(f"Error when trying to create NONE state transition signal for {key}: {e}")
        return records

    def get_records(self, now: Optional[datetime] = None) -> List[HealthRecord]:
        """
        Emit this cycle's records: CPU buckets, CPU transitions, memory
        buckets, memory transitions. The transition histories are replaced
        with this cycle's bucket keys afterwards.
        """
        time_now = to_iso_z((now or utc_now()).replace(microsecond=0))
        emitter = RecordEmitter(self._send_event, self.limit_is_array_event_sent)

        records: List[HealthRecord] = []
        records.extend(self._bucket_records(self.cpu_buckets, self.cpu_history, emitter.cpu_record, time_now))
        records.extend(self._none_records(MonitorId.CONTAINER_CPU, self.cpu_history, emitter, time_now))
        records.extend(
            self._bucket_records(self.memory_buckets, self.memory_history, emitter.memory_record, time_now)
        )
        records.extend(self._none_records(MonitorId.CONTAINER_MEMORY, self.memory_history, emitter, time_now))

        self.cpu_history.commit(self.cpu_buckets.keys())
        self.memory_history.commit(self.memory_buckets.keys())
        return records

    def run_cycle(
        self,
        samples: Iterable[RawSample],
        pod_lookup: PodLookup,
        workload_container_count: WorkloadContainerCount,
        now: Optional[datetime] = None,
    ) -> List[HealthRecord]:
        """Run aggregate, compute_state and get_records over explicitly supplied inputs."""
        with self._lock, tracer.start_as_current_span("kubehealth.cycle"):
            monitor_configs = self.monitor_configs()
            self.aggregate(samples, pod_lookup, workload_container_count, monitor_configs)
            self.compute_state(monitor_configs)
            records = self.get_records(now)
        logger.info(f"Cycle produced {len(records)} health record(s)")
        return records

    def compute_cycle(self, now: Optional[datetime] = None) -> List[HealthRecord]:
        """Pull this cycle's inputs from the provider and compute its health records."""
        if self.provider is None:
            raise ValueError("compute_cycle requires an input provider")
        return self.run_cycle(
            self.provider.get_raw_samples(),
            self.provider.get_pod_lookup(),
            self.provider.get_workload_container_count(),
            now=now,
        )
