# tests/core/test_state_calculator.py
"""
Unit tests for deriving a bucket's state from its instance states.
"""

import pytest

from kubehealth.core.outcome import OutcomeStatus
from kubehealth.core.state_calculator import (
    WORKLOAD_CONTAINER_COUNT_EMPTY_EVENT,
    StateCalculator,
    select_state_index,
)
from kubehealth.models.health import HealthState, InstanceRecord, ResourceBucket
from kubehealth.models.samples import CounterName, NumericLimit

SEVERITY = {HealthState.PASS: 0, HealthState.WARNING: 1, HealthState.FAIL: 2}


def _record(pod, value, state):
    return InstanceRecord(pod_name=pod, counter_value=value, container="c1", state=state)


def _bucket(records, expected=None):
    return ResourceBucket(
        key="ns1_wl1_c1",
        counter=CounterName.CPU,
        limit=NumericLimit(value=1000),
        limit_set=True,
        expected_record_count=expected,
        workload_name="ns1~~wl1",
        workload_kind="Deployment",
        namespace="ns1",
        container="c1",
        records=records,
    )


@pytest.mark.parametrize(
    "size,threshold,expected",
    [
        (1, 90, 0),
        (10, 90, 1),
        (10, 100, 0),
        (10, 10, 9),
        (3, 50, 1),  # ceil(1.5) = 2 -> index 1
        (4, 0, 3),  # no tail at all selects the least loaded instance
    ],
)
def test_select_state_index(size, threshold, expected):
    assert select_state_index(size, threshold) == expected


def test_single_record_state_is_bucket_state(monitor_config, emit_event):
    bucket = _bucket([_record("pod1", 100, HealthState.WARNING)], expected=1)

    outcome = StateCalculator({}, emit_event).compute(bucket, monitor_config)

    assert outcome.ok
    assert bucket.state == HealthState.WARNING


def test_records_are_sorted_by_descending_usage(monitor_config, emit_event):
    bucket = _bucket(
        [
            _record("pod1", 100, HealthState.PASS),
            _record("pod2", 900, HealthState.FAIL),
            _record("pod3", 600, HealthState.WARNING),
        ],
        expected=3,
    )

    StateCalculator({}, emit_event).compute(bucket, monitor_config)

    assert [r.pod_name for r in bucket.records] == ["pod2", "pod3", "pod1"]
    # A 100% threshold means the bucket is as bad as its worst instance.
    assert bucket.state == HealthState.FAIL


def test_missing_instances_are_padded_with_unknown_placeholders(monitor_config, emit_event):
    bucket = _bucket(
        [
            _record("pod1", 300, HealthState.PASS),
            _record("pod2", 200, HealthState.PASS),
            _record("pod3", 100, HealthState.PASS),
        ],
        expected=5,
    )

    StateCalculator({}, emit_event).compute(bucket, monitor_config)

    assert len(bucket.records) == 5
    placeholders = [r for r in bucket.records if r.state == HealthState.UNKNOWN]
    assert len(placeholders) == 2
    assert all(r.counter_value == -1 and r.pod_name == "???" for r in placeholders)
    # Placeholders sort to the end, so the threshold reaches them first.
    assert bucket.records[-2:] == placeholders
    assert bucket.state == HealthState.PASS


def test_placeholders_decide_state_for_low_threshold(monitor_config, emit_event):
    config = monitor_config.model_copy(update={"state_threshold_percentage": 10})
    bucket = _bucket([_record("pod1", 300, HealthState.PASS)], expected=2)

    StateCalculator({}, emit_event).compute(bucket, config)

    assert bucket.state == HealthState.UNKNOWN


def test_no_records_with_expected_count_is_unknown(monitor_config, emit_event):
    bucket = _bucket([], expected=0)

    StateCalculator({}, emit_event).compute(bucket, monitor_config)

    assert bucket.state == HealthState.UNKNOWN


def test_missing_expected_count_sets_unknown_and_notifies_once(monitor_config, emit_event):
    counts = {"other_workload_c1": 2}
    notified = set()
    calculator = StateCalculator(counts, emit_event, notified)

    first = _bucket([_record("pod1", 900, HealthState.FAIL)])
    outcome = calculator.compute(first, monitor_config)

    assert outcome.status == OutcomeStatus.SKIPPED
    assert first.state == HealthState.UNKNOWN
    # No threshold math: records are left untouched.
    assert len(first.records) == 1
    emit_event.assert_called_once()
    event_name, properties = emit_event.call_args.args
    assert event_name == WORKLOAD_CONTAINER_COUNT_EMPTY_EVENT
    assert properties["workload_name"] == "ns1~~wl1"
    assert properties["other_workload_c1"] == 2
    assert notified == {"ns1~~wl1~~c1"}

    # A later cycle sharing the same notified set stays quiet.
    StateCalculator(counts, emit_event, notified).compute(_bucket([]), monitor_config)
    assert emit_event.call_count == 1


def test_raising_threshold_never_improves_state(monitor_config, emit_event):
    values = [950, 850, 820, 700, 650, 400, 300, 100, 50, 10]
    previous = -1
    for threshold in range(0, 101, 5):
        records = []
        for i, value in enumerate(values):
            percent = value / 10
            if percent > 80:
                state = HealthState.FAIL
            elif percent > 50:
                state = HealthState.WARNING
            else:
                state = HealthState.PASS
            records.append(_record(f"pod{i}", value, state))
        bucket = _bucket(records, expected=len(values))
        config = monitor_config.model_copy(update={"state_threshold_percentage": threshold})

        StateCalculator({}, emit_event).compute(bucket, config)

        severity = SEVERITY[bucket.state]
        assert severity >= previous
        previous = severity
    assert previous == SEVERITY[HealthState.FAIL]
