# src/kubehealth/core/deduplicator.py
"""
Collapses duplicate counter samples collected within one gathering window,
keeping the most recent sample per (instance, counter).
"""

import logging
from typing import Dict, Iterable, List

from ..models.samples import CounterName, RawSample

logger = logging.getLogger(__name__)


def dedupe_samples(samples: Iterable[RawSample]) -> List[RawSample]:
    """Return at most one CPU and one memory sample per instance name.

    A later sample only replaces the kept one when its timestamp is strictly
    greater; on equal timestamps the first sample seen wins. Samples for
    other counters are logged and dropped. CPU samples come first in the
    result, then memory samples, each in first-seen order.
    """
    deduped: Dict[CounterName, Dict[str, RawSample]] = {CounterName.CPU: {}, CounterName.MEMORY: {}}

    for sample in samples:
        counter = sample.counter_type
        if counter is None:
            logger.info(f"Unexpected Counter Name {sample.counter_name}")
            continue

        instances = deduped[counter]
        kept = instances.get(sample.instance_name)
        if kept is None:
            instances[sample.instance_name] = sample
        elif sample.timestamp > kept.timestamp:
            logger.info(
                "Dropping older record for instance %s new: %s old: %s",
                sample.instance_name,
                sample.timestamp,
                kept.timestamp,
            )
            instances[sample.instance_name] = sample

    return list(deduped[CounterName.CPU].values()) + list(deduped[CounterName.MEMORY].values())
