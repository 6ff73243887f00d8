# src/kubehealth/core/transitions.py
"""
Tracks which buckets were signaled in the previous cycle so that a bucket
which stops reporting gets exactly one explicit 'none' record.
"""

import logging
from typing import Iterable, List, Set

logger = logging.getLogger(__name__)


class TransitionTracker:
    """
    History of bucket keys for one counter type.

    Per cycle: `mark_present` for every live bucket, `missing_keys` for the
    ones that disappeared, then `commit` with the live keys. The history is
    empty when the tracker is created.
    """

    def __init__(self, name: str):
        self.name = name
        self._last_sent: Set[str] = set()

    @property
    def last_sent(self) -> Set[str]:
        return set(self._last_sent)

    def mark_present(self, key: str) -> None:
        self._last_sent.discard(key)

    def missing_keys(self) -> List[str]:
        """Keys signaled last cycle and not marked present in this one."""
        return sorted(self._last_sent)

    def commit(self, current_keys: Iterable[str]) -> None:
        self._last_sent = set(current_keys)
        logger.debug("%s history now holds %d bucket(s)", self.name, len(self._last_sent))
