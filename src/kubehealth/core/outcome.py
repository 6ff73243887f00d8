# src/kubehealth/core/outcome.py
"""
Per-item processing results. Each step over a sample or bucket returns an
Outcome instead of raising, and the calling loop decides how to log it.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

from .exceptions import SampleError

T = TypeVar("T")


class OutcomeStatus(str, Enum):
    OK = "ok"
    SKIPPED = "skipped"
    FAULT = "fault"


@dataclass
class Outcome(Generic[T]):
    status: OutcomeStatus
    value: Optional[T] = None
    error: Optional[SampleError] = None

    @property
    def ok(self) -> bool:
        return self.status == OutcomeStatus.OK

    @classmethod
    def success(cls, value: T) -> "Outcome[T]":
        return cls(OutcomeStatus.OK, value=value)

    @classmethod
    def skip(cls, error: SampleError) -> "Outcome[T]":
        """An expected condition; the item is dropped quietly."""
        return cls(OutcomeStatus.SKIPPED, error=error)

    @classmethod
    def fault(cls, error: SampleError) -> "Outcome[T]":
        """An unexpected condition; the item is dropped and the caller logs it."""
        return cls(OutcomeStatus.FAULT, error=error)
