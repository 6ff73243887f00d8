# src/kubehealth/providers/base.py
"""
This module defines the abstract base class for the inputs the health
engine consumes each cycle. The counter collector and the pod metadata
source live outside the engine; a provider is the seam between them.
"""

from abc import ABC, abstractmethod

from ..models.samples import PodLookup, RawSamples, WorkloadContainerCount


class HealthInputProvider(ABC):
    """
    Abstract Base Class for everything that feeds the engine.
    """

    @abstractmethod
    def get_raw_samples(self) -> RawSamples:
        """This cycle's CPU and memory counter samples."""
        pass

    @abstractmethod
    def get_pod_lookup(self) -> PodLookup:
        """'<pod_uid>/<container>' -> workload metadata and limits."""
        pass

    @abstractmethod
    def get_workload_container_count(self) -> WorkloadContainerCount:
        """Bucket key -> number of instances expected to report."""
        pass
