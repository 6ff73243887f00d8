class KubeHealthError(Exception):
    """Base exception for KubeHealth."""

    pass


class SampleError(KubeHealthError):
    """Base exception for problems with a single sample or bucket."""

    pass


class MalformedSampleError(SampleError):
    """Raised when a sample carries a counter the engine does not aggregate."""

    pass


class UnmappedInstanceError(SampleError):
    """Raised when a sample's instance key is not in the pod lookup."""

    pass


class NamingContractError(SampleError):
    """Raised when an instance or workload name does not follow the metadata source's naming convention."""

    pass


class AnomalousLimitError(SampleError):
    """Raised when a resource limit is not a plain number."""

    pass


class MissingExpectedCountError(SampleError):
    """Raised when a bucket has no known expected instance count."""

    pass


class ComputationFault(SampleError):
    """Raised when a per-record computation fails (e.g. division by a zero limit)."""

    pass
