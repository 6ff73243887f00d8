"""KubeHealth: container CPU and memory health aggregation for Kubernetes workloads."""

__version__ = "0.3.0"
