# src/kubehealth/core/telemetry.py
"""Initializes OpenTelemetry services and reports diagnostic events for KubeHealth."""

import logging
from typing import Any, Callable, Dict, Optional

from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from .config import config

logger = logging.getLogger(__name__)

EventEmitter = Callable[[str, Dict[str, Any]], None]


def initialize_telemetry(endpoint: Optional[str] = None):
    """
    Configures and initializes the TracerProvider and MeterProvider for OpenTelemetry.
    Data will be exported via OTLP/HTTP.
    """
    endpoint = endpoint or config.OTEL_EXPORTER_OTLP_ENDPOINT
    resource = Resource(attributes={SERVICE_NAME: "kubehealth-agent"})

    # --- Tracing Configuration ---
    tracer_provider = TracerProvider(resource=resource)
    span_exporter = OTLPSpanExporter(endpoint=f"{endpoint}/v1/traces")
    tracer_provider.add_span_processor(BatchSpanProcessor(span_exporter))
    trace.set_tracer_provider(tracer_provider)

    # --- Metrics Configuration ---
    metric_reader = PeriodicExportingMetricReader(OTLPMetricExporter(endpoint=f"{endpoint}/v1/metrics"))
    meter_provider = MeterProvider(resource=resource, metric_readers=[metric_reader])
    metrics.set_meter_provider(meter_provider)
    logger.info(f"OpenTelemetry initialized. Exporting to: {endpoint}")


# Make the tracer and meter globally accessible
tracer = trace.get_tracer("kubehealth.tracer")
meter = metrics.get_meter("kubehealth.meter")


def _attribute_value(value: Any):
    if isinstance(value, (str, bool, int, float)):
        return value
    return str(value)


class DiagnosticEventReporter:
    """
    Fire-and-forget sink for anomaly events raised while computing health
    (limits in an unexpected shape, workloads without an expected count).

    Each event increments a counter, is attached to the current span and is
    logged. Reporting failures are logged and never reach the caller.
    """

    def __init__(self):
        self._counter = meter.create_counter(
            "kubehealth.diagnostic_events",
            description="Diagnostic events raised by the health aggregation engine.",
        )

    def send_event(self, event_name: str, properties: Dict[str, Any]) -> None:
        try:
            attributes = {str(k): _attribute_value(v) for k, v in (properties or {}).items()}
            self._counter.add(1, {"event_name": event_name})
            trace.get_current_span().add_event(event_name, attributes=attributes)
            logger.info("Diagnostic event %s: %s", event_name, attributes)
        except Exception as e:
            logger.warning(f"Failed to send diagnostic event '{event_name}': {e}")
