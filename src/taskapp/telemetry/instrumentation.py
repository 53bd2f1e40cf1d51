"""OpenTelemetry instrumentation setup."""

import logging

from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import ConsoleMetricExporter, PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.semconv.resource import ResourceAttributes

from taskapp.config import Settings

logger = logging.getLogger(__name__)


def _signal_endpoint(base: str, path: str) -> str:
    return base if base.endswith(path) else f"{base.rstrip('/')}{path}"


class TelemetryManager:
    """Manages OpenTelemetry providers for traces and metrics."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.tracer_provider: TracerProvider | None = None
        self.meter_provider: MeterProvider | None = None

    def setup(self) -> None:
        """Initialize OpenTelemetry instrumentation."""
        if not self.settings.otel_enabled:
            logger.info("OpenTelemetry is disabled")
            return

        resource = Resource.create(
            {
                ResourceAttributes.SERVICE_NAME: self.settings.otel_service_name,
                ResourceAttributes.DEPLOYMENT_ENVIRONMENT: self.settings.environment,
                **self.settings.get_resource_attributes(),
            }
        )
        self._setup_tracing(resource)
        self._setup_metrics(resource)

        # Outbound email calls; FastAPI and SQLAlchemy are instrumented where
        # the app and engine are created
        HTTPXClientInstrumentor().instrument()
        logger.info("OpenTelemetry instrumentation initialized")

    def _setup_tracing(self, resource: Resource) -> None:
        self.tracer_provider = TracerProvider(resource=resource)

        if self.settings.otel_traces_exporter == "otlp":
            exporter = OTLPSpanExporter(
                endpoint=_signal_endpoint(self.settings.otel_exporter_otlp_endpoint, "/v1/traces"),
                headers=self.settings.get_otlp_headers(),
            )
            self.tracer_provider.add_span_processor(BatchSpanProcessor(exporter))
        elif self.settings.otel_traces_exporter == "console":
            self.tracer_provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

        trace.set_tracer_provider(self.tracer_provider)

    def _setup_metrics(self, resource: Resource) -> None:
        readers = []
        if self.settings.otel_metrics_exporter == "otlp":
            exporter = OTLPMetricExporter(
                endpoint=_signal_endpoint(self.settings.otel_exporter_otlp_endpoint, "/v1/metrics"),
                headers=self.settings.get_otlp_headers(),
            )
            readers.append(PeriodicExportingMetricReader(exporter, export_interval_millis=60000))
        elif self.settings.otel_metrics_exporter == "console":
            readers.append(
                PeriodicExportingMetricReader(ConsoleMetricExporter(), export_interval_millis=60000)
            )

        self.meter_provider = MeterProvider(resource=resource, metric_readers=readers)
        metrics.set_meter_provider(self.meter_provider)

    def shutdown(self) -> None:
        """Shutdown telemetry providers."""
        if self.tracer_provider:
            self.tracer_provider.shutdown()
        if self.meter_provider:
            self.meter_provider.shutdown()
        logger.info("OpenTelemetry shutdown complete")
