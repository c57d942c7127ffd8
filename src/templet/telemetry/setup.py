"""templet telemetry setup - OpenTelemetry initialization.

Creates a MeterProvider and TracerProvider scoped to templet. Providers are
not installed globally, so embedding applications keep control of their own
OpenTelemetry configuration; pass metric readers and span processors to
export the data.
"""

from collections.abc import Sequence
from typing import Any

from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import MetricReader
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import SpanProcessor, TracerProvider

from templet.config.models import TelemetryConfig

from .metrics import METRIC_PREFIX, TemplateMetrics

# Global telemetry state
_telemetry: dict[str, Any] | None = None


def setup_telemetry(
    config: TelemetryConfig | None = None,
    metric_readers: Sequence[MetricReader] | None = None,
    span_processors: Sequence[SpanProcessor] | None = None,
) -> dict[str, Any]:
    """Set up OpenTelemetry instrumentation.

    Idempotent: the first call wins until reset_telemetry() is called.

    Args:
        config: Telemetry configuration (uses defaults if None)
        metric_readers: Readers attached to the meter provider
        span_processors: Processors attached to the tracer provider

    Returns:
        Dictionary with meter, tracer, metrics and config entries
    """
    global _telemetry  # noqa: PLW0603

    if _telemetry is not None:
        return _telemetry

    config = config or TelemetryConfig(enabled=True)

    if not config.enabled:
        _telemetry = {
            "meter": None,
            "tracer": None,
            "metrics": None,
            "config": config,
        }
        return _telemetry

    resource = Resource.create(
        {
            SERVICE_NAME: config.service_name,
            SERVICE_VERSION: config.service_version,
            **config.attributes,
        }
    )

    meter = None
    template_metrics = None
    if config.metrics_enabled:
        meter_provider = MeterProvider(
            metric_readers=list(metric_readers or []),
            resource=resource,
        )
        meter = meter_provider.get_meter(METRIC_PREFIX, config.service_version)
        template_metrics = TemplateMetrics(meter)

    tracer = None
    if config.traces_enabled:
        tracer_provider = TracerProvider(resource=resource)
        for processor in span_processors or []:
            tracer_provider.add_span_processor(processor)
        tracer = tracer_provider.get_tracer(METRIC_PREFIX, config.service_version)

    _telemetry = {
        "meter": meter,
        "tracer": tracer,
        "metrics": template_metrics,
        "config": config,
    }
    return _telemetry


def get_telemetry() -> dict[str, Any] | None:
    """Get the telemetry set up by setup_telemetry(), or None."""
    return _telemetry


def reset_telemetry() -> None:
    """Forget the current telemetry state (used by tests)."""
    global _telemetry  # noqa: PLW0603
    _telemetry = None
