"""templet telemetry - OpenTelemetry-based observability."""

from .instrumentation import instrument_render, record_template_load
from .metrics import MetricLabels, TemplateMetrics
from .setup import get_telemetry, reset_telemetry, setup_telemetry

__all__ = [
    # Metrics
    "TemplateMetrics",
    "MetricLabels",
    # Setup
    "setup_telemetry",
    "get_telemetry",
    "reset_telemetry",
    # Instrumentation
    "instrument_render",
    "record_template_load",
]
