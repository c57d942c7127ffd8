"""templet metrics schema - OpenTelemetry conventions.

Metrics:
- Counters: renders, template loads, cache hits
- Histograms: render duration, characters written

Labels/Attributes:
- template_name: Root template of a render or the loaded template
- status: Render status (success, error)
- error_code: Error code when status=error

All metrics use the 'templet_' prefix.
"""

from dataclasses import dataclass
from typing import Any

from opentelemetry import metrics
from opentelemetry.metrics import Counter, Histogram

METRIC_PREFIX = "templet"


@dataclass
class MetricLabels:
    """Standard metric labels/attributes."""

    TEMPLATE_NAME = "template_name"
    STATUS = "status"
    ERROR_CODE = "error_code"

    # Status values
    STATUS_SUCCESS = "success"
    STATUS_ERROR = "error"


class TemplateMetrics:
    """templet metrics collection."""

    def __init__(self, meter: metrics.Meter):
        """Initialize metrics.

        Args:
            meter: OpenTelemetry Meter instance
        """
        self._meter = meter
        self._setup_counters()
        self._setup_histograms()

    def _setup_counters(self) -> None:
        self.renders_total: Counter = self._meter.create_counter(
            name=f"{METRIC_PREFIX}_renders_total",
            description="Total number of render calls",
            unit="1",
        )

        self.template_loads_total: Counter = self._meter.create_counter(
            name=f"{METRIC_PREFIX}_template_loads_total",
            description="Templates read from their source and parsed",
            unit="1",
        )

        self.cache_hits_total: Counter = self._meter.create_counter(
            name=f"{METRIC_PREFIX}_cache_hits_total",
            description="Template lookups served from the parse cache",
            unit="1",
        )

    def _setup_histograms(self) -> None:
        self.render_duration_seconds: Histogram = self._meter.create_histogram(
            name=f"{METRIC_PREFIX}_render_duration_seconds",
            description="Render duration in seconds",
            unit="s",
        )

        self.output_chars: Histogram = self._meter.create_histogram(
            name=f"{METRIC_PREFIX}_output_chars",
            description="Characters written to the sink per render",
            unit="1",
        )

    def record_render(
        self,
        template_name: str,
        duration_seconds: float,
        status: str,
        chars_written: int = 0,
        error_code: str | None = None,
    ) -> None:
        """Record a completed or failed render.

        Args:
            template_name: Root template name
            duration_seconds: Render duration
            status: Render status (success, error)
            chars_written: Characters written before completion or failure
            error_code: Error code if status is error
        """
        labels: dict[str, Any] = {
            MetricLabels.TEMPLATE_NAME: template_name,
            MetricLabels.STATUS: status,
        }
        if error_code:
            labels[MetricLabels.ERROR_CODE] = error_code

        self.renders_total.add(1, labels)
        self.render_duration_seconds.record(duration_seconds, labels)
        self.output_chars.record(chars_written, {MetricLabels.TEMPLATE_NAME: template_name})

    def record_template_load(self, template_name: str, cache_hit: bool) -> None:
        """Record a template lookup.

        Args:
            template_name: Template name
            cache_hit: Whether the parsed tree came from the cache
        """
        labels = {MetricLabels.TEMPLATE_NAME: template_name}
        if cache_hit:
            self.cache_hits_total.add(1, labels)
        else:
            self.template_loads_total.add(1, labels)
