"""Unit tests for templet telemetry."""

import pytest
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import InMemoryMetricReader
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from opentelemetry.trace import StatusCode

from templet.config import TelemetryConfig
from templet.telemetry import (
    MetricLabels,
    TemplateMetrics,
    get_telemetry,
    instrument_render,
    record_template_load,
    reset_telemetry,
    setup_telemetry,
)


def collect(reader: InMemoryMetricReader) -> dict:
    """Map metric name to its data points."""
    points = {}
    data = reader.get_metrics_data()
    for resource_metrics in data.resource_metrics:
        for scope_metrics in resource_metrics.scope_metrics:
            for metric in scope_metrics.metrics:
                points[metric.name] = list(metric.data.data_points)
    return points


class TestTelemetryConfig:
    """Tests for TelemetryConfig."""

    def test_default_config(self):
        """Telemetry is off by default."""
        config = TelemetryConfig()
        assert config.enabled is False
        assert config.service_name == "templet"
        assert config.metrics_enabled is True
        assert config.traces_enabled is True


class TestTelemetrySetup:
    """Tests for telemetry setup."""

    def test_setup_returns_telemetry_dict(self):
        """setup_telemetry returns meter, tracer, metrics and config."""
        telemetry = setup_telemetry()
        assert set(telemetry) == {"meter", "tracer", "metrics", "config"}
        assert isinstance(telemetry["metrics"], TemplateMetrics)
        assert telemetry["tracer"] is not None

    def test_setup_is_idempotent(self):
        """Later calls return the first setup."""
        first = setup_telemetry()
        second = setup_telemetry(TelemetryConfig(enabled=True, service_name="other"))
        assert first is second

    def test_disabled(self):
        """Disabled telemetry has no instruments."""
        telemetry = setup_telemetry(TelemetryConfig(enabled=False))
        assert telemetry["metrics"] is None
        assert telemetry["tracer"] is None

    def test_metrics_only(self):
        """traces_enabled=False skips the tracer."""
        telemetry = setup_telemetry(TelemetryConfig(enabled=True, traces_enabled=False))
        assert telemetry["tracer"] is None
        assert telemetry["metrics"] is not None

    def test_get_and_reset(self):
        """reset_telemetry forgets the setup."""
        assert get_telemetry() is None
        setup_telemetry()
        assert get_telemetry() is not None
        reset_telemetry()
        assert get_telemetry() is None


class TestTemplateMetrics:
    """Tests for TemplateMetrics recording."""

    @pytest.fixture
    def reader_and_metrics(self):
        reader = InMemoryMetricReader()
        meter = MeterProvider(metric_readers=[reader]).get_meter("test")
        return reader, TemplateMetrics(meter)

    def test_record_render(self, reader_and_metrics):
        """Renders count with status labels."""
        reader, metrics = reader_and_metrics
        metrics.record_render("t", 0.01, MetricLabels.STATUS_SUCCESS, chars_written=10)
        metrics.record_render(
            "t", 0.02, MetricLabels.STATUS_ERROR, error_code="UNKNOWN_MODIFIER"
        )

        points = collect(reader)
        statuses = {
            point.attributes[MetricLabels.STATUS]: point.value
            for point in points["templet_renders_total"]
        }
        assert statuses == {"success": 1, "error": 1}
        error_point = next(
            point
            for point in points["templet_renders_total"]
            if point.attributes[MetricLabels.STATUS] == "error"
        )
        assert error_point.attributes[MetricLabels.ERROR_CODE] == "UNKNOWN_MODIFIER"

    def test_record_template_load(self, reader_and_metrics):
        """Loads and cache hits are separate counters."""
        reader, metrics = reader_and_metrics
        metrics.record_template_load("t", cache_hit=False)
        metrics.record_template_load("t", cache_hit=True)
        metrics.record_template_load("t", cache_hit=True)

        points = collect(reader)
        assert points["templet_template_loads_total"][0].value == 1
        assert points["templet_cache_hits_total"][0].value == 2


class TestInstrumentRender:
    """Tests for the instrument_render context manager."""

    def test_noop_without_setup(self):
        """Without telemetry the context manager still works."""
        with instrument_render("t") as result:
            result["chars_written"] = 5
        assert result["status"] == MetricLabels.STATUS_SUCCESS

    def test_success(self):
        """Successful renders record metrics and an OK span."""
        reader = InMemoryMetricReader()
        exporter = InMemorySpanExporter()
        setup_telemetry(
            TelemetryConfig(enabled=True),
            metric_readers=[reader],
            span_processors=[SimpleSpanProcessor(exporter)],
        )

        with instrument_render("page") as result:
            result["chars_written"] = 42

        (span,) = exporter.get_finished_spans()
        assert span.name == "render:page"
        assert span.status.status_code == StatusCode.OK
        assert span.attributes["template.name"] == "page"

        points = collect(reader)
        assert points["templet_output_chars"][0].sum == 42

    def test_error(self):
        """Failures set the error status and code."""
        exporter = InMemorySpanExporter()
        setup_telemetry(
            TelemetryConfig(enabled=True),
            span_processors=[SimpleSpanProcessor(exporter)],
        )

        with pytest.raises(ValueError):
            with instrument_render("page") as result:
                raise ValueError("boom")

        assert result["status"] == MetricLabels.STATUS_ERROR
        assert result["error_code"] == "ValueError"
        (span,) = exporter.get_finished_spans()
        assert span.status.status_code == StatusCode.ERROR

    def test_record_template_load_noop(self):
        """record_template_load is safe without telemetry."""
        record_template_load("t", cache_hit=True)
