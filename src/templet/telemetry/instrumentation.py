"""templet telemetry instrumentation helpers.

Records a span and render metrics around each render call. Without
setup_telemetry() every helper is a no-op.
"""

import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from opentelemetry.trace import Status, StatusCode

from .metrics import MetricLabels
from .setup import get_telemetry


@contextmanager
def instrument_render(template_name: str) -> Iterator[dict[str, Any]]:
    """Context manager for instrumenting a render call.

    Records:
    - Render counter and duration histogram
    - Characters written histogram
    - Trace span for the render

    Args:
        template_name: Root template name

    Yields:
        Dictionary to store render status and chars_written
    """
    telemetry = get_telemetry()
    start_time = time.perf_counter()
    result: dict[str, Any] = {
        "status": MetricLabels.STATUS_SUCCESS,
        "error_code": None,
        "chars_written": 0,
    }

    tracer = telemetry["tracer"] if telemetry else None
    metrics = telemetry["metrics"] if telemetry else None

    span = None
    if tracer:
        span = tracer.start_span(f"render:{template_name}")
        span.set_attribute("template.name", template_name)

    try:
        yield result
    except Exception as e:
        result["status"] = MetricLabels.STATUS_ERROR
        result["error_code"] = getattr(e, "code", None) or type(e).__name__
        if span:
            span.set_status(Status(StatusCode.ERROR, str(e)))
            span.record_exception(e)
        raise
    finally:
        duration = time.perf_counter() - start_time

        if metrics:
            metrics.record_render(
                template_name=template_name,
                duration_seconds=duration,
                status=result["status"],
                chars_written=result["chars_written"],
                error_code=result.get("error_code"),
            )

        if span:
            span.set_attribute("template.chars_written", result["chars_written"])
            if result["status"] == MetricLabels.STATUS_SUCCESS:
                span.set_status(Status(StatusCode.OK))
            span.end()


def record_template_load(template_name: str, cache_hit: bool) -> None:
    """Record a template cache lookup if telemetry is set up.

    Args:
        template_name: Template name
        cache_hit: Whether the parsed tree came from the cache
    """
    telemetry = get_telemetry()
    metrics = telemetry["metrics"] if telemetry else None
    if metrics:
        metrics.record_template_load(template_name, cache_hit)
