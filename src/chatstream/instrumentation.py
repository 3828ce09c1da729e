"""Tracing hooks for stream sessions.

Tracing is off until ``instrument()`` is called. While off, every span
helper yields ``None`` and the record helpers do nothing, so the
``opentelemetry-api`` package is only needed when tracing is wanted.
"""

import importlib.util
import logging
from contextlib import asynccontextmanager

logger = logging.getLogger(__name__)

_tracer = None


def instrument(*, tracer_name: str = "chatstream") -> None:
    """Start emitting one span per stream session.

    Spans go to whatever TracerProvider is globally registered, so set
    that up first. Install the extra with ``pip install chatstream[otel]``.

    Raises:
        ImportError: ``opentelemetry-api`` is missing.
    """
    global _tracer
    if importlib.util.find_spec("opentelemetry.trace") is None:
        raise ImportError(
            "Session tracing needs opentelemetry-api; "
            "pip install chatstream[otel]"
        )
    from opentelemetry import trace
    _tracer = trace.get_tracer(tracer_name)
    if isinstance(_tracer, trace.NoOpTracer):
        logger.info(
            "No TracerProvider configured: stream spans are dropped"
        )
    else:
        logger.info(f"Tracing stream sessions as {tracer_name!r}")


def uninstrument() -> None:
    """Stop emitting session spans."""
    global _tracer
    _tracer = None


@asynccontextmanager
async def stream_span(url: str, model: str):
    """Wrap one streaming session in a ``chat`` span."""
    if _tracer is None:
        yield None
        return
    from opentelemetry.trace import SpanKind

    with _tracer.start_as_current_span(
        f"chat {model}",
        kind=SpanKind.CLIENT,
        attributes={
            "gen_ai.operation.name": "chat",
            "gen_ai.request.model": model,
            "server.address": url,
        },
    ) as span:
        yield span


def record_records(span, records: int, skipped: int = 0) -> None:
    """Set decoded/skipped record counters on a span."""
    if span is None:
        return
    span.set_attribute("chatstream.records", records)
    if skipped:
        span.set_attribute("chatstream.records.skipped", skipped)


def record_error(span, exception: BaseException) -> None:
    """Record an exception and set ERROR status on a span.

    No-ops when *span* is ``None`` (tracing disabled).
    """
    if span is None:
        return
    from opentelemetry.trace import StatusCode

    span.set_status(StatusCode.ERROR, str(exception))
    span.record_exception(exception)
    span.set_attribute(
        "error.type", type(exception).__qualname__
    )
