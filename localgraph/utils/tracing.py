"""OpenTelemetry tracing setup."""

from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

from localgraph.config import settings


def setup_tracing() -> None:
    """Setup OpenTelemetry tracing with console exporter."""
    if not settings.enable_tracing:
        return

    provider = TracerProvider()
    trace.set_tracer_provider(provider)

    console_exporter = ConsoleSpanExporter()
    span_processor = BatchSpanProcessor(console_exporter)
    provider.add_span_processor(span_processor)


def get_tracer(name: str):
    """Get tracer instance.

    Args:
        name: Tracer name.

    Returns:
        Tracer instance.
    """
    return trace.get_tracer(name)


def get_trace_id() -> str:
    """Get current trace ID.

    Returns:
        Trace ID as string, empty when no span is recording.
    """
    span = trace.get_current_span()
    context = span.get_span_context()
    if context.is_valid:
        return format(context.trace_id, "032x")
    return ""
