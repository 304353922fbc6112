"""
MiddleForge OpenTelemetry Tracing

Every bound handler runs inside a chain span. Until `configure_tracing`
installs an SDK provider, the OpenTelemetry API hands out non-recording
spans, so tracing costs next to nothing when nobody collects it.
"""

import logging
from contextlib import contextmanager
from typing import Any

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from middleforge.utils.config import ConfigError

logger = logging.getLogger(__name__)

TRACER_NAME = "middleforge"

# Global tracer instance
_tracer: trace.Tracer | None = None


def configure_tracing(
    service_name: str = "middleforge",
    exporter: Any = None,
    enabled: bool = True,
) -> None:
    """
    Configure OpenTelemetry tracing.

    Args:
        service_name: Name of the service for tracing
        exporter: Custom span exporter (defaults to console)
        enabled: Whether tracing is enabled

    Requires: pip install middleforge[observability]

    Usage:
        from middleforge.utils.tracing import configure_tracing
        configure_tracing(service_name="my-api")
    """
    global _tracer

    if not enabled:
        logger.info("Tracing disabled, using the default tracer provider")
        _tracer = trace.get_tracer(TRACER_NAME)
        return

    try:
        from opentelemetry.sdk.resources import Resource
        from opentelemetry.sdk.trace import TracerProvider
        from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
    except ImportError:
        raise ConfigError(
            "opentelemetry-sdk is required to export traces. "
            "Install with: pip install middleforge[observability]"
        )

    resource = Resource.create({"service.name": service_name})
    provider = TracerProvider(resource=resource)

    if exporter is None:
        exporter = ConsoleSpanExporter()

    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)

    _tracer = trace.get_tracer(TRACER_NAME)
    logger.info(f"Tracing configured for service: {service_name}")


def get_tracer() -> trace.Tracer:
    """Get the configured tracer instance"""
    global _tracer
    if _tracer is None:
        _tracer = trace.get_tracer(TRACER_NAME)
    return _tracer


@contextmanager
def trace_span(
    name: str,
    attributes: dict[str, Any] | None = None,
    record_exception: bool = True,
):
    """
    Context manager for creating a traced span.

    Usage:
        with trace_span("authenticate", attributes={"user": "alice"}):
            await check_credentials()
    """
    tracer = get_tracer()

    with tracer.start_as_current_span(
        name,
        attributes=attributes,
        record_exception=False,
        set_status_on_exception=False,
    ) as span:
        try:
            yield span
        except Exception as e:
            if record_exception:
                span.record_exception(e)
            span.set_status(Status(StatusCode.ERROR, str(e)))
            raise


class ChainTracer:
    """
    Tracer for one assembled chain.

    Usage:
        tracer = ChainTracer("api")
        with tracer.chain_span(total_middleware=3):
            await run_chain(...)
    """

    def __init__(self, chain_name: str):
        self.chain_name = chain_name

    def _base_attributes(self) -> dict[str, Any]:
        return {"chain.name": self.chain_name}

    @contextmanager
    def chain_span(self, total_middleware: int | None = None):
        """Create a span for the entire chain execution"""
        attrs = self._base_attributes()
        if total_middleware is not None:
            attrs["chain.total_middleware"] = total_middleware

        with trace_span(f"chain.{self.chain_name}", attributes=attrs) as span:
            yield span
