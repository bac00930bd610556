"""
OpenTelemetry Distributed Tracing

Configures OpenTelemetry for the checkout, payment and payout flows. Spans
are created around each shop's checkout unit and each distribution so a slow
or failing shop can be found in a multi-shop checkout.
"""

import logging
from opentelemetry import trace
from opentelemetry.instrumentation.django import DjangoInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

logger = logging.getLogger(__name__)

_initialized = False

# Resolves through the global provider, so spans are no-ops until setup_tracing runs
tracer = trace.get_tracer("shoplink")


def setup_tracing(
    service_name: str = "shoplink-backend",
    console_export: bool = False,
    enable: bool = True,
) -> None:
    """
    Initialize OpenTelemetry tracing.

    Args:
        service_name: Name of the service for tracing
        console_export: Print finished spans to stdout (local debugging)
        enable: Enable/disable tracing
    """
    global _initialized

    if _initialized:
        logger.warning("Tracing already initialized. Skipping.")
        return

    if not enable:
        logger.info("Tracing disabled via configuration")
        return

    resource = Resource(attributes={SERVICE_NAME: service_name})
    tracer_provider = TracerProvider(resource=resource)
    trace.set_tracer_provider(tracer_provider)

    if console_export:
        tracer_provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
        logger.info("Console span exporter enabled")

    # Auto-instrument Django (traces all HTTP requests)
    DjangoInstrumentor().instrument()

    _initialized = True
    logger.info(f"OpenTelemetry tracing initialized for service: {service_name}")


def add_span_attributes(span: trace.Span, **attributes) -> None:
    """
    Add custom attributes to a span.

    Example:
        with tracer.start_as_current_span("checkout.shop") as span:
            add_span_attributes(span, shop_id=shop_id, payment_method="cash")
    """
    for key, value in attributes.items():
        if value is not None:
            span.set_attribute(key, str(value))

