import os
from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor

def init_tracing(default_service: str) -> TracerProvider:
    """Export spans over OTLP/HTTP and trace every request sent through httpx."""
    endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://localhost:4318")
    svc = os.getenv("OTEL_SERVICE_NAME", default_service)
    tp = TracerProvider(resource=Resource.create({"service.name": svc}))
    tp.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=f"{endpoint}/v1/traces")))
    trace.set_tracer_provider(tp)
    # client spans for every outgoing request
    HTTPXClientInstrumentor().instrument()
    return tp
