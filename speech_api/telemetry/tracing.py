from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from speech_api.config import Settings


def configure_tracing(settings: Settings) -> bool:
    if not settings.otel_endpoint:
        return False

    resource = Resource.create(
        {
            "service.name": "speech-api",
            "service.version": settings.stack_version,
            "deployment.environment": settings.env,
        }
    )
    provider = TracerProvider(resource=resource)
    provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=str(settings.otel_endpoint))))
    trace.set_tracer_provider(provider)
    return True
