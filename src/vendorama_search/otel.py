"""OpenTelemetry configuration for the Vendorama search client."""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Iterator, Mapping, Optional
from urllib.parse import unquote

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from opentelemetry.sdk.trace import TracerProvider

_tracer_provider: Optional["TracerProvider"] = None
_otel_initialized = False


def _is_truthy_env(value: str | None) -> bool:
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def is_otel_enabled() -> bool:
    """Check if OpenTelemetry is enabled."""
    return _is_truthy_env(os.getenv("ENABLE_OTEL"))


def _parse_otlp_headers(raw: str | None) -> dict[str, str]:
    headers: dict[str, str] = {}
    if not raw:
        return headers

    for entry in raw.split(","):
        entry = entry.strip()
        if not entry:
            continue
        if "=" not in entry:
            logger.warning("Malformed OTLP header entry (missing '='): %r", entry)
            continue
        key, value = entry.split("=", 1)
        key = key.strip()
        if not key:
            logger.warning("Malformed OTLP header entry (empty key): %r", entry)
            continue
        headers[key] = unquote(value.strip())
    return headers


def init_otel(service_name: Optional[str] = None) -> bool:
    """
    Initialize OpenTelemetry tracing for search fetches.

    Returns True when initialized, False when disabled or failed.
    """
    global _tracer_provider, _otel_initialized

    if _otel_initialized:
        logger.debug("OTel already initialized, skipping")
        return True

    if not is_otel_enabled():
        logger.info("OpenTelemetry disabled (ENABLE_OTEL=%r)", os.getenv("ENABLE_OTEL"))
        return False

    try:
        from opentelemetry import trace
        from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
        from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
        from opentelemetry.sdk.trace import TracerProvider
        from opentelemetry.sdk.trace.export import BatchSpanProcessor

        svc_name = service_name or os.getenv("OTEL_SERVICE_NAME", "vendorama-search")
        resource = Resource.create(
            {
                SERVICE_NAME: svc_name,
                SERVICE_VERSION: os.getenv("GIT_SHA", "unknown"),
                "deployment.environment": os.getenv("ENVIRONMENT", "development"),
            }
        )

        _tracer_provider = TracerProvider(resource=resource)
        trace.set_tracer_provider(_tracer_provider)

        raw_headers = os.getenv("OTEL_EXPORTER_OTLP_HEADERS", "").strip()
        exporter_headers = _parse_otlp_headers(raw_headers) if raw_headers else None

        base_endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://localhost:4318").rstrip("/")
        otlp_endpoint = f"{base_endpoint}/v1/traces"

        exporter = OTLPSpanExporter(endpoint=otlp_endpoint, headers=exporter_headers)
        _tracer_provider.add_span_processor(BatchSpanProcessor(exporter))

        _otel_initialized = True
        logger.info(
            "OpenTelemetry initialized: service=%s endpoint=%s", svc_name, otlp_endpoint
        )
        return True
    except Exception as exc:
        logger.error("Failed to initialize OpenTelemetry: %s", exc, exc_info=True)
        return False


@contextmanager
def fetch_span(name: str, attributes: Mapping[str, Any] | None = None) -> Iterator[Any]:
    """Span around one search request; yields None while tracing is off."""
    if not _otel_initialized:
        yield None
        return

    from opentelemetry import trace

    tracer = trace.get_tracer("vendorama_search")
    with tracer.start_as_current_span(name) as span:
        for key, value in (attributes or {}).items():
            if value is not None:
                span.set_attribute(key, value)
        yield span
