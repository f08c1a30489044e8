from __future__ import annotations

from contextlib import contextmanager
import logging

import pytest
from vendorama_search import otel as otel_mod


@pytest.fixture(autouse=True)
def _reset_otel_state(monkeypatch: pytest.MonkeyPatch):
    otel_mod._otel_initialized = False
    otel_mod._tracer_provider = None
    monkeypatch.delenv("ENABLE_OTEL", raising=False)
    monkeypatch.delenv("OTEL_SERVICE_NAME", raising=False)
    monkeypatch.delenv("OTEL_EXPORTER_OTLP_ENDPOINT", raising=False)
    monkeypatch.delenv("OTEL_EXPORTER_OTLP_HEADERS", raising=False)
    monkeypatch.delenv("ENVIRONMENT", raising=False)
    monkeypatch.delenv("GIT_SHA", raising=False)
    yield
    otel_mod._otel_initialized = False
    otel_mod._tracer_provider = None


def test_is_truthy_env() -> None:
    assert otel_mod._is_truthy_env(None) is False
    assert otel_mod._is_truthy_env("true") is True
    assert otel_mod._is_truthy_env("  On ") is True
    assert otel_mod._is_truthy_env("0") is False


def test_is_otel_enabled_reads_env(monkeypatch: pytest.MonkeyPatch) -> None:
    assert otel_mod.is_otel_enabled() is False
    monkeypatch.setenv("ENABLE_OTEL", "1")
    assert otel_mod.is_otel_enabled() is True


def test_parse_otlp_headers_handles_malformed(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING)
    headers = otel_mod._parse_otlp_headers("foo,=bar,key=value%20x,,token=abc")
    assert headers == {"key": "value x", "token": "abc"}
    assert any("Malformed OTLP header entry" in record.message for record in caplog.records)


def test_init_otel_disabled_by_default() -> None:
    assert otel_mod.init_otel() is False
    assert otel_mod._otel_initialized is False


def test_init_otel_success(monkeypatch: pytest.MonkeyPatch) -> None:
    import opentelemetry.exporter.otlp.proto.http.trace_exporter as otlp_exporter
    import opentelemetry.sdk.trace as sdk_trace
    import opentelemetry.sdk.trace.export as sdk_export
    import opentelemetry.trace as trace_mod

    providers: list[object] = []

    class DummyTracerProvider:
        def __init__(self, resource=None):
            self.resource = resource
            self.processors: list[object] = []

        def add_span_processor(self, processor):
            self.processors.append(processor)

    class DummyExporter:
        def __init__(self, endpoint=None, headers=None):
            self.endpoint = endpoint
            self.headers = headers

    class DummyBatchSpanProcessor:
        def __init__(self, exporter):
            self.exporter = exporter

    monkeypatch.setattr(trace_mod, "set_tracer_provider", providers.append)
    monkeypatch.setattr(sdk_trace, "TracerProvider", DummyTracerProvider)
    monkeypatch.setattr(otlp_exporter, "OTLPSpanExporter", DummyExporter)
    monkeypatch.setattr(sdk_export, "BatchSpanProcessor", DummyBatchSpanProcessor)

    monkeypatch.setenv("ENABLE_OTEL", "true")
    monkeypatch.setenv("OTEL_EXPORTER_OTLP_ENDPOINT", "https://collector.example/")
    monkeypatch.setenv("OTEL_EXPORTER_OTLP_HEADERS", "Authorization=Bearer%20token")

    assert otel_mod.init_otel() is True
    assert otel_mod._otel_initialized is True
    provider = providers[0]
    assert isinstance(provider, DummyTracerProvider)
    exporter = provider.processors[0].exporter
    assert exporter.endpoint == "https://collector.example/v1/traces"
    assert exporter.headers == {"Authorization": "Bearer token"}

    assert otel_mod.init_otel() is True
    assert len(providers) == 1


def test_init_otel_handles_exception(monkeypatch: pytest.MonkeyPatch) -> None:
    import opentelemetry.sdk.trace as sdk_trace

    class BoomProvider:
        def __init__(self, resource=None):
            raise RuntimeError("boom")

    monkeypatch.setattr(sdk_trace, "TracerProvider", BoomProvider)
    monkeypatch.setenv("ENABLE_OTEL", "true")
    assert otel_mod.init_otel() is False


def test_fetch_span_is_noop_when_disabled() -> None:
    with otel_mod.fetch_span("vendorama.search", {"page": 1}) as span:
        assert span is None


def test_fetch_span_sets_attributes(monkeypatch: pytest.MonkeyPatch) -> None:
    import opentelemetry.trace as trace_mod

    class DummySpan:
        def __init__(self) -> None:
            self.attributes: dict[str, object] = {}

        def set_attribute(self, key, value):
            self.attributes[key] = value

    class DummyTracer:
        def __init__(self) -> None:
            self.names: list[str] = []
            self.span = DummySpan()

        @contextmanager
        def start_as_current_span(self, name):
            self.names.append(name)
            yield self.span

    tracer = DummyTracer()
    monkeypatch.setattr(trace_mod, "get_tracer", lambda *_args, **_kwargs: tracer)
    otel_mod._otel_initialized = True

    with otel_mod.fetch_span("vendorama.search", {"page": 2, "mode": None}) as span:
        assert span is tracer.span

    assert tracer.names == ["vendorama.search"]
    assert tracer.span.attributes == {"page": 2}
