from dataclasses import replace

from fastapi import FastAPI

from app import telemetry
from app.config import settings


def test_setup_is_a_no_op_when_disabled(monkeypatch):
    monkeypatch.setattr(telemetry, "settings", replace(settings, otel_enabled=False))
    assert telemetry.setup_otel(FastAPI()) == []


def test_tracer_spans_work_without_a_provider():
    tracer = telemetry.get_tracer("tests")
    with tracer.start_as_current_span("material_request.approve", attributes={"material_request.id": 1}) as span:
        span.set_attribute("material_request.type", "GLOBAL")
