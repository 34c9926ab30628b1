"""Unit tests for configured OTel naming in public API instrumentation."""

from __future__ import annotations

from types import SimpleNamespace

from packages.decibel_shared.config import DecibelSettings
from packages.decibel_shared.logging import public_api as public_api_module


class _FakeMeter:
    def __init__(self) -> None:
        self.instruments: list[str] = []

    def create_counter(self, *, name: str, description: str, unit: str):
        self.instruments.append(name)
        return SimpleNamespace(add=lambda amount, attributes: None)

    def create_histogram(self, *, name: str, description: str, unit: str):
        self.instruments.append(name)
        return SimpleNamespace(record=lambda amount, attributes: None)


def _install_fakes(monkeypatch, settings: DecibelSettings):
    meter = _FakeMeter()
    seen: dict[str, str] = {}

    def get_meter(name: str) -> _FakeMeter:
        seen["meter"] = name
        return meter

    def get_tracer(name: str) -> object:
        seen["tracer"] = name
        return object()

    monkeypatch.setattr(public_api_module, "load_settings", lambda: settings)
    monkeypatch.setattr(public_api_module.otel_metrics, "get_meter", get_meter)
    monkeypatch.setattr(public_api_module.otel_trace, "get_tracer", get_tracer)
    public_api_module._otel_instruments.cache_clear()
    return meter, seen


def test_otel_names_use_defaults_when_not_configured(monkeypatch) -> None:
    meter, seen = _install_fakes(monkeypatch, DecibelSettings())
    try:
        instruments = public_api_module._otel_instruments()
    finally:
        public_api_module._otel_instruments.cache_clear()

    assert len(instruments.concerns) == 2
    assert seen == {"meter": "decibel.public_api", "tracer": "decibel.public_api"}
    assert "decibel_public_api_calls_total" in meter.instruments
    assert "decibel_public_api_instrumentation_failures_total" in meter.instruments


def test_otel_names_accept_config_overrides(monkeypatch) -> None:
    settings = DecibelSettings.model_validate(
        {
            "observability": {
                "public_api": {
                    "otel": {
                        "meter_name": "custom.meter",
                        "tracer_name": "custom.tracer",
                        "metric_public_api_calls_total": "custom_calls_total",
                    }
                }
            }
        }
    )
    meter, seen = _install_fakes(monkeypatch, settings)
    try:
        public_api_module._otel_instruments()
    finally:
        public_api_module._otel_instruments.cache_clear()

    assert seen == {"meter": "custom.meter", "tracer": "custom.tracer"}
    assert "custom_calls_total" in meter.instruments
