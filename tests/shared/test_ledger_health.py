"""Unit tests for aggregate ledger health evaluation."""

from __future__ import annotations

import time
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict

from packages.decibel_core import health as health_module
from packages.decibel_shared.config import DecibelSettings
from packages.decibel_shared.envelope import EnvelopeMeta, failure, success
from packages.decibel_shared.errors import dependency_error


class _HealthPayload(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    service_ready: bool
    store_ready: bool = True
    detail: str = "ok"


@dataclass(frozen=True)
class _Manifest:
    id: str


class _Registry:
    def list_services(self) -> tuple[_Manifest, ...]:
        return (_Manifest(id="service_a"), _Manifest(id="service_b"))

    def list_resources(self) -> tuple[_Manifest, ...]:
        return (_Manifest(id="substrate_ledger_store"), _Manifest(id="adapter_block_clock"))


class _HealthyService:
    def health(self, *, meta: EnvelopeMeta):
        return success(meta=meta, payload=_HealthPayload(service_ready=True))


class _StoreDownService:
    def health(self, *, meta: EnvelopeMeta):
        return success(
            meta=meta,
            payload=_HealthPayload(
                service_ready=True, store_ready=False, detail="ledger store unavailable"
            ),
        )


class _FailingService:
    def health(self, *, meta: EnvelopeMeta):
        return failure(meta=meta, errors=[dependency_error("service down")])


class _SlowService:
    def health(self, *, meta: EnvelopeMeta):
        time.sleep(0.3)
        return success(meta=meta, payload=_HealthPayload(service_ready=True))


class _Store:
    def __init__(self, healthy: bool = True) -> None:
        self._healthy = healthy

    def is_healthy(self) -> bool:
        return self._healthy


def _settings(timeout: float = 1.0) -> DecibelSettings:
    return DecibelSettings(core={"health": {"max_timeout_seconds": timeout}})


def _evaluate(monkeypatch, components, *, timeout: float = 1.0):
    monkeypatch.setattr(health_module, "get_registry", lambda: _Registry())
    return health_module.evaluate_ledger_health(
        settings=_settings(timeout), components=components
    )


def test_all_ready_components_report_ready(monkeypatch) -> None:
    result = _evaluate(
        monkeypatch,
        {
            "service_a": _HealthyService(),
            "service_b": _HealthyService(),
            "substrate_ledger_store": _Store(),
            "adapter_block_clock": object(),
        },
    )
    assert result.ready is True
    assert result.resources["adapter_block_clock"].detail == "no health probe"
    assert result.resources["substrate_ledger_store"].ready is True


def test_failing_service_envelope_is_not_ready(monkeypatch) -> None:
    result = _evaluate(
        monkeypatch,
        {
            "service_a": _HealthyService(),
            "service_b": _FailingService(),
            "substrate_ledger_store": _Store(),
            "adapter_block_clock": object(),
        },
    )
    assert result.ready is False
    assert result.services["service_b"].detail == "service down"


def test_false_ready_field_in_payload_is_not_ready(monkeypatch) -> None:
    result = _evaluate(
        monkeypatch,
        {
            "service_a": _StoreDownService(),
            "service_b": _HealthyService(),
            "substrate_ledger_store": _Store(),
            "adapter_block_clock": object(),
        },
    )
    assert result.services["service_a"].ready is False
    assert result.services["service_a"].detail == "ledger store unavailable"


def test_unhealthy_store_and_missing_component(monkeypatch) -> None:
    result = _evaluate(
        monkeypatch,
        {
            "service_a": _HealthyService(),
            "substrate_ledger_store": _Store(healthy=False),
            "adapter_block_clock": object(),
        },
    )
    assert result.ready is False
    assert result.services["service_b"].detail == "component not instantiated"
    assert result.resources["substrate_ledger_store"].detail == "not ready"


def test_service_without_health_is_not_ready(monkeypatch) -> None:
    result = _evaluate(
        monkeypatch,
        {
            "service_a": object(),
            "service_b": _HealthyService(),
            "substrate_ledger_store": _Store(),
            "adapter_block_clock": object(),
        },
    )
    assert result.services["service_a"].ready is False


def test_slow_health_call_times_out(monkeypatch) -> None:
    result = _evaluate(
        monkeypatch,
        {
            "service_a": _SlowService(),
            "service_b": _HealthyService(),
            "substrate_ledger_store": _Store(),
            "adapter_block_clock": object(),
        },
        timeout=0.05,
    )
    assert result.services["service_a"].ready is False
    assert "exceeded global max timeout" in result.services["service_a"].detail
