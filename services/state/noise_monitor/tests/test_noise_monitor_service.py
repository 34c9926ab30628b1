"""Behavior tests for Noise Monitor Service."""

from __future__ import annotations

from packages.decibel_shared.envelope import EnvelopeKind, EnvelopeMeta, new_meta
from resources.adapters.block_clock import ManualBlockClock
from resources.substrates.ledger_store import InMemoryLedgerStore
from services.state.noise_monitor.config import NoiseMonitorSettings
from services.state.noise_monitor.implementation import DefaultNoiseMonitorService
from services.state.zone_registry.transitions import create_zone


def _meta(principal: str = "sensor-7") -> EnvelopeMeta:
    return new_meta(kind=EnvelopeKind.COMMAND, source="test", principal=principal)


def _fixture(settings: NoiseMonitorSettings | None = None):
    store = InMemoryLedgerStore()
    with store.transaction() as tx:
        create_zone(tx, owner="owner", name="harbor", max_decibel=80, is_quiet_zone=False)
    clock = ManualBlockClock(start_block=12)
    service = DefaultNoiseMonitorService(
        settings=settings or NoiseMonitorSettings(), store=store, clock=clock
    )
    return service, store, clock


def test_report_records_reading_and_updates_zone_usage() -> None:
    service, store, _ = _fixture()
    result = service.report_noise_level(meta=_meta(), zone_id=1, decibel_level=65)

    assert result.ok
    reading = result.payload.value
    assert reading.block == 12
    assert reading.reporter == "sensor-7"
    assert reading.verified is False
    with store.transaction() as tx:
        assert tx.get_zone(1).current_usage == 65

    stored = service.get_noise_reading(meta=_meta(), zone_id=1, block=12)
    assert stored.payload.value == reading


def test_second_report_in_same_block_is_rejected_without_usage_change() -> None:
    service, store, clock = _fixture()
    service.report_noise_level(meta=_meta(), zone_id=1, decibel_level=65)

    duplicate = service.report_noise_level(meta=_meta(), zone_id=1, decibel_level=90)
    assert duplicate.errors[0].code == "ALREADY_EXISTS"
    with store.transaction() as tx:
        assert tx.get_zone(1).current_usage == 65

    clock.advance()
    assert service.report_noise_level(meta=_meta(), zone_id=1, decibel_level=90).ok


def test_report_for_missing_zone_is_zone_not_found() -> None:
    service, _, _ = _fixture()
    result = service.report_noise_level(meta=_meta(), zone_id=4, decibel_level=65)
    assert result.errors[0].code == "ZONE_NOT_FOUND"


def test_reading_outside_configured_bound_is_invalid_decibel() -> None:
    service, _, _ = _fixture(NoiseMonitorSettings(max_reading_decibel=100))
    for level in (-1, 101):
        result = service.report_noise_level(meta=_meta(), zone_id=1, decibel_level=level)
        assert result.errors[0].code == "INVALID_DECIBEL"


def test_missing_reading_reads_as_absent() -> None:
    service, _, _ = _fixture()
    result = service.get_noise_reading(meta=_meta(), zone_id=1, block=3)
    assert result.ok and result.payload.value is None


def test_health_reports_current_block() -> None:
    service, _, _ = _fixture()
    assert service.health(meta=_meta()).payload.value.current_block == 12


def test_zone_zero_is_zone_not_found() -> None:
    service, _, clock = _fixture()
    result = service.report_noise_level(meta=_meta(), zone_id=0, decibel_level=60)
    assert result.errors[0].code == "ZONE_NOT_FOUND"
    reading = service.get_noise_reading(
        meta=_meta(), zone_id=0, block=clock.current_block()
    )
    assert reading.ok and reading.payload.value is None
