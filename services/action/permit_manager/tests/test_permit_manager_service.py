"""Behavior tests for Permit Manager Service."""

from __future__ import annotations

from packages.decibel_shared.envelope import EnvelopeKind, EnvelopeMeta, new_meta
from resources.adapters.block_clock import ManualBlockClock
from resources.substrates.ledger_store import InMemoryLedgerStore
from services.action.permit_manager.config import PermitManagerSettings
from services.action.permit_manager.domain import permit_fee
from services.action.permit_manager.implementation import DefaultPermitManagerService
from services.state.zone_registry.transitions import create_zone


def _meta(principal: str = "builder") -> EnvelopeMeta:
    return new_meta(kind=EnvelopeKind.COMMAND, source="test", principal=principal)


def _fixture(start_block: int = 20):
    store = InMemoryLedgerStore()
    with store.transaction() as tx:
        create_zone(tx, owner="owner", name="harbor", max_decibel=80, is_quiet_zone=False)
        create_zone(tx, owner="owner", name="library", max_decibel=45, is_quiet_zone=True)
    clock = ManualBlockClock(start_block=start_block)
    service = DefaultPermitManagerService(
        settings=PermitManagerSettings(), store=store, clock=clock
    )
    return service, clock


def test_quiet_zone_fee_applies_premium() -> None:
    service, _ = _fixture()
    result = service.calculate_fee(
        meta=_meta(), zone_id=2, requested_decibels=40, duration_blocks=10
    )
    assert result.ok
    assert result.payload.value == 800


def test_standard_zone_fee_has_no_premium() -> None:
    service, _ = _fixture()
    result = service.calculate_fee(
        meta=_meta(), zone_id=1, requested_decibels=40, duration_blocks=10
    )
    assert result.payload.value == 400


def test_fee_truncates_toward_zero() -> None:
    assert permit_fee(requested_decibels=33, duration_blocks=1, premium=150) == 49


def test_fee_for_missing_zone_is_zone_not_found() -> None:
    service, _ = _fixture()
    result = service.calculate_fee(
        meta=_meta(), zone_id=9, requested_decibels=40, duration_blocks=10
    )
    assert result.errors[0].code == "ZONE_NOT_FOUND"


def test_apply_records_unapproved_permit_with_fee() -> None:
    service, _ = _fixture()
    applied = service.apply_for_permit(
        meta=_meta(), zone_id=2, requested_decibels=40, duration_blocks=10
    )
    assert applied.ok and applied.payload.value == 1

    permit = service.get_permit(meta=_meta(), permit_id=1).payload.value
    assert permit.applicant == "builder"
    assert permit.fee_paid == 800
    assert permit.approved is False
    assert (permit.start_block, permit.end_block) == (0, 0)


def test_apply_outside_decibel_range_is_rejected() -> None:
    service, _ = _fixture()
    for value in (29, 121):
        result = service.apply_for_permit(
            meta=_meta(), zone_id=1, requested_decibels=value, duration_blocks=10
        )
        assert result.errors[0].code == "INVALID_DECIBEL"
    assert service.get_permit(meta=_meta(), permit_id=1).payload.value is None


def test_approve_twice_fails_with_permit_exists() -> None:
    service, clock = _fixture(start_block=20)
    service.apply_for_permit(
        meta=_meta(), zone_id=1, requested_decibels=70, duration_blocks=6
    )
    clock.advance(5)

    first = service.approve_permit(meta=_meta("owner"), permit_id=1)
    second = service.approve_permit(meta=_meta("owner"), permit_id=1)

    assert first.ok
    assert first.payload.value.start_block == 25
    assert first.payload.value.end_block == 31
    assert first.payload.value.is_active(31) is True
    assert first.payload.value.is_active(32) is False
    assert second.errors[0].code == "PERMIT_EXISTS"


def test_approve_by_non_owner_is_unauthorized() -> None:
    service, _ = _fixture()
    service.apply_for_permit(
        meta=_meta(), zone_id=1, requested_decibels=70, duration_blocks=6
    )
    result = service.approve_permit(meta=_meta("builder"), permit_id=1)
    assert result.errors[0].code == "UNAUTHORIZED"
    assert service.get_permit(meta=_meta(), permit_id=1).payload.value.approved is False


def test_approve_missing_permit_is_not_found() -> None:
    service, _ = _fixture()
    result = service.approve_permit(meta=_meta("owner"), permit_id=3)
    assert result.errors[0].code == "NOT_FOUND"


def test_health_counts_permits() -> None:
    service, _ = _fixture()
    service.apply_for_permit(
        meta=_meta(), zone_id=1, requested_decibels=70, duration_blocks=6
    )
    assert service.health(meta=_meta()).payload.value.permit_count == 1


def test_zero_ids_report_lookup_codes() -> None:
    service, _ = _fixture()
    fee = service.calculate_fee(
        meta=_meta(), zone_id=0, requested_decibels=40, duration_blocks=10
    )
    assert fee.errors[0].code == "ZONE_NOT_FOUND"
    applied = service.apply_for_permit(
        meta=_meta(), zone_id=0, requested_decibels=70, duration_blocks=6
    )
    assert applied.errors[0].code == "ZONE_NOT_FOUND"
    approved = service.approve_permit(meta=_meta("owner"), permit_id=0)
    assert approved.errors[0].code == "NOT_FOUND"
    assert service.get_permit(meta=_meta(), permit_id=0).payload.value is None
