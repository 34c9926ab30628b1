"""Tests for zone rules applied inside ledger transactions."""

from __future__ import annotations

import pytest

from packages.decibel_shared.errors import TransitionRejected
from resources.substrates.ledger_store import InMemoryLedgerStore
from services.state.zone_registry import transitions


def _store_with_zones() -> InMemoryLedgerStore:
    store = InMemoryLedgerStore()
    with store.transaction() as tx:
        transitions.create_zone(
            tx, owner="alice", name="harbor", max_decibel=80, is_quiet_zone=False
        )
        transitions.create_zone(
            tx, owner="alice", name="library", max_decibel=40, is_quiet_zone=True
        )
    return store


def test_set_max_decibel_keeps_quiet_zone_cap() -> None:
    store = _store_with_zones()
    with store.transaction() as tx:
        with pytest.raises(TransitionRejected) as exc_info:
            transitions.set_max_decibel(tx, zone_id=2, max_decibel=60)
    assert exc_info.value.detail.code == "INVALID_DECIBEL"


def test_set_max_decibel_updates_standard_zone() -> None:
    store = _store_with_zones()
    with store.transaction() as tx:
        zone = transitions.set_max_decibel(tx, zone_id=1, max_decibel=95)
    assert zone.max_decibel == 95


def test_zone_premium_applies_only_to_quiet_zones() -> None:
    store = _store_with_zones()
    with store.transaction() as tx:
        assert transitions.zone_premium(tx, tx.get_zone(1)) == 100
        assert transitions.zone_premium(tx, tx.get_zone(2)) == 200


def test_require_zone_owner_rejects_other_principals() -> None:
    store = _store_with_zones()
    with store.transaction() as tx:
        with pytest.raises(TransitionRejected) as exc_info:
            transitions.require_zone_owner(tx, 1, "mallory")
    assert exc_info.value.detail.code == "UNAUTHORIZED"


def test_require_zone_reports_zone_not_found() -> None:
    store = InMemoryLedgerStore()
    with store.transaction() as tx:
        with pytest.raises(TransitionRejected) as exc_info:
            transitions.require_zone(tx, 3)
    assert exc_info.value.detail.code == "ZONE_NOT_FOUND"
