"""Tests for the ledger-backed ownership token facility."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from packages.decibel_shared.errors import TransitionRejected
from resources.adapters.ownership_token.adapter import LedgerOwnershipTokenFacility
from resources.adapters.ownership_token.config import OwnershipTokenSettings
from resources.substrates.ledger_store import InMemoryLedgerStore


def _facility(template: str = "") -> LedgerOwnershipTokenFacility:
    return LedgerOwnershipTokenFacility(
        settings=OwnershipTokenSettings(token_uri_template=template)
    )


def test_mint_issues_sequential_ids_from_one() -> None:
    store = InMemoryLedgerStore()
    facility = _facility()
    with store.transaction() as tx:
        assert facility.last_id(tx) == 0
        assert facility.mint(tx, owner="alice") == 1
        assert facility.mint(tx, owner="bob") == 2
        assert facility.last_id(tx) == 2
        assert facility.owner_of(tx, token_id=2) == "bob"


def test_transfer_moves_ownership() -> None:
    store = InMemoryLedgerStore()
    facility = _facility()
    with store.transaction() as tx:
        token_id = facility.mint(tx, owner="alice")
        facility.transfer(tx, token_id=token_id, sender="alice", recipient="bob")
        assert facility.owner_of(tx, token_id=token_id) == "bob"


def test_transfer_rejects_non_owner_sender() -> None:
    store = InMemoryLedgerStore()
    facility = _facility()
    with store.transaction() as tx:
        token_id = facility.mint(tx, owner="alice")
        with pytest.raises(TransitionRejected) as exc_info:
            facility.transfer(tx, token_id=token_id, sender="mallory", recipient="bob")
    assert exc_info.value.detail.code == "UNAUTHORIZED"


def test_transfer_rejects_unknown_token() -> None:
    store = InMemoryLedgerStore()
    with store.transaction() as tx:
        with pytest.raises(TransitionRejected) as exc_info:
            _facility().transfer(tx, token_id=42, sender="alice", recipient="bob")
    assert exc_info.value.detail.code == "NOT_FOUND"


def test_token_uri_is_absent_without_template() -> None:
    assert _facility().token_uri(3) is None


def test_token_uri_substitutes_token_id() -> None:
    facility = _facility("https://tokens.example.org/noise/{token_id}.json")
    assert facility.token_uri(3) == "https://tokens.example.org/noise/3.json"


def test_template_with_unknown_placeholder_is_rejected() -> None:
    with pytest.raises(ValidationError):
        OwnershipTokenSettings(token_uri_template="https://x/{zone}")
