"""Process-local ledger store for tests, the CLI, and single-process hosts."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field, fields
from threading import RLock

from resources.substrates.ledger_store.interfaces import LedgerCounter
from resources.substrates.ledger_store.records import (
    Allowance,
    NoiseReading,
    Permit,
    Proposal,
    TradeOffer,
    Vote,
    Zone,
)


@dataclass
class _Tables:
    zones: dict[int, Zone] = field(default_factory=dict)
    zone_owners: dict[int, str] = field(default_factory=dict)
    zone_premiums: dict[int, int] = field(default_factory=dict)
    allowances: dict[tuple[int, str], Allowance] = field(default_factory=dict)
    noise_readings: dict[tuple[int, int], NoiseReading] = field(default_factory=dict)
    permits: dict[int, Permit] = field(default_factory=dict)
    trade_offers: dict[int, TradeOffer] = field(default_factory=dict)
    proposals: dict[int, Proposal] = field(default_factory=dict)
    votes: dict[tuple[int, str], Vote] = field(default_factory=dict)
    tokens: dict[int, str] = field(default_factory=dict)
    counters: dict[str, int] = field(default_factory=dict)

    def copy(self) -> "_Tables":
        # Records are frozen, so copying the containers isolates all writes.
        return _Tables(**{f.name: dict(getattr(self, f.name)) for f in fields(self)})


class _InMemoryTransaction:
    """Transaction view over a private working copy of the tables."""

    def __init__(self, tables: _Tables) -> None:
        self._t = tables

    def next_id(self, counter: LedgerCounter) -> int:
        value = self._t.counters.get(counter.value, 0) + 1
        self._t.counters[counter.value] = value
        return value

    def last_id(self, counter: LedgerCounter) -> int:
        return self._t.counters.get(counter.value, 0)

    def get_zone(self, zone_id: int) -> Zone | None:
        return self._t.zones.get(zone_id)

    def put_zone(self, zone: Zone) -> None:
        self._t.zones[zone.zone_id] = zone

    def get_zone_owner(self, zone_id: int) -> str | None:
        return self._t.zone_owners.get(zone_id)

    def put_zone_owner(self, zone_id: int, owner: str) -> None:
        self._t.zone_owners[zone_id] = owner

    def get_zone_premium(self, zone_id: int) -> int | None:
        return self._t.zone_premiums.get(zone_id)

    def put_zone_premium(self, zone_id: int, premium_multiplier: int) -> None:
        self._t.zone_premiums[zone_id] = premium_multiplier

    def get_allowance(self, zone_id: int, holder: str) -> Allowance | None:
        return self._t.allowances.get((zone_id, holder))

    def put_allowance(self, allowance: Allowance) -> None:
        self._t.allowances[(allowance.zone_id, allowance.holder)] = allowance

    def get_noise_reading(self, zone_id: int, block: int) -> NoiseReading | None:
        return self._t.noise_readings.get((zone_id, block))

    def put_noise_reading(self, reading: NoiseReading) -> None:
        self._t.noise_readings[(reading.zone_id, reading.block)] = reading

    def get_permit(self, permit_id: int) -> Permit | None:
        return self._t.permits.get(permit_id)

    def put_permit(self, permit: Permit) -> None:
        self._t.permits[permit.permit_id] = permit

    def get_trade_offer(self, token_id: int) -> TradeOffer | None:
        return self._t.trade_offers.get(token_id)

    def put_trade_offer(self, offer: TradeOffer) -> None:
        self._t.trade_offers[offer.token_id] = offer

    def get_proposal(self, proposal_id: int) -> Proposal | None:
        return self._t.proposals.get(proposal_id)

    def put_proposal(self, proposal: Proposal) -> None:
        self._t.proposals[proposal.proposal_id] = proposal

    def get_vote(self, proposal_id: int, voter: str) -> Vote | None:
        return self._t.votes.get((proposal_id, voter))

    def put_vote(self, vote: Vote) -> None:
        self._t.votes[(vote.proposal_id, vote.voter)] = vote

    def get_token_owner(self, token_id: int) -> str | None:
        return self._t.tokens.get(token_id)

    def put_token_owner(self, token_id: int, owner: str) -> None:
        self._t.tokens[token_id] = owner


class InMemoryLedgerStore:
    """Ledger store holding all tables in process memory.

    Transitions are serialized by one re-entrant lock. Each transaction works
    on a copy of the tables that replaces the committed state only when the
    block exits without an exception.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._tables = _Tables()

    @property
    def backend(self) -> str:
        return "memory"

    @contextmanager
    def transaction(self) -> Iterator[_InMemoryTransaction]:
        with self._lock:
            working = self._tables.copy()
            yield _InMemoryTransaction(working)
            self._tables = working

    def is_healthy(self) -> bool:
        return True
