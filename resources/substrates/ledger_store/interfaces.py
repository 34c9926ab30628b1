"""Protocols for the durable keyed ledger store."""

from __future__ import annotations

from contextlib import AbstractContextManager
from enum import Enum
from typing import Protocol

from resources.substrates.ledger_store.records import (
    Allowance,
    NoiseReading,
    Permit,
    Proposal,
    TradeOffer,
    Vote,
    Zone,
)


class LedgerCounter(str, Enum):
    """Monotonic identifier sequences; ids start at 1 and are never reused."""

    ZONE = "zone"
    PERMIT = "permit"
    PROPOSAL = "proposal"
    TOKEN = "token"


class LedgerTransaction(Protocol):
    """Typed table access inside one all-or-nothing transition."""

    def next_id(self, counter: LedgerCounter) -> int:
        """Atomically advance ``counter`` and return the new value."""

    def last_id(self, counter: LedgerCounter) -> int:
        """Return the last issued value of ``counter`` (0 when none)."""

    def get_zone(self, zone_id: int) -> Zone | None: ...

    def put_zone(self, zone: Zone) -> None: ...

    def get_zone_owner(self, zone_id: int) -> str | None: ...

    def put_zone_owner(self, zone_id: int, owner: str) -> None: ...

    def get_zone_premium(self, zone_id: int) -> int | None: ...

    def put_zone_premium(self, zone_id: int, premium_multiplier: int) -> None: ...

    def get_allowance(self, zone_id: int, holder: str) -> Allowance | None: ...

    def put_allowance(self, allowance: Allowance) -> None: ...

    def get_noise_reading(self, zone_id: int, block: int) -> NoiseReading | None: ...

    def put_noise_reading(self, reading: NoiseReading) -> None: ...

    def get_permit(self, permit_id: int) -> Permit | None: ...

    def put_permit(self, permit: Permit) -> None: ...

    def get_trade_offer(self, token_id: int) -> TradeOffer | None: ...

    def put_trade_offer(self, offer: TradeOffer) -> None: ...

    def get_proposal(self, proposal_id: int) -> Proposal | None: ...

    def put_proposal(self, proposal: Proposal) -> None: ...

    def get_vote(self, proposal_id: int, voter: str) -> Vote | None: ...

    def put_vote(self, vote: Vote) -> None: ...

    def get_token_owner(self, token_id: int) -> str | None: ...

    def put_token_owner(self, token_id: int, owner: str) -> None: ...


class LedgerStore(Protocol):
    """Durable store handing out one transaction per state transition.

    Exiting ``transaction()`` normally commits every write; any exception
    rolls all of them back and propagates unchanged.
    """

    @property
    def backend(self) -> str: ...

    def transaction(self) -> AbstractContextManager[LedgerTransaction]: ...

    def is_healthy(self) -> bool: ...
