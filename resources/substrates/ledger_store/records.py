"""Persisted ledger records.

Records are immutable; a transition produces an updated copy with
``model_copy(update=...)`` and writes it back through the open transaction.
Field names match the column names of the Postgres tables one-to-one.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class Zone(BaseModel):
    """A governed noise-budget domain."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    zone_id: int
    name: str
    max_decibel: int
    current_usage: int = 0
    is_quiet_zone: bool = False
    premium_multiplier: int = 100


class Allowance(BaseModel):
    """A holder's decibel budget within one zone."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    zone_id: int
    holder: str
    total_allowance: int = 0
    used_allowance: int = 0
    expiry_block: int = 0

    @property
    def remaining(self) -> int:
        """Return spendable capacity (total minus used)."""
        return self.total_allowance - self.used_allowance

    def is_expired(self, block: int) -> bool:
        """Return whether ``block`` is past this allowance's expiry block."""
        return block > self.expiry_block


class NoiseReading(BaseModel):
    """One reported decibel level for a zone at a block height."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    zone_id: int
    block: int
    decibel_level: int
    reporter: str
    verified: bool = False


class Permit(BaseModel):
    """A construction permit and its approval window."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    permit_id: int
    zone_id: int
    applicant: str
    requested_decibels: int
    duration_blocks: int
    approved: bool = False
    start_block: int = 0
    end_block: int = 0
    fee_paid: int = 0

    def is_active(self, block: int) -> bool:
        """Return whether the permit is approved and ``block`` is inside its window."""
        return self.approved and self.start_block <= block <= self.end_block


class TradeOffer(BaseModel):
    """An offer to sell allowance capacity, keyed by its ownership token."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    token_id: int
    seller: str
    price: int
    zone_id: int
    decibel_amount: int
    active: bool = True


class Proposal(BaseModel):
    """A time-boxed vote on a zone's decibel ceiling."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    proposal_id: int
    title: str
    description: str
    zone_id: int
    proposed_max_decibel: int
    proposer: str
    start_block: int
    end_block: int
    yes_votes: int = 0
    no_votes: int = 0
    executed: bool = False

    @property
    def total_votes(self) -> int:
        return self.yes_votes + self.no_votes


class Vote(BaseModel):
    """One immutable vote cast on a proposal."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    proposal_id: int
    voter: str
    support: bool
    block: int
