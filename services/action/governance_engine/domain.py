"""Domain payloads and proposal state machine for Governance Engine Service."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

from resources.substrates.ledger_store.records import Proposal, Vote


class ProposalStatus(str, Enum):
    """Lifecycle of a proposal relative to the current block."""

    OPEN = "open"
    CLOSED = "closed"
    EXECUTED = "executed"


def proposal_status(proposal: Proposal, *, now: int) -> ProposalStatus:
    """Derive the proposal's state at block ``now``.

    Open while ``now < end_block``; closed once the window has elapsed;
    executed is terminal.
    """
    if proposal.executed:
        return ProposalStatus.EXECUTED
    if now < proposal.end_block:
        return ProposalStatus.OPEN
    return ProposalStatus.CLOSED


class HealthStatus(BaseModel):
    """Governance Engine and ledger store readiness."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    service_ready: bool
    store_ready: bool
    store_backend: str
    proposal_count: int
    detail: str


__all__ = ["HealthStatus", "Proposal", "ProposalStatus", "Vote", "proposal_status"]
