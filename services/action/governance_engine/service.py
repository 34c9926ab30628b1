"""Authoritative in-process Python API for Governance Engine Service."""

from __future__ import annotations

from abc import ABC, abstractmethod

from packages.decibel_shared.config import DecibelSettings
from packages.decibel_shared.envelope import Envelope, EnvelopeMeta
from resources.adapters.block_clock import BlockClock
from resources.substrates.ledger_store import LedgerStore
from services.action.governance_engine.domain import (
    HealthStatus,
    Proposal,
    ProposalStatus,
    Vote,
)


class GovernanceEngineService(ABC):
    """Public API for proposals, votes, and their execution."""

    @abstractmethod
    def create_proposal(
        self,
        *,
        meta: EnvelopeMeta,
        title: str,
        description: str,
        zone_id: int,
        proposed_max_decibel: int,
    ) -> Envelope[int]:
        """Open a voting window on a new zone ceiling and return the proposal id."""

    @abstractmethod
    def vote(
        self, *, meta: EnvelopeMeta, proposal_id: int, support: bool
    ) -> Envelope[Proposal]:
        """Cast the caller's single vote while the window is open."""

    @abstractmethod
    def execute_proposal(
        self, *, meta: EnvelopeMeta, proposal_id: int
    ) -> Envelope[Proposal]:
        """Apply a passed proposal to its zone once voting has closed."""

    @abstractmethod
    def get_proposal(
        self, *, meta: EnvelopeMeta, proposal_id: int
    ) -> Envelope[Proposal | None]:
        """Read one proposal, or ``None`` when absent."""

    @abstractmethod
    def get_vote(
        self, *, meta: EnvelopeMeta, proposal_id: int, voter: str
    ) -> Envelope[Vote | None]:
        """Read one voter's vote on a proposal."""

    @abstractmethod
    def get_proposal_status(
        self, *, meta: EnvelopeMeta, proposal_id: int
    ) -> Envelope[ProposalStatus | None]:
        """Read the proposal's lifecycle state at the current block."""

    @abstractmethod
    def health(self, *, meta: EnvelopeMeta) -> Envelope[HealthStatus]:
        """Return service and ledger store readiness."""


def build_governance_engine_service(
    *,
    settings: DecibelSettings,
    store: LedgerStore,
    clock: BlockClock,
) -> GovernanceEngineService:
    """Build default Governance Engine implementation from typed settings."""
    from services.action.governance_engine.config import (
        resolve_governance_engine_settings,
    )
    from services.action.governance_engine.implementation import (
        DefaultGovernanceEngineService,
    )

    return DefaultGovernanceEngineService(
        settings=resolve_governance_engine_settings(settings),
        store=store,
        clock=clock,
    )
