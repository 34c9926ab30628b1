"""Authoritative in-process Python API for Allowance Ledger Service."""

from __future__ import annotations

from abc import ABC, abstractmethod

from packages.decibel_shared.config import DecibelSettings
from packages.decibel_shared.envelope import Envelope, EnvelopeMeta
from resources.adapters.block_clock import BlockClock
from resources.substrates.ledger_store import LedgerStore
from services.state.allowance_ledger.domain import Allowance, HealthStatus


class AllowanceLedgerService(ABC):
    """Public API for granting and reading zone allowances.

    Capacity moves between holders only through
    ``transitions.transfer_allowance`` as part of a trade.
    """

    @abstractmethod
    def allocate(
        self,
        *,
        meta: EnvelopeMeta,
        zone_id: int,
        recipient: str,
        amount: int,
        duration_blocks: int,
    ) -> Envelope[Allowance]:
        """Reset ``recipient``'s allowance; only the zone owner may call."""

    @abstractmethod
    def get_allowance(
        self, *, meta: EnvelopeMeta, zone_id: int, holder: str
    ) -> Envelope[Allowance | None]:
        """Read one allowance, or ``None`` when absent."""

    @abstractmethod
    def health(self, *, meta: EnvelopeMeta) -> Envelope[HealthStatus]:
        """Return service and ledger store readiness."""


def build_allowance_ledger_service(
    *,
    settings: DecibelSettings,
    store: LedgerStore,
    clock: BlockClock,
) -> AllowanceLedgerService:
    """Build default Allowance Ledger implementation from typed settings."""
    from services.state.allowance_ledger.config import (
        resolve_allowance_ledger_settings,
    )
    from services.state.allowance_ledger.implementation import (
        DefaultAllowanceLedgerService,
    )

    return DefaultAllowanceLedgerService(
        settings=resolve_allowance_ledger_settings(settings),
        store=store,
        clock=clock,
    )
