"""Authoritative in-process Python API for Permit Manager Service."""

from __future__ import annotations

from abc import ABC, abstractmethod

from packages.decibel_shared.config import DecibelSettings
from packages.decibel_shared.envelope import Envelope, EnvelopeMeta
from resources.adapters.block_clock import BlockClock
from resources.substrates.ledger_store import LedgerStore
from services.action.permit_manager.domain import HealthStatus, Permit


class PermitManagerService(ABC):
    """Public API for the construction-permit lifecycle.

    Permits pay a fee and never touch allowances. The fee is recorded at
    application time; collecting it is left to the host.
    """

    @abstractmethod
    def calculate_fee(
        self,
        *,
        meta: EnvelopeMeta,
        zone_id: int,
        requested_decibels: int,
        duration_blocks: int,
    ) -> Envelope[int]:
        """Quote the permit fee for a zone without writing anything."""

    @abstractmethod
    def apply_for_permit(
        self,
        *,
        meta: EnvelopeMeta,
        zone_id: int,
        requested_decibels: int,
        duration_blocks: int,
    ) -> Envelope[int]:
        """Record an unapproved permit for the caller and return its id."""

    @abstractmethod
    def approve_permit(self, *, meta: EnvelopeMeta, permit_id: int) -> Envelope[Permit]:
        """Approve a permit once; only the zone owner may call."""

    @abstractmethod
    def get_permit(
        self, *, meta: EnvelopeMeta, permit_id: int
    ) -> Envelope[Permit | None]:
        """Read one permit, or ``None`` when absent."""

    @abstractmethod
    def health(self, *, meta: EnvelopeMeta) -> Envelope[HealthStatus]:
        """Return service and ledger store readiness."""


def build_permit_manager_service(
    *,
    settings: DecibelSettings,
    store: LedgerStore,
    clock: BlockClock,
) -> PermitManagerService:
    """Build default Permit Manager implementation from typed settings."""
    from services.action.permit_manager.config import resolve_permit_manager_settings
    from services.action.permit_manager.implementation import (
        DefaultPermitManagerService,
    )

    return DefaultPermitManagerService(
        settings=resolve_permit_manager_settings(settings),
        store=store,
        clock=clock,
    )
