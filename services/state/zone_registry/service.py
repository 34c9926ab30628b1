"""Authoritative in-process Python API for Zone Registry Service."""

from __future__ import annotations

from abc import ABC, abstractmethod

from packages.decibel_shared.config import DecibelSettings
from packages.decibel_shared.envelope import Envelope, EnvelopeMeta
from resources.adapters.block_clock import BlockClock
from resources.substrates.ledger_store import LedgerStore
from services.state.zone_registry.domain import HealthStatus, Zone


class ZoneRegistryService(ABC):
    """Public API for zone creation and zone lookups."""

    @abstractmethod
    def create_zone(
        self,
        *,
        meta: EnvelopeMeta,
        name: str,
        max_decibel: int,
        is_quiet_zone: bool,
    ) -> Envelope[int]:
        """Create a zone owned by the caller and return its id."""

    @abstractmethod
    def get_zone(self, *, meta: EnvelopeMeta, zone_id: int) -> Envelope[Zone | None]:
        """Read one zone, or ``None`` when absent."""

    @abstractmethod
    def get_zone_owner(
        self, *, meta: EnvelopeMeta, zone_id: int
    ) -> Envelope[str | None]:
        """Read the owning principal of one zone, or ``None`` when absent."""

    @abstractmethod
    def get_zone_premium(
        self, *, meta: EnvelopeMeta, zone_id: int
    ) -> Envelope[int | None]:
        """Read the indexed premium multiplier of one zone."""

    @abstractmethod
    def health(self, *, meta: EnvelopeMeta) -> Envelope[HealthStatus]:
        """Return service and ledger store readiness."""


def build_zone_registry_service(
    *,
    settings: DecibelSettings,
    store: LedgerStore,
    clock: BlockClock,
) -> ZoneRegistryService:
    """Build default Zone Registry implementation from typed settings."""
    from services.state.zone_registry.config import resolve_zone_registry_settings
    from services.state.zone_registry.implementation import DefaultZoneRegistryService

    return DefaultZoneRegistryService(
        settings=resolve_zone_registry_settings(settings),
        store=store,
        clock=clock,
    )
