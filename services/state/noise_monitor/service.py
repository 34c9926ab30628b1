"""Authoritative in-process Python API for Noise Monitor Service."""

from __future__ import annotations

from abc import ABC, abstractmethod

from packages.decibel_shared.config import DecibelSettings
from packages.decibel_shared.envelope import Envelope, EnvelopeMeta
from resources.adapters.block_clock import BlockClock
from resources.substrates.ledger_store import LedgerStore
from services.state.noise_monitor.domain import HealthStatus, NoiseReading


class NoiseMonitorService(ABC):
    """Public API for the append-only noise reading log."""

    @abstractmethod
    def report_noise_level(
        self, *, meta: EnvelopeMeta, zone_id: int, decibel_level: int
    ) -> Envelope[NoiseReading]:
        """Record the caller's reading at the current block and update zone usage."""

    @abstractmethod
    def get_noise_reading(
        self, *, meta: EnvelopeMeta, zone_id: int, block: int
    ) -> Envelope[NoiseReading | None]:
        """Read the reading reported for a zone at one block height."""

    @abstractmethod
    def health(self, *, meta: EnvelopeMeta) -> Envelope[HealthStatus]:
        """Return service, clock, and ledger store readiness."""


def build_noise_monitor_service(
    *,
    settings: DecibelSettings,
    store: LedgerStore,
    clock: BlockClock,
) -> NoiseMonitorService:
    """Build default Noise Monitor implementation from typed settings."""
    from services.state.noise_monitor.config import resolve_noise_monitor_settings
    from services.state.noise_monitor.implementation import DefaultNoiseMonitorService

    return DefaultNoiseMonitorService(
        settings=resolve_noise_monitor_settings(settings),
        store=store,
        clock=clock,
    )
