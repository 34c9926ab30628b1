"""Domain payloads for Noise Monitor Service."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from resources.substrates.ledger_store.records import NoiseReading


class HealthStatus(BaseModel):
    """Noise Monitor and ledger store readiness."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    service_ready: bool
    store_ready: bool
    store_backend: str
    current_block: int
    detail: str


__all__ = ["HealthStatus", "NoiseReading"]
