"""Domain constants and payloads for Zone Registry Service."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from resources.substrates.ledger_store.records import Zone

MIN_DECIBEL = 30
MAX_DECIBEL = 120
QUIET_ZONE_MAX_DECIBEL = 50
STANDARD_PREMIUM = 100
QUIET_ZONE_PREMIUM = 200


class HealthStatus(BaseModel):
    """Zone Registry and ledger store readiness."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    service_ready: bool
    store_ready: bool
    store_backend: str
    zone_count: int
    detail: str


__all__ = [
    "HealthStatus",
    "MAX_DECIBEL",
    "MIN_DECIBEL",
    "QUIET_ZONE_MAX_DECIBEL",
    "QUIET_ZONE_PREMIUM",
    "STANDARD_PREMIUM",
    "Zone",
]
