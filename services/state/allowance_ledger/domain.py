"""Domain payloads for Allowance Ledger Service."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from resources.substrates.ledger_store.records import Allowance


class HealthStatus(BaseModel):
    """Allowance Ledger and ledger store readiness."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    service_ready: bool
    store_ready: bool
    store_backend: str
    detail: str


__all__ = ["Allowance", "HealthStatus"]
