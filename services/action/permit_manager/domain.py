"""Domain payloads and fee rule for Permit Manager Service."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from resources.substrates.ledger_store.records import Permit


def permit_fee(*, requested_decibels: int, duration_blocks: int, premium: int) -> int:
    """Return ``requested * duration * premium / 100`` truncated toward zero."""
    return requested_decibels * duration_blocks * premium // 100


class HealthStatus(BaseModel):
    """Permit Manager and ledger store readiness."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    service_ready: bool
    store_ready: bool
    store_backend: str
    permit_count: int
    detail: str


__all__ = ["HealthStatus", "Permit", "permit_fee"]
