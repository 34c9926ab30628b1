"""Domain payloads for Trading Engine Service."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from resources.substrates.ledger_store.records import Allowance, TradeOffer


class TradeSettlement(BaseModel):
    """Outcome of one accepted offer."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    offer: TradeOffer
    buyer: str
    seller_allowance: Allowance
    buyer_allowance: Allowance


class HealthStatus(BaseModel):
    """Trading Engine and ledger store readiness."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    service_ready: bool
    store_ready: bool
    store_backend: str
    last_token_id: int
    detail: str


__all__ = ["HealthStatus", "TradeOffer", "TradeSettlement"]
