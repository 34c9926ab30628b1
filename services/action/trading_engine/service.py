"""Authoritative in-process Python API for Trading Engine Service."""

from __future__ import annotations

from abc import ABC, abstractmethod

from packages.decibel_shared.config import DecibelSettings
from packages.decibel_shared.envelope import Envelope, EnvelopeMeta
from resources.adapters.block_clock import BlockClock
from resources.adapters.ownership_token import OwnershipTokenFacility
from resources.substrates.ledger_store import LedgerStore
from services.action.trading_engine.domain import (
    HealthStatus,
    TradeOffer,
    TradeSettlement,
)


class TradingEngineService(ABC):
    """Public API for selling allowance capacity through ownership tokens."""

    @abstractmethod
    def create_trade_offer(
        self,
        *,
        meta: EnvelopeMeta,
        zone_id: int,
        decibel_amount: int,
        price: int,
    ) -> Envelope[int]:
        """Mint a token to the caller, record an active offer, return the token id."""

    @abstractmethod
    def accept_trade_offer(
        self, *, meta: EnvelopeMeta, token_id: int
    ) -> Envelope[TradeSettlement]:
        """Move the token and the offered capacity to the caller in one step."""

    @abstractmethod
    def transfer_token(
        self, *, meta: EnvelopeMeta, token_id: int, recipient: str
    ) -> Envelope[int]:
        """Give a token the caller owns to ``recipient``."""

    @abstractmethod
    def get_trade_offer(
        self, *, meta: EnvelopeMeta, token_id: int
    ) -> Envelope[TradeOffer | None]:
        """Read one offer, or ``None`` when absent."""

    @abstractmethod
    def get_owner(self, *, meta: EnvelopeMeta, token_id: int) -> Envelope[str | None]:
        """Read the current owner of one token."""

    @abstractmethod
    def get_last_token_id(self, *, meta: EnvelopeMeta) -> Envelope[int]:
        """Read the most recently minted token id (0 when none)."""

    @abstractmethod
    def get_token_uri(
        self, *, meta: EnvelopeMeta, token_id: int
    ) -> Envelope[str | None]:
        """Read the opaque metadata URI of one token."""

    @abstractmethod
    def health(self, *, meta: EnvelopeMeta) -> Envelope[HealthStatus]:
        """Return service and ledger store readiness."""


def build_trading_engine_service(
    *,
    settings: DecibelSettings,
    store: LedgerStore,
    clock: BlockClock,
    tokens: OwnershipTokenFacility,
) -> TradingEngineService:
    """Build default Trading Engine implementation from typed settings."""
    from services.action.trading_engine.config import resolve_trading_engine_settings
    from services.action.trading_engine.implementation import (
        DefaultTradingEngineService,
    )

    return DefaultTradingEngineService(
        settings=resolve_trading_engine_settings(settings),
        store=store,
        clock=clock,
        tokens=tokens,
    )
