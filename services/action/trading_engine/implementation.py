"""Concrete Trading Engine Service implementation."""

from __future__ import annotations

from typing import Any, Callable, TypeVar

from packages.decibel_shared.envelope import (
    Envelope,
    EnvelopeMeta,
    failure,
    meta_errors,
    success,
    validate_request,
)
from packages.decibel_shared.errors import codes, dependency_error, reject
from packages.decibel_shared.logging import fields, get_logger, public_api_instrumented
from resources.adapters.block_clock import BlockClock
from resources.adapters.ownership_token import OwnershipTokenFacility
from resources.substrates.ledger_store import (
    LedgerStore,
    LedgerTransaction,
    LedgerUnitOfWork,
    transition_error,
)
from services.action.trading_engine.component import SERVICE_COMPONENT_ID
from services.action.trading_engine.config import TradingEngineSettings
from services.action.trading_engine.domain import (
    HealthStatus,
    TradeOffer,
    TradeSettlement,
)
from services.action.trading_engine.service import TradingEngineService
from services.action.trading_engine.validation import (
    CreateOfferRequest,
    TokenIdRequest,
    TransferTokenRequest,
)
from services.state.allowance_ledger.transitions import (
    require_capacity,
    transfer_allowance,
)

_LOGGER = get_logger(__name__)

T = TypeVar("T")


class DefaultTradingEngineService(TradingEngineService):
    """Default Trading Engine over the ledger store and a token facility.

    Offers reserve nothing: a seller may list more than they can deliver, and
    acceptance re-checks the seller's remaining capacity.
    """

    def __init__(
        self,
        *,
        settings: TradingEngineSettings,
        store: LedgerStore,
        clock: BlockClock,
        tokens: OwnershipTokenFacility,
    ) -> None:
        self._settings = settings
        self._store = store
        self._uow = LedgerUnitOfWork(store)
        self._clock = clock
        self._tokens = tokens

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
        id_fields=("zone_id",),
    )
    def create_trade_offer(
        self,
        *,
        meta: EnvelopeMeta,
        zone_id: int,
        decibel_amount: int,
        price: int,
    ) -> Envelope[int]:
        """List part of the caller's allowance for sale under a new token."""
        request, errors = validate_request(
            meta=meta,
            model=CreateOfferRequest,
            payload={"zone_id": zone_id, "decibel_amount": decibel_amount, "price": price},
        )
        if errors:
            return failure(meta=meta, errors=errors)
        assert request is not None
        now = self._clock.current_block()

        def _offer(tx: LedgerTransaction) -> TradeOffer:
            if request.decibel_amount == 0:
                raise reject(codes.INVALID_AMOUNT, "offer amount must be greater than zero")
            if request.price == 0:
                raise reject(codes.INVALID_AMOUNT, "offer price must be greater than zero")
            require_capacity(
                tx,
                zone_id=request.zone_id,
                holder=meta.principal,
                amount=request.decibel_amount,
            )
            token_id = self._tokens.mint(tx, owner=meta.principal)
            offer = TradeOffer(
                token_id=token_id,
                seller=meta.principal,
                price=request.price,
                zone_id=request.zone_id,
                decibel_amount=request.decibel_amount,
                active=True,
            )
            tx.put_trade_offer(offer)
            return offer

        result = self._transact(meta=meta, operation="create_trade_offer", fn=_offer)
        if not result.ok:
            return failure(meta=meta, errors=result.errors)
        offer = result.payload.value
        _LOGGER.info(
            "trade offer created",
            extra={
                fields.BLOCK_HEIGHT: now,
                "token_id": offer.token_id,
                "zone_id": offer.zone_id,
                "decibel_amount": offer.decibel_amount,
                "price": offer.price,
            },
        )
        return success(meta=meta, payload=offer.token_id)

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
        id_fields=("token_id",),
    )
    def accept_trade_offer(
        self, *, meta: EnvelopeMeta, token_id: int
    ) -> Envelope[TradeSettlement]:
        """Settle an active offer: token, then capacity, then deactivation."""
        request, errors = validate_request(
            meta=meta, model=TokenIdRequest, payload={"token_id": token_id}
        )
        if errors:
            return failure(meta=meta, errors=errors)
        assert request is not None
        now = self._clock.current_block()
        buyer = meta.principal

        def _accept(tx: LedgerTransaction) -> TradeSettlement:
            offer = tx.get_trade_offer(request.token_id)
            if offer is None or not offer.active:
                raise reject(
                    codes.NOT_FOUND,
                    "no active offer for token",
                    metadata={"token_id": request.token_id},
                )
            if buyer == offer.seller:
                raise reject(codes.UNAUTHORIZED, "seller cannot accept own offer")
            self._tokens.transfer(
                tx, token_id=offer.token_id, sender=offer.seller, recipient=buyer
            )
            seller_allowance, buyer_allowance = transfer_allowance(
                tx,
                zone_id=offer.zone_id,
                sender=offer.seller,
                recipient=buyer,
                amount=offer.decibel_amount,
            )
            closed = offer.model_copy(update={"active": False})
            tx.put_trade_offer(closed)
            return TradeSettlement(
                offer=closed,
                buyer=buyer,
                seller_allowance=seller_allowance,
                buyer_allowance=buyer_allowance,
            )

        result = self._transact(meta=meta, operation="accept_trade_offer", fn=_accept)
        if result.ok:
            _LOGGER.info(
                "trade offer accepted",
                extra={
                    fields.BLOCK_HEIGHT: now,
                    "token_id": request.token_id,
                    "decibel_amount": result.payload.value.offer.decibel_amount,
                },
            )
        return result

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
        id_fields=("token_id", "recipient"),
    )
    def transfer_token(
        self, *, meta: EnvelopeMeta, token_id: int, recipient: str
    ) -> Envelope[int]:
        """Hand a token to another principal; the offer record is left as is."""
        request, errors = validate_request(
            meta=meta,
            model=TransferTokenRequest,
            payload={"token_id": token_id, "recipient": recipient},
        )
        if errors:
            return failure(meta=meta, errors=errors)
        assert request is not None

        def _transfer(tx: LedgerTransaction) -> int:
            self._tokens.transfer(
                tx,
                token_id=request.token_id,
                sender=meta.principal,
                recipient=request.recipient,
            )
            return request.token_id

        return self._transact(meta=meta, operation="transfer_token", fn=_transfer)

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
        id_fields=("token_id",),
    )
    def get_trade_offer(
        self, *, meta: EnvelopeMeta, token_id: int
    ) -> Envelope[TradeOffer | None]:
        request, errors = validate_request(
            meta=meta, model=TokenIdRequest, payload={"token_id": token_id}
        )
        if errors:
            return failure(meta=meta, errors=errors)
        assert request is not None
        return self._transact(
            meta=meta,
            operation="get_trade_offer",
            fn=lambda tx: tx.get_trade_offer(request.token_id),
        )

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
        id_fields=("token_id",),
    )
    def get_owner(self, *, meta: EnvelopeMeta, token_id: int) -> Envelope[str | None]:
        request, errors = validate_request(
            meta=meta, model=TokenIdRequest, payload={"token_id": token_id}
        )
        if errors:
            return failure(meta=meta, errors=errors)
        assert request is not None
        return self._transact(
            meta=meta,
            operation="get_owner",
            fn=lambda tx: self._tokens.owner_of(tx, token_id=request.token_id),
        )

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
    )
    def get_last_token_id(self, *, meta: EnvelopeMeta) -> Envelope[int]:
        errors = meta_errors(meta)
        if errors:
            return failure(meta=meta, errors=errors)
        return self._transact(
            meta=meta, operation="get_last_token_id", fn=self._tokens.last_id
        )

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
        id_fields=("token_id",),
    )
    def get_token_uri(
        self, *, meta: EnvelopeMeta, token_id: int
    ) -> Envelope[str | None]:
        """Return the token's URI, or ``None`` for unminted tokens."""
        request, errors = validate_request(
            meta=meta, model=TokenIdRequest, payload={"token_id": token_id}
        )
        if errors:
            return failure(meta=meta, errors=errors)
        assert request is not None

        def _uri(tx: LedgerTransaction) -> str | None:
            if self._tokens.owner_of(tx, token_id=request.token_id) is None:
                return None
            return self._tokens.token_uri(request.token_id)

        return self._transact(meta=meta, operation="get_token_uri", fn=_uri)

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
    )
    def health(self, *, meta: EnvelopeMeta) -> Envelope[HealthStatus]:
        """Return readiness of the ledger store backing offers and tokens."""
        errors = meta_errors(meta)
        if errors:
            return failure(meta=meta, errors=errors)
        result = self._transact(meta=meta, operation="health", fn=self._tokens.last_id)
        if not result.ok:
            return failure(meta=meta, errors=result.errors)
        store_ready = self._store.is_healthy()
        return success(
            meta=meta,
            payload=HealthStatus(
                service_ready=True,
                store_ready=store_ready,
                store_backend=self._store.backend,
                last_token_id=result.payload.value,
                detail="ok" if store_ready else "ledger store unavailable",
            ),
        )

    def _transact(
        self,
        *,
        meta: EnvelopeMeta,
        operation: str,
        fn: Callable[[LedgerTransaction], T],
    ) -> Envelope[T]:
        """Run one transition and map its failure into envelope errors."""
        try:
            payload = self._uow.run(fn)
        except Exception as exc:  # noqa: BLE001
            error = transition_error(exc)
            if error is None:
                return self._dependency_failure(meta=meta, operation=operation, exc=exc)
            return failure(meta=meta, errors=[error])
        return success(meta=meta, payload=payload)

    def _dependency_failure(
        self,
        *,
        meta: EnvelopeMeta,
        operation: str,
        exc: Exception,
    ) -> Envelope[Any]:
        """Map one dependency/runtime exception into structured envelope errors."""
        _LOGGER.warning(
            "%s failed due to dependency error: exception_type=%s",
            operation,
            type(exc).__name__,
            exc_info=exc,
        )
        return failure(
            meta=meta,
            errors=[
                dependency_error(
                    f"{operation} failed",
                    code=codes.DEPENDENCY_FAILURE,
                    metadata={"exception_type": type(exc).__name__},
                )
            ],
        )
