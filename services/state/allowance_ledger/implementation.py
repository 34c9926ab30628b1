"""Concrete Allowance Ledger Service implementation."""

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
from packages.decibel_shared.errors import codes, dependency_error
from packages.decibel_shared.logging import fields, get_logger, public_api_instrumented
from resources.adapters.block_clock import BlockClock
from resources.substrates.ledger_store import (
    LedgerStore,
    LedgerTransaction,
    LedgerUnitOfWork,
    transition_error,
)
from services.state.allowance_ledger import transitions
from services.state.allowance_ledger.component import SERVICE_COMPONENT_ID
from services.state.allowance_ledger.config import AllowanceLedgerSettings
from services.state.allowance_ledger.domain import Allowance, HealthStatus
from services.state.allowance_ledger.service import AllowanceLedgerService
from services.state.allowance_ledger.validation import (
    AllocateRequest,
    AllowanceKeyRequest,
)

_LOGGER = get_logger(__name__)

T = TypeVar("T")


class DefaultAllowanceLedgerService(AllowanceLedgerService):
    """Default Allowance Ledger backed by the shared ledger store."""

    def __init__(
        self,
        *,
        settings: AllowanceLedgerSettings,
        store: LedgerStore,
        clock: BlockClock,
    ) -> None:
        self._settings = settings
        self._store = store
        self._uow = LedgerUnitOfWork(store)
        self._clock = clock

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
        id_fields=("zone_id", "recipient"),
    )
    def allocate(
        self,
        *,
        meta: EnvelopeMeta,
        zone_id: int,
        recipient: str,
        amount: int,
        duration_blocks: int,
    ) -> Envelope[Allowance]:
        """Overwrite one holder's allowance in a zone owned by the caller."""
        request, errors = validate_request(
            meta=meta,
            model=AllocateRequest,
            payload={
                "zone_id": zone_id,
                "recipient": recipient,
                "amount": amount,
                "duration_blocks": duration_blocks,
            },
        )
        if errors:
            return failure(meta=meta, errors=errors)
        assert request is not None
        now = self._clock.current_block()

        result = self._transact(
            meta=meta,
            operation="allocate",
            fn=lambda tx: transitions.allocate(
                tx,
                caller=meta.principal,
                zone_id=request.zone_id,
                recipient=request.recipient,
                amount=request.amount,
                duration_blocks=request.duration_blocks,
                now=now,
            ),
        )
        if result.ok:
            allowance = result.payload.value
            _LOGGER.info(
                "allowance allocated",
                extra={
                    fields.BLOCK_HEIGHT: now,
                    "zone_id": allowance.zone_id,
                    "holder": allowance.holder,
                    "total_allowance": allowance.total_allowance,
                    "expiry_block": allowance.expiry_block,
                },
            )
        return result

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
        id_fields=("zone_id", "holder"),
    )
    def get_allowance(
        self, *, meta: EnvelopeMeta, zone_id: int, holder: str
    ) -> Envelope[Allowance | None]:
        """Read one allowance record."""
        request, errors = validate_request(
            meta=meta,
            model=AllowanceKeyRequest,
            payload={"zone_id": zone_id, "holder": holder},
        )
        if errors:
            return failure(meta=meta, errors=errors)
        assert request is not None
        return self._transact(
            meta=meta,
            operation="get_allowance",
            fn=lambda tx: tx.get_allowance(request.zone_id, request.holder),
        )

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
    )
    def health(self, *, meta: EnvelopeMeta) -> Envelope[HealthStatus]:
        """Return readiness of the ledger store backing allowances."""
        errors = meta_errors(meta)
        if errors:
            return failure(meta=meta, errors=errors)
        try:
            store_ready = self._store.is_healthy()
        except Exception as exc:  # noqa: BLE001
            return self._dependency_failure(meta=meta, operation="health", exc=exc)
        return success(
            meta=meta,
            payload=HealthStatus(
                service_ready=True,
                store_ready=store_ready,
                store_backend=self._store.backend,
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
