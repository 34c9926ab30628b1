"""Concrete Permit Manager Service implementation."""

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
from resources.substrates.ledger_store import (
    LedgerCounter,
    LedgerStore,
    LedgerTransaction,
    LedgerUnitOfWork,
    transition_error,
)
from services.action.permit_manager.component import SERVICE_COMPONENT_ID
from services.action.permit_manager.config import PermitManagerSettings
from services.action.permit_manager.domain import HealthStatus, Permit, permit_fee
from services.action.permit_manager.service import PermitManagerService
from services.action.permit_manager.validation import (
    PermitIdRequest,
    PermitTermsRequest,
)
from services.state.zone_registry.domain import MAX_DECIBEL, MIN_DECIBEL
from services.state.zone_registry.transitions import (
    require_zone,
    require_zone_owner,
    zone_premium,
)

_LOGGER = get_logger(__name__)

T = TypeVar("T")


class DefaultPermitManagerService(PermitManagerService):
    """Default Permit Manager backed by the shared ledger store."""

    def __init__(
        self,
        *,
        settings: PermitManagerSettings,
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
        id_fields=("zone_id",),
    )
    def calculate_fee(
        self,
        *,
        meta: EnvelopeMeta,
        zone_id: int,
        requested_decibels: int,
        duration_blocks: int,
    ) -> Envelope[int]:
        """Quote the fee using the zone's premium when it is a quiet zone."""
        request, errors = validate_request(
            meta=meta,
            model=PermitTermsRequest,
            payload={
                "zone_id": zone_id,
                "requested_decibels": requested_decibels,
                "duration_blocks": duration_blocks,
            },
        )
        if errors:
            return failure(meta=meta, errors=errors)
        assert request is not None
        return self._transact(
            meta=meta,
            operation="calculate_fee",
            fn=lambda tx: _fee(tx, request),
        )

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
        id_fields=("zone_id",),
    )
    def apply_for_permit(
        self,
        *,
        meta: EnvelopeMeta,
        zone_id: int,
        requested_decibels: int,
        duration_blocks: int,
    ) -> Envelope[int]:
        """Create an unapproved permit with its fee fixed at application time."""
        request, errors = validate_request(
            meta=meta,
            model=PermitTermsRequest,
            payload={
                "zone_id": zone_id,
                "requested_decibels": requested_decibels,
                "duration_blocks": duration_blocks,
            },
        )
        if errors:
            return failure(meta=meta, errors=errors)
        assert request is not None
        now = self._clock.current_block()

        def _apply(tx: LedgerTransaction) -> Permit:
            if not MIN_DECIBEL <= request.requested_decibels <= MAX_DECIBEL:
                raise reject(
                    codes.INVALID_DECIBEL,
                    f"requested decibels must be within [{MIN_DECIBEL}, {MAX_DECIBEL}]",
                    metadata={"requested_decibels": request.requested_decibels},
                )
            fee = _fee(tx, request)
            permit = Permit(
                permit_id=tx.next_id(LedgerCounter.PERMIT),
                zone_id=request.zone_id,
                applicant=meta.principal,
                requested_decibels=request.requested_decibels,
                duration_blocks=request.duration_blocks,
                approved=False,
                start_block=0,
                end_block=0,
                fee_paid=fee,
            )
            tx.put_permit(permit)
            return permit

        result = self._transact(meta=meta, operation="apply_for_permit", fn=_apply)
        if not result.ok:
            return failure(meta=meta, errors=result.errors)
        permit = result.payload.value
        _LOGGER.info(
            "permit applied",
            extra={
                fields.BLOCK_HEIGHT: now,
                "permit_id": permit.permit_id,
                "zone_id": permit.zone_id,
                "fee_paid": permit.fee_paid,
            },
        )
        return success(meta=meta, payload=permit.permit_id)

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
        id_fields=("permit_id",),
    )
    def approve_permit(self, *, meta: EnvelopeMeta, permit_id: int) -> Envelope[Permit]:
        """Approve a permit and open its window at the current block."""
        request, errors = validate_request(
            meta=meta, model=PermitIdRequest, payload={"permit_id": permit_id}
        )
        if errors:
            return failure(meta=meta, errors=errors)
        assert request is not None
        now = self._clock.current_block()

        def _approve(tx: LedgerTransaction) -> Permit:
            permit = tx.get_permit(request.permit_id)
            if permit is None:
                raise reject(
                    codes.NOT_FOUND,
                    "permit not found",
                    metadata={"permit_id": request.permit_id},
                )
            require_zone_owner(tx, permit.zone_id, meta.principal)
            if permit.approved:
                raise reject(
                    codes.PERMIT_EXISTS,
                    "permit already approved",
                    metadata={"permit_id": permit.permit_id},
                )
            approved = permit.model_copy(
                update={
                    "approved": True,
                    "start_block": now,
                    "end_block": now + permit.duration_blocks,
                }
            )
            tx.put_permit(approved)
            return approved

        result = self._transact(meta=meta, operation="approve_permit", fn=_approve)
        if result.ok:
            _LOGGER.info(
                "permit approved",
                extra={
                    fields.BLOCK_HEIGHT: now,
                    "permit_id": request.permit_id,
                    "end_block": result.payload.value.end_block,
                },
            )
        return result

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
        id_fields=("permit_id",),
    )
    def get_permit(
        self, *, meta: EnvelopeMeta, permit_id: int
    ) -> Envelope[Permit | None]:
        """Read one permit."""
        request, errors = validate_request(
            meta=meta, model=PermitIdRequest, payload={"permit_id": permit_id}
        )
        if errors:
            return failure(meta=meta, errors=errors)
        assert request is not None
        return self._transact(
            meta=meta,
            operation="get_permit",
            fn=lambda tx: tx.get_permit(request.permit_id),
        )

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
    )
    def health(self, *, meta: EnvelopeMeta) -> Envelope[HealthStatus]:
        """Return readiness of the ledger store backing permits."""
        errors = meta_errors(meta)
        if errors:
            return failure(meta=meta, errors=errors)
        result = self._transact(
            meta=meta,
            operation="health",
            fn=lambda tx: tx.last_id(LedgerCounter.PERMIT),
        )
        if not result.ok:
            return failure(meta=meta, errors=result.errors)
        store_ready = self._store.is_healthy()
        return success(
            meta=meta,
            payload=HealthStatus(
                service_ready=True,
                store_ready=store_ready,
                store_backend=self._store.backend,
                permit_count=result.payload.value,
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


def _fee(tx: LedgerTransaction, request: PermitTermsRequest) -> int:
    zone = require_zone(tx, request.zone_id)
    return permit_fee(
        requested_decibels=request.requested_decibels,
        duration_blocks=request.duration_blocks,
        premium=zone_premium(tx, zone),
    )
