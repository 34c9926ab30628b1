"""Concrete Zone Registry Service implementation."""

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
    LedgerCounter,
    LedgerStore,
    LedgerTransaction,
    LedgerUnitOfWork,
    transition_error,
)
from services.state.zone_registry import transitions
from services.state.zone_registry.component import SERVICE_COMPONENT_ID
from services.state.zone_registry.config import ZoneRegistrySettings
from services.state.zone_registry.domain import HealthStatus, Zone
from services.state.zone_registry.service import ZoneRegistryService
from services.state.zone_registry.validation import CreateZoneRequest, ZoneIdRequest

_LOGGER = get_logger(__name__)

T = TypeVar("T")


class DefaultZoneRegistryService(ZoneRegistryService):
    """Default Zone Registry backed by the shared ledger store."""

    def __init__(
        self,
        *,
        settings: ZoneRegistrySettings,
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
    )
    def create_zone(
        self,
        *,
        meta: EnvelopeMeta,
        name: str,
        max_decibel: int,
        is_quiet_zone: bool,
    ) -> Envelope[int]:
        """Create a zone owned by ``meta.principal``."""
        request, errors = validate_request(
            meta=meta,
            model=CreateZoneRequest,
            payload={
                "name": name,
                "max_decibel": max_decibel,
                "is_quiet_zone": is_quiet_zone,
            },
        )
        if errors:
            return failure(meta=meta, errors=errors)
        assert request is not None
        now = self._clock.current_block()

        def _create(tx: LedgerTransaction) -> Zone:
            return transitions.create_zone(
                tx,
                owner=meta.principal,
                name=request.name,
                max_decibel=request.max_decibel,
                is_quiet_zone=request.is_quiet_zone,
            )

        result = self._transact(meta=meta, operation="create_zone", fn=_create)
        if not result.ok:
            return failure(meta=meta, errors=result.errors)
        zone = result.payload.value
        _LOGGER.info(
            "zone created",
            extra={
                fields.BLOCK_HEIGHT: now,
                "zone_id": zone.zone_id,
                "max_decibel": zone.max_decibel,
                "is_quiet_zone": zone.is_quiet_zone,
            },
        )
        return success(meta=meta, payload=zone.zone_id)

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
        id_fields=("zone_id",),
    )
    def get_zone(self, *, meta: EnvelopeMeta, zone_id: int) -> Envelope[Zone | None]:
        """Read one zone by id."""
        request, errors = validate_request(
            meta=meta, model=ZoneIdRequest, payload={"zone_id": zone_id}
        )
        if errors:
            return failure(meta=meta, errors=errors)
        assert request is not None
        return self._transact(
            meta=meta,
            operation="get_zone",
            fn=lambda tx: tx.get_zone(request.zone_id),
        )

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
        id_fields=("zone_id",),
    )
    def get_zone_owner(
        self, *, meta: EnvelopeMeta, zone_id: int
    ) -> Envelope[str | None]:
        """Read the owner of one zone."""
        request, errors = validate_request(
            meta=meta, model=ZoneIdRequest, payload={"zone_id": zone_id}
        )
        if errors:
            return failure(meta=meta, errors=errors)
        assert request is not None
        return self._transact(
            meta=meta,
            operation="get_zone_owner",
            fn=lambda tx: tx.get_zone_owner(request.zone_id),
        )

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
        id_fields=("zone_id",),
    )
    def get_zone_premium(
        self, *, meta: EnvelopeMeta, zone_id: int
    ) -> Envelope[int | None]:
        """Read the premium side index for one zone."""
        request, errors = validate_request(
            meta=meta, model=ZoneIdRequest, payload={"zone_id": zone_id}
        )
        if errors:
            return failure(meta=meta, errors=errors)
        assert request is not None
        return self._transact(
            meta=meta,
            operation="get_zone_premium",
            fn=lambda tx: tx.get_zone_premium(request.zone_id),
        )

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
    )
    def health(self, *, meta: EnvelopeMeta) -> Envelope[HealthStatus]:
        """Return readiness of the ledger store backing zone state."""
        errors = meta_errors(meta)
        if errors:
            return failure(meta=meta, errors=errors)

        result = self._transact(
            meta=meta,
            operation="health",
            fn=lambda tx: tx.last_id(LedgerCounter.ZONE),
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
                zone_count=result.payload.value,
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
