"""Concrete Noise Monitor Service implementation."""

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
    LedgerStore,
    LedgerTransaction,
    LedgerUnitOfWork,
    transition_error,
)
from services.state.noise_monitor.component import SERVICE_COMPONENT_ID
from services.state.noise_monitor.config import NoiseMonitorSettings
from services.state.noise_monitor.domain import HealthStatus, NoiseReading
from services.state.noise_monitor.service import NoiseMonitorService
from services.state.noise_monitor.validation import (
    ReadingKeyRequest,
    ReportNoiseRequest,
)
from services.state.zone_registry.transitions import set_current_usage

_LOGGER = get_logger(__name__)

T = TypeVar("T")


class DefaultNoiseMonitorService(NoiseMonitorService):
    """Default Noise Monitor backed by the shared ledger store."""

    def __init__(
        self,
        *,
        settings: NoiseMonitorSettings,
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
    def report_noise_level(
        self, *, meta: EnvelopeMeta, zone_id: int, decibel_level: int
    ) -> Envelope[NoiseReading]:
        """Append one reading and overwrite the zone's current usage."""
        request, errors = validate_request(
            meta=meta,
            model=ReportNoiseRequest,
            payload={"zone_id": zone_id, "decibel_level": decibel_level},
        )
        if errors:
            return failure(meta=meta, errors=errors)
        assert request is not None
        now = self._clock.current_block()
        ceiling = self._settings.max_reading_decibel

        def _report(tx: LedgerTransaction) -> NoiseReading:
            if not 0 <= request.decibel_level <= ceiling:
                raise reject(
                    codes.INVALID_DECIBEL,
                    f"reading must be within [0, {ceiling}]",
                    metadata={"decibel_level": request.decibel_level},
                )
            set_current_usage(
                tx, zone_id=request.zone_id, decibel_level=request.decibel_level
            )
            if tx.get_noise_reading(request.zone_id, now) is not None:
                raise reject(
                    codes.ALREADY_EXISTS,
                    "a reading already exists for this zone and block",
                    metadata={"zone_id": request.zone_id, "block": now},
                )
            reading = NoiseReading(
                zone_id=request.zone_id,
                block=now,
                decibel_level=request.decibel_level,
                reporter=meta.principal,
                verified=False,
            )
            tx.put_noise_reading(reading)
            return reading

        result = self._transact(meta=meta, operation="report_noise_level", fn=_report)
        if result.ok:
            _LOGGER.info(
                "noise reading recorded",
                extra={
                    fields.BLOCK_HEIGHT: now,
                    "zone_id": request.zone_id,
                    "decibel_level": request.decibel_level,
                },
            )
        return result

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
        id_fields=("zone_id", "block"),
    )
    def get_noise_reading(
        self, *, meta: EnvelopeMeta, zone_id: int, block: int
    ) -> Envelope[NoiseReading | None]:
        """Read one reading by zone and block height."""
        request, errors = validate_request(
            meta=meta,
            model=ReadingKeyRequest,
            payload={"zone_id": zone_id, "block": block},
        )
        if errors:
            return failure(meta=meta, errors=errors)
        assert request is not None
        return self._transact(
            meta=meta,
            operation="get_noise_reading",
            fn=lambda tx: tx.get_noise_reading(request.zone_id, request.block),
        )

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
    )
    def health(self, *, meta: EnvelopeMeta) -> Envelope[HealthStatus]:
        """Return readiness of the clock and the ledger store."""
        errors = meta_errors(meta)
        if errors:
            return failure(meta=meta, errors=errors)
        try:
            current_block = self._clock.current_block()
            store_ready = self._store.is_healthy()
        except Exception as exc:  # noqa: BLE001
            return self._dependency_failure(meta=meta, operation="health", exc=exc)
        return success(
            meta=meta,
            payload=HealthStatus(
                service_ready=True,
                store_ready=store_ready,
                store_backend=self._store.backend,
                current_block=current_block,
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
