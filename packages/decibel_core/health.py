"""Aggregate ledger health evaluation."""

from __future__ import annotations

import inspect
from collections.abc import Callable, Mapping
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError

from pydantic import BaseModel, ConfigDict, Field

from packages.decibel_shared.config import DecibelSettings
from packages.decibel_shared.envelope import EnvelopeKind, new_meta
from packages.decibel_shared.manifest import get_registry


class ComponentHealthResult(BaseModel):
    """One component-level readiness result."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    ready: bool
    detail: str = ""


class LedgerHealthResult(BaseModel):
    """Aggregate readiness across services and shared resources."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    ready: bool
    services: dict[str, ComponentHealthResult] = Field(default_factory=dict)
    resources: dict[str, ComponentHealthResult] = Field(default_factory=dict)


def evaluate_ledger_health(
    *,
    settings: DecibelSettings,
    components: Mapping[str, object],
) -> LedgerHealthResult:
    """Evaluate aggregate health from instantiated components.

    Services must expose ``health(meta=...)``. Resources are probed through
    ``health()`` or ``is_healthy()`` when they have one; plain resources such
    as clocks and resolved settings have no probe and count as ready.
    """
    registry = get_registry()
    max_timeout_seconds = settings.core.health.max_timeout_seconds

    service_results: dict[str, ComponentHealthResult] = {}
    for manifest in registry.list_services():
        component_id = str(manifest.id)
        service = components.get(component_id)
        if service is None:
            service_results[component_id] = ComponentHealthResult(
                ready=False, detail="component not instantiated"
            )
            continue
        service_results[component_id] = _evaluate_component_health(
            component=service,
            max_timeout_seconds=max_timeout_seconds,
            require_probe=True,
        )

    resource_results: dict[str, ComponentHealthResult] = {}
    for manifest in registry.list_resources():
        component_id = str(manifest.id)
        if component_id not in components:
            resource_results[component_id] = ComponentHealthResult(
                ready=False, detail="component not instantiated"
            )
            continue
        resource_results[component_id] = _evaluate_component_health(
            component=components[component_id],
            max_timeout_seconds=max_timeout_seconds,
            require_probe=False,
        )

    overall_ready = all(item.ready for item in service_results.values()) and all(
        item.ready for item in resource_results.values()
    )
    return LedgerHealthResult(
        ready=overall_ready,
        services=service_results,
        resources=resource_results,
    )


def _evaluate_component_health(
    *,
    component: object,
    max_timeout_seconds: float,
    require_probe: bool,
) -> ComponentHealthResult:
    """Evaluate one component health with global timeout enforcement."""
    call = _resolve_probe(component)
    if call is None:
        if require_probe:
            return ComponentHealthResult(
                ready=False, detail="component does not expose health()"
            )
        return ComponentHealthResult(ready=True, detail="no health probe")

    with ThreadPoolExecutor(max_workers=1) as executor:
        future = executor.submit(call)
        try:
            result = future.result(timeout=max_timeout_seconds)
        except FutureTimeoutError:
            return ComponentHealthResult(
                ready=False,
                detail=(
                    f"health() exceeded global max timeout ({max_timeout_seconds:.3f}s)"
                ),
            )
        except Exception as exc:  # noqa: BLE001
            return ComponentHealthResult(
                ready=False,
                detail=f"health() raised {type(exc).__name__}",
            )

    ready, detail = _coerce_health_result(result)
    return ComponentHealthResult(ready=ready, detail=detail or "ok")


def _resolve_probe(component: object) -> Callable[[], object] | None:
    health_fn = getattr(component, "health", None)
    if callable(health_fn):
        if not _accepts_meta(health_fn):
            return health_fn
        meta = new_meta(kind=EnvelopeKind.QUERY, source="core_health", principal="system")
        return lambda: health_fn(meta=meta)
    is_healthy = getattr(component, "is_healthy", None)
    if callable(is_healthy):
        return is_healthy
    return None


def _accepts_meta(health_fn: Callable[..., object]) -> bool:
    try:
        signature = inspect.signature(health_fn)
    except (TypeError, ValueError):
        return False
    return "meta" in signature.parameters


def _coerce_health_result(result: object) -> tuple[bool, str]:
    """Normalize bool or envelope health results into ready/detail."""
    if isinstance(result, bool):
        return result, "ok" if result else "not ready"

    if hasattr(result, "ok") and hasattr(result, "payload"):
        if not result.ok:
            errors = getattr(result, "errors", [])
            return False, errors[0].message if errors else "health() failed"
        payload = result.payload.value
        if payload is None or not hasattr(payload, "model_dump"):
            return True, ""
        values = payload.model_dump(mode="python")
        ready = all(
            value
            for key, value in values.items()
            if key.endswith("_ready") and isinstance(value, bool)
        )
        detail = values.get("detail")
        return ready, detail if isinstance(detail, str) else ""

    return False, "health() returned unsupported result"
