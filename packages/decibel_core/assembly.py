"""Composition root: build every registered component around one store."""

from __future__ import annotations

import importlib
from collections.abc import Callable, Mapping
from dataclasses import dataclass

from packages.decibel_shared.component_loader import import_registered_component_modules
from packages.decibel_shared.config import DecibelSettings
from packages.decibel_shared.logging import get_logger
from packages.decibel_shared.manifest import ComponentManifest, get_registry

_LOGGER = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class Ledger:
    """Built components keyed by component id, with typed shortcuts."""

    components: Mapping[str, object]

    def get(self, component_id: str) -> object:
        try:
            return self.components[component_id]
        except KeyError:
            raise LookupError(f"component '{component_id}' was not built") from None

    @property
    def store(self):
        return self.get("substrate_ledger_store")

    @property
    def clock(self):
        return self.get("adapter_block_clock")

    @property
    def zones(self):
        return self.get("service_zone_registry")

    @property
    def allowances(self):
        return self.get("service_allowance_ledger")

    @property
    def noise(self):
        return self.get("service_noise_monitor")

    @property
    def permits(self):
        return self.get("service_permit_manager")

    @property
    def trading(self):
        return self.get("service_trading_engine")

    @property
    def governance(self):
        return self.get("service_governance_engine")


def _resolve_component_builder(
    manifest: ComponentManifest,
) -> Callable[..., object]:
    """Load one component module and return its build callable."""
    for module_root in sorted(manifest.module_roots):
        module = importlib.import_module(f"{module_root}.component")
        builder = getattr(module, "build_component", None)
        if callable(builder):
            return builder
    raise RuntimeError(
        f"component '{manifest.id}' does not expose build_component(...) in its component module"
    )


def build_components(
    settings: DecibelSettings,
    *,
    overrides: Mapping[str, object] | None = None,
) -> dict[str, object]:
    """Instantiate all registered L0 resources and L1 services by registry walk.

    ``overrides`` pre-seeds instances by component id (for example an
    in-memory store or a manual clock) and those components are not built.
    A builder raising ``KeyError`` is retried once its dependencies exist.
    """
    import_registered_component_modules()
    registry = get_registry()
    registry.assert_valid()

    built: dict[str, object] = dict(overrides or {})
    pending = [
        manifest
        for manifest in (*registry.list_resources(), *registry.list_services())
        if str(manifest.id) not in built
    ]

    while pending:
        progressed = False
        next_round: list[ComponentManifest] = []
        for manifest in pending:
            builder = _resolve_component_builder(manifest)
            try:
                built[str(manifest.id)] = builder(settings=settings, components=built)
            except KeyError:
                next_round.append(manifest)
                continue
            progressed = True
            _LOGGER.debug(
                "component instantiated",
                extra={"component_id": str(manifest.id), "layer": manifest.layer},
            )

        if not progressed:
            unresolved = ", ".join(str(item.id) for item in next_round)
            raise RuntimeError(
                "unable to resolve component dependency graph; unresolved components: "
                f"{unresolved}"
            )
        pending = next_round
    return built


def build_ledger(
    settings: DecibelSettings,
    *,
    overrides: Mapping[str, object] | None = None,
) -> Ledger:
    """Build every component and wrap them in a :class:`Ledger`."""
    components = build_components(settings, overrides=overrides)
    _LOGGER.info(
        "ledger assembled",
        extra={
            "component_count": len(components),
            "store_backend": getattr(
                components.get("substrate_ledger_store"), "backend", None
            ),
        },
    )
    return Ledger(components=components)
