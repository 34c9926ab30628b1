"""Component declaration for Noise Monitor Service."""

from __future__ import annotations

from collections.abc import Mapping

from packages.decibel_shared.config import DecibelSettings
from packages.decibel_shared.manifest import (
    ComponentId,
    ModuleRoot,
    ServiceManifest,
    register_component,
)

SERVICE_COMPONENT_ID = ComponentId("service_noise_monitor")

MANIFEST = register_component(
    ServiceManifest(
        id=SERVICE_COMPONENT_ID,
        layer=1,
        system="state",
        module_roots=frozenset({ModuleRoot("services.state.noise_monitor")}),
        public_api_roots=frozenset(
            {ModuleRoot("services.state.noise_monitor.service")}
        ),
        depends_on=frozenset(
            {
                ComponentId("substrate_ledger_store"),
                ComponentId("adapter_block_clock"),
                ComponentId("service_zone_registry"),
            }
        ),
    )
)


def build_component(
    *, settings: DecibelSettings, components: Mapping[str, object]
) -> object:
    """Build concrete runtime instance for this registered service component."""
    from services.state.noise_monitor.service import build_noise_monitor_service

    return build_noise_monitor_service(
        settings=settings,
        store=components["substrate_ledger_store"],
        clock=components["adapter_block_clock"],
    )
