"""Component declaration for Governance Engine Service."""

from __future__ import annotations

from collections.abc import Mapping

from packages.decibel_shared.config import DecibelSettings
from packages.decibel_shared.manifest import (
    ComponentId,
    ModuleRoot,
    ServiceManifest,
    register_component,
)

SERVICE_COMPONENT_ID = ComponentId("service_governance_engine")

MANIFEST = register_component(
    ServiceManifest(
        id=SERVICE_COMPONENT_ID,
        layer=1,
        system="action",
        module_roots=frozenset({ModuleRoot("services.action.governance_engine")}),
        public_api_roots=frozenset(
            {ModuleRoot("services.action.governance_engine.service")}
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
    from services.action.governance_engine.service import (
        build_governance_engine_service,
    )

    return build_governance_engine_service(
        settings=settings,
        store=components["substrate_ledger_store"],
        clock=components["adapter_block_clock"],
    )
