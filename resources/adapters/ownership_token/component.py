"""Component declaration for the ownership token adapter resource."""

from __future__ import annotations

from collections.abc import Mapping

from packages.decibel_shared.config import DecibelSettings
from packages.decibel_shared.manifest import (
    ComponentId,
    ModuleRoot,
    ResourceManifest,
    register_component,
)

RESOURCE_COMPONENT_ID = ComponentId("adapter_ownership_token")

MANIFEST = register_component(
    ResourceManifest(
        id=RESOURCE_COMPONENT_ID,
        layer=0,
        system="action",
        kind="adapter",
        module_roots=frozenset({ModuleRoot("resources.adapters.ownership_token")}),
    )
)


def build_component(
    *, settings: DecibelSettings, components: Mapping[str, object]
) -> object:
    """Build the ledger-backed ownership token facility."""
    del components
    from resources.adapters.ownership_token.adapter import LedgerOwnershipTokenFacility
    from resources.adapters.ownership_token.config import (
        resolve_ownership_token_settings,
    )

    return LedgerOwnershipTokenFacility(
        settings=resolve_ownership_token_settings(settings)
    )
