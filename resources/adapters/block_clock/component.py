"""Component declaration for the block clock adapter resource."""

from __future__ import annotations

from collections.abc import Mapping

from packages.decibel_shared.config import DecibelSettings
from packages.decibel_shared.manifest import (
    ComponentId,
    ModuleRoot,
    ResourceManifest,
    register_component,
)

RESOURCE_COMPONENT_ID = ComponentId("adapter_block_clock")

MANIFEST = register_component(
    ResourceManifest(
        id=RESOURCE_COMPONENT_ID,
        layer=0,
        system="state",
        kind="adapter",
        module_roots=frozenset({ModuleRoot("resources.adapters.block_clock")}),
    )
)


def build_component(
    *, settings: DecibelSettings, components: Mapping[str, object]
) -> object:
    """Build the configured block clock."""
    del components
    from resources.adapters.block_clock.adapter import build_block_clock
    from resources.adapters.block_clock.config import resolve_block_clock_settings

    return build_block_clock(resolve_block_clock_settings(settings))
