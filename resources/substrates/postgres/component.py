"""Component declaration for the shared Postgres substrate."""

from __future__ import annotations

from collections.abc import Mapping

from packages.decibel_shared.config import DecibelSettings
from packages.decibel_shared.manifest import (
    ComponentId,
    ModuleRoot,
    ResourceManifest,
    register_component,
)

RESOURCE_COMPONENT_ID = ComponentId("substrate_postgres")

MANIFEST = register_component(
    ResourceManifest(
        id=RESOURCE_COMPONENT_ID,
        layer=0,
        system="state",
        kind="substrate",
        module_roots=frozenset({ModuleRoot("resources.substrates.postgres")}),
    )
)


def build_component(
    *, settings: DecibelSettings, components: Mapping[str, object]
) -> object:
    """Return resolved Postgres settings; engines are built by their owners."""
    del components
    from resources.substrates.postgres.config import resolve_postgres_settings

    return resolve_postgres_settings(settings)
