"""Component declaration for the ledger store substrate."""

from __future__ import annotations

from collections.abc import Mapping

from packages.decibel_shared.config import DecibelSettings
from packages.decibel_shared.manifest import (
    ComponentId,
    ModuleRoot,
    ResourceManifest,
    register_component,
)
from resources.substrates.postgres.component import (
    RESOURCE_COMPONENT_ID as POSTGRES_COMPONENT_ID,
)

RESOURCE_COMPONENT_ID = ComponentId("substrate_ledger_store")

MANIFEST = register_component(
    ResourceManifest(
        id=RESOURCE_COMPONENT_ID,
        layer=0,
        system="state",
        kind="substrate",
        module_roots=frozenset({ModuleRoot("resources.substrates.ledger_store")}),
    )
)


def build_component(
    *, settings: DecibelSettings, components: Mapping[str, object]
) -> object:
    """Build the configured ledger store backend.

    The Postgres backend needs the resolved Postgres settings component and
    raises ``KeyError`` until it has been built.
    """
    from resources.substrates.ledger_store.config import resolve_ledger_store_settings
    from resources.substrates.ledger_store.memory import InMemoryLedgerStore

    store_settings = resolve_ledger_store_settings(settings)
    if store_settings.backend == "memory":
        return InMemoryLedgerStore()

    from resources.substrates.ledger_store.data.store import PostgresLedgerStore

    postgres_settings = components[str(POSTGRES_COMPONENT_ID)]
    return PostgresLedgerStore.from_settings(postgres_settings)
