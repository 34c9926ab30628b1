"""Tests for component manifests, registry validation, and discovery."""

from __future__ import annotations

import pytest

from packages.decibel_shared.component_loader import discover_component_modules
from packages.decibel_shared.manifest import (
    ComponentId,
    ManifestError,
    ManifestRegistry,
    ModuleRoot,
    ResourceManifest,
    ServiceManifest,
)


def _service(
    component_id: str, *, system: str = "action", depends_on: frozenset = frozenset()
) -> ServiceManifest:
    return ServiceManifest(
        id=ComponentId(component_id),
        layer=1,
        system=system,
        module_roots=frozenset({ModuleRoot(f"services.{system}.{component_id}")}),
        public_api_roots=frozenset({ModuleRoot(f"services.{system}.{component_id}.service")}),
        depends_on=depends_on,
    )


def _store() -> ResourceManifest:
    return ResourceManifest(
        id=ComponentId("substrate_ledger_store"),
        layer=0,
        system="state",
        kind="substrate",
        module_roots=frozenset({ModuleRoot("resources.substrates.ledger_store")}),
    )


def test_invalid_component_id_is_rejected() -> None:
    with pytest.raises(ManifestError, match="invalid component id"):
        _service("Service-Bad")


def test_empty_module_roots_are_rejected() -> None:
    with pytest.raises(ManifestError, match="module_roots"):
        ResourceManifest(
            id=ComponentId("adapter_block_clock"),
            layer=0,
            system="state",
            kind="adapter",
            module_roots=frozenset(),
        )


def test_reregistering_identical_manifest_is_a_no_op() -> None:
    registry = ManifestRegistry()
    registry.register_component(_store())
    registry.register_component(_store())
    assert len(registry.list_resources()) == 1


def test_mismatched_duplicate_is_rejected() -> None:
    registry = ManifestRegistry()
    registry.register_component(_service("service_a"))
    with pytest.raises(ManifestError, match="duplicate"):
        registry.register_component(_service("service_a", system="state"))


def test_unknown_dependency_fails_validation() -> None:
    registry = ManifestRegistry()
    registry.register_component(
        _service("service_a", depends_on=frozenset({ComponentId("substrate_missing")}))
    )
    with pytest.raises(ManifestError, match="unknown component"):
        registry.assert_valid()


def test_state_service_may_not_depend_on_action_service() -> None:
    registry = ManifestRegistry()
    registry.register_component(_service("service_action_side"))
    registry.register_component(
        _service(
            "service_state_side",
            system="state",
            depends_on=frozenset({ComponentId("service_action_side")}),
        )
    )
    with pytest.raises(ManifestError, match="must not depend"):
        registry.assert_valid()


def test_services_list_state_before_action() -> None:
    registry = ManifestRegistry()
    registry.register_component(_service("service_b"))
    registry.register_component(_service("service_z", system="state"))
    assert [str(item.id) for item in registry.list_services()] == [
        "service_z",
        "service_b",
    ]


def test_discovery_finds_every_ledger_component() -> None:
    modules = set(discover_component_modules())
    assert {
        "resources.substrates.postgres.component",
        "resources.substrates.ledger_store.component",
        "resources.adapters.block_clock.component",
        "resources.adapters.ownership_token.component",
        "services.state.zone_registry.component",
        "services.state.allowance_ledger.component",
        "services.state.noise_monitor.component",
        "services.action.permit_manager.component",
        "services.action.trading_engine.component",
        "services.action.governance_engine.component",
    } <= modules
