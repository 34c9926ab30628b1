"""Component manifests and the process-local component registry.

Every ledger component declares one manifest in its ``component.py``. The
registry validates identity and layering; the core composition root walks it
to build components in dependency order.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from threading import RLock
from typing import Final, FrozenSet, Literal, NewType

ComponentId = NewType("ComponentId", str)
ModuleRoot = NewType("ModuleRoot", str)

Layer = Literal[0, 1]
System = Literal["state", "action"]
ResourceKind = Literal["substrate", "adapter"]

_SYSTEM_ORDER: Final[dict[System, int]] = {"state": 0, "action": 1}
_COMPONENT_ID_RE: Final[re.Pattern[str]] = re.compile(r"^[a-z][a-z0-9_]{1,62}$")
_MODULE_ROOT_RE: Final[re.Pattern[str]] = re.compile(
    r"^[a-zA-Z_][a-zA-Z0-9_]*(\.[a-zA-Z_][a-zA-Z0-9_]*)*$"
)


class ManifestError(ValueError):
    """Raised when manifest definitions or registration are invalid."""


@dataclass(frozen=True, slots=True)
class ComponentManifest:
    """Base manifest for any ledger component."""

    id: ComponentId
    layer: Layer
    system: System
    module_roots: FrozenSet[ModuleRoot]

    def __post_init__(self) -> None:
        validate_component_id(self.id)
        if len(self.module_roots) == 0:
            raise ManifestError("module_roots must not be empty")
        for root in self.module_roots:
            validate_module_root(root)


@dataclass(frozen=True, slots=True)
class ResourceManifest(ComponentManifest):
    """L0 substrate or adapter: storage, clock, token facility."""

    layer: Literal[0]
    kind: ResourceKind


@dataclass(frozen=True, slots=True)
class ServiceManifest(ComponentManifest):
    """L1 service owning one slice of ledger state or behavior."""

    layer: Literal[1]
    public_api_roots: FrozenSet[ModuleRoot]
    depends_on: FrozenSet[ComponentId] = frozenset()

    def __post_init__(self) -> None:
        super(ServiceManifest, self).__post_init__()
        if len(self.public_api_roots) == 0:
            raise ManifestError("public_api_roots must not be empty")
        for root in self.public_api_roots:
            validate_module_root(root)
        for dependency in self.depends_on:
            validate_component_id(dependency)


@dataclass(slots=True)
class ManifestRegistry:
    """In-memory registry of component manifests."""

    _components: dict[ComponentId, ComponentManifest] = field(default_factory=dict)
    _lock: RLock = field(default_factory=RLock)

    def register_component(self, manifest: ComponentManifest) -> None:
        """Register one manifest; re-registering an identical one is a no-op."""
        with self._lock:
            existing = self._components.get(manifest.id)
            if existing is not None and existing != manifest:
                raise ManifestError(
                    f"duplicate component id with mismatched definition: {manifest.id}"
                )
            self._components[manifest.id] = manifest

    def get_component(self, component_id: ComponentId) -> ComponentManifest:
        try:
            return self._components[component_id]
        except KeyError as exc:
            raise ManifestError(f"component not registered: {component_id}") from exc

    def list_resources(self) -> tuple[ResourceManifest, ...]:
        """Return registered resources sorted by id."""
        return tuple(
            sorted(
                (c for c in self._components.values() if isinstance(c, ResourceManifest)),
                key=lambda item: str(item.id),
            )
        )

    def list_services(self) -> tuple[ServiceManifest, ...]:
        """Return registered services sorted by system, then id."""
        return tuple(
            sorted(
                (c for c in self._components.values() if isinstance(c, ServiceManifest)),
                key=lambda item: (_SYSTEM_ORDER[item.system], str(item.id)),
            )
        )

    def assert_valid(self) -> None:
        """Check that every declared service dependency is registered."""
        with self._lock:
            for service in self.list_services():
                for dependency in sorted(service.depends_on):
                    if dependency not in self._components:
                        raise ManifestError(
                            f"service '{service.id}' depends on unknown component '{dependency}'"
                        )
                    target = self._components[dependency]
                    if _SYSTEM_ORDER[target.system] > _SYSTEM_ORDER[service.system]:
                        raise ManifestError(
                            f"service '{service.id}' ({service.system}) must not depend on "
                            f"'{dependency}' ({target.system})"
                        )


def validate_component_id(value: ComponentId) -> None:
    raw = str(value)
    if not _COMPONENT_ID_RE.fullmatch(raw):
        raise ManifestError(
            f"invalid component id '{raw}'; expected ^[a-z][a-z0-9_]{{1,62}}$"
        )


def validate_module_root(value: ModuleRoot) -> None:
    raw = str(value)
    if not _MODULE_ROOT_RE.fullmatch(raw):
        raise ManifestError(f"invalid module root '{raw}'")


_DEFAULT_REGISTRY = ManifestRegistry()


def register_component(manifest: ComponentManifest) -> ComponentManifest:
    """Register a manifest in the process-local registry and return it."""
    _DEFAULT_REGISTRY.register_component(manifest)
    return manifest


def get_registry() -> ManifestRegistry:
    """Return the process-local default registry."""
    return _DEFAULT_REGISTRY
