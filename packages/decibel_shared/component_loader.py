"""Discovery and import of ``component.py`` registration modules."""

from __future__ import annotations

import importlib
from pathlib import Path

_DISCOVERY_ROOTS = ("services", "resources")
_REPO_ROOT = Path(__file__).resolve().parents[2]


def discover_component_modules(repo_root: Path | None = None) -> tuple[str, ...]:
    """Return dotted import paths for every component declaration module."""
    root = (repo_root or _REPO_ROOT).resolve()
    modules: list[str] = []
    for discovery_root in _DISCOVERY_ROOTS:
        package_root = root / discovery_root
        if not package_root.exists():
            continue
        for component_file in sorted(package_root.rglob("component.py")):
            rel_component = component_file.relative_to(root)
            if "tests" in rel_component.parts:
                continue
            if not _looks_like_component_registration(component_file):
                continue
            modules.append(".".join(rel_component.with_suffix("").parts))
    return tuple(modules)


def import_registered_component_modules(
    repo_root: Path | None = None,
) -> tuple[str, ...]:
    """Discover and import all component modules to populate the registry."""
    imported: list[str] = []
    for module in discover_component_modules(repo_root=repo_root):
        importlib.import_module(module)
        imported.append(module)
    return tuple(imported)


def _looks_like_component_registration(component_file: Path) -> bool:
    source = component_file.read_text(encoding="utf-8")
    return "MANIFEST" in source and "register_component(" in source
