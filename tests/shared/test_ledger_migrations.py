"""Tests for alembic config discovery and upgrade orchestration."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import pytest
from alembic.config import Config

from packages.decibel_core import migrations as migrations_module
from packages.decibel_core.migrations import (
    MigrationExecutionError,
    discover_migration_configs,
    run_migrations,
)
from packages.decibel_shared.config import DecibelSettings


@dataclass(frozen=True, slots=True)
class _FakeManifest:
    module_roots: frozenset[str]


@dataclass(frozen=True, slots=True)
class _FakeRegistry:
    resources: tuple[_FakeManifest, ...]
    services: tuple[_FakeManifest, ...]

    def assert_valid(self) -> None:
        """Satisfy registry contract used by discovery."""

    def list_resources(self) -> tuple[_FakeManifest, ...]:
        return self.resources

    def list_services(self) -> tuple[_FakeManifest, ...]:
        return self.services


def _write_ini(root: Path, *parts: str) -> Path:
    path = root.joinpath(*parts, "migrations", "alembic.ini")
    path.parent.mkdir(parents=True)
    path.write_text("[alembic]\n", encoding="utf-8")
    return path


def _patch_registry(monkeypatch: pytest.MonkeyPatch, registry: _FakeRegistry) -> None:
    monkeypatch.setattr(
        migrations_module,
        "import_registered_component_modules",
        lambda repo_root=None: tuple(),
    )
    monkeypatch.setattr(migrations_module, "get_registry", lambda: registry)


def test_discovery_lists_resources_before_services(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    service_ini = _write_ini(tmp_path, "services", "state", "a")
    store_ini = _write_ini(tmp_path, "resources", "substrates", "store")
    _patch_registry(
        monkeypatch,
        _FakeRegistry(
            resources=(
                _FakeManifest(frozenset({"resources.substrates.store"})),
                _FakeManifest(frozenset({"resources.adapters.clock"})),
            ),
            services=(_FakeManifest(frozenset({"services.state.a"})),),
        ),
    )

    assert discover_migration_configs(repo_root=tmp_path) == (store_ini, service_ini)


def test_run_migrations_upgrades_each_config_to_head(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    store_ini = _write_ini(tmp_path, "resources", "substrates", "store")
    _patch_registry(
        monkeypatch,
        _FakeRegistry(
            resources=(_FakeManifest(frozenset({"resources.substrates.store"})),),
            services=(),
        ),
    )
    settings = DecibelSettings()
    calls: list[tuple[str, str, object]] = []

    def _upgrade(config: Config, revision: str) -> None:
        calls.append(
            (config.config_file_name, revision, config.attributes["decibel_settings"])
        )

    result = run_migrations(settings=settings, repo_root=tmp_path, upgrade_fn=_upgrade)

    assert calls == [(str(store_ini), "head", settings)]
    assert result.executed_alembic_configs == (str(store_ini),)


def test_run_migrations_wraps_upgrade_failures(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    _write_ini(tmp_path, "resources", "substrates", "store")
    _patch_registry(
        monkeypatch,
        _FakeRegistry(
            resources=(_FakeManifest(frozenset({"resources.substrates.store"})),),
            services=(),
        ),
    )

    def _upgrade(config: Config, revision: str) -> None:
        raise RuntimeError("db down")

    with pytest.raises(MigrationExecutionError):
        run_migrations(settings=DecibelSettings(), repo_root=tmp_path, upgrade_fn=_upgrade)


def test_ledger_store_ships_a_migration_config() -> None:
    configs = discover_migration_configs()
    assert any(
        path.parts[-4:] == ("substrates", "ledger_store", "migrations", "alembic.ini")
        for path in configs
    )
