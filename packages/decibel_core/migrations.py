"""Alembic upgrade orchestration for registered components."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from alembic import command
from alembic.config import Config

from packages.decibel_shared.component_loader import import_registered_component_modules
from packages.decibel_shared.config import DecibelSettings
from packages.decibel_shared.logging import get_logger
from packages.decibel_shared.manifest import get_registry

_LOGGER = get_logger(__name__)
_REPO_ROOT = Path(__file__).resolve().parents[2]


class MigrationExecutionError(RuntimeError):
    """Raised when a migration upgrade fails."""


@dataclass(frozen=True, slots=True)
class MigrationRunResult:
    """Summary of one migration pass."""

    executed_alembic_configs: tuple[str, ...]


def discover_migration_configs(*, repo_root: Path | None = None) -> tuple[Path, ...]:
    """Return ``migrations/alembic.ini`` paths of registered components.

    Resources come before services so shared tables exist first.
    """
    root = (repo_root or _REPO_ROOT).resolve()
    import_registered_component_modules(repo_root=root)
    registry = get_registry()
    registry.assert_valid()

    config_paths: list[Path] = []
    for manifest in (*registry.list_resources(), *registry.list_services()):
        for module_root in sorted(manifest.module_roots):
            candidate = (
                root / Path(*str(module_root).split(".")) / "migrations" / "alembic.ini"
            )
            if candidate.exists():
                config_paths.append(candidate)
                break
    return tuple(config_paths)


def run_migrations(
    *,
    settings: DecibelSettings,
    repo_root: Path | None = None,
    upgrade_fn: Callable[[Config, str], None] = command.upgrade,
) -> MigrationRunResult:
    """Upgrade every discovered alembic config to ``head``."""
    executed: list[str] = []
    for config_path in discover_migration_configs(repo_root=repo_root):
        config = Config(str(config_path))
        config.attributes["decibel_settings"] = settings
        try:
            upgrade_fn(config, "head")
        except Exception as exc:
            raise MigrationExecutionError(
                f"migration failed for config '{config_path}'"
            ) from exc
        executed.append(str(config_path))
        _LOGGER.info("migrations applied", extra={"alembic_config": str(config_path)})
    return MigrationRunResult(executed_alembic_configs=tuple(executed))
