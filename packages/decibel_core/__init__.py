"""Public API for ledger assembly, health, and migrations."""

from packages.decibel_core.assembly import Ledger, build_components, build_ledger
from packages.decibel_core.health import (
    ComponentHealthResult,
    LedgerHealthResult,
    evaluate_ledger_health,
)
from packages.decibel_core.migrations import (
    MigrationExecutionError,
    MigrationRunResult,
    discover_migration_configs,
    run_migrations,
)

__all__ = [
    "ComponentHealthResult",
    "Ledger",
    "LedgerHealthResult",
    "MigrationExecutionError",
    "MigrationRunResult",
    "build_components",
    "build_ledger",
    "discover_migration_configs",
    "evaluate_ledger_health",
    "run_migrations",
]
