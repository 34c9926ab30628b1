"""Settings for the ledger store substrate."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict

from packages.decibel_shared.config import DecibelSettings, resolve_component_settings
from resources.substrates.ledger_store.component import RESOURCE_COMPONENT_ID


class LedgerStoreSettings(BaseModel):
    """Backend selection for the shared ledger store."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    backend: Literal["memory", "postgres"] = "memory"


def resolve_ledger_store_settings(settings: DecibelSettings) -> LedgerStoreSettings:
    """Resolve ``components.substrate.ledger_store`` settings."""
    return resolve_component_settings(
        settings=settings,
        component_id=str(RESOURCE_COMPONENT_ID),
        model=LedgerStoreSettings,
    )
