"""Pydantic settings for Allowance Ledger Service."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from packages.decibel_shared.config import DecibelSettings, resolve_component_settings
from services.state.allowance_ledger.component import SERVICE_COMPONENT_ID


class AllowanceLedgerSettings(BaseModel):
    """Allowance Ledger runtime settings; none are currently tunable."""

    model_config = ConfigDict(frozen=True, extra="forbid")


def resolve_allowance_ledger_settings(
    settings: DecibelSettings,
) -> AllowanceLedgerSettings:
    """Resolve settings from ``components.service.allowance_ledger``."""
    return resolve_component_settings(
        settings=settings,
        component_id=str(SERVICE_COMPONENT_ID),
        model=AllowanceLedgerSettings,
    )
