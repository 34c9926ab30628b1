"""Pydantic settings for Permit Manager Service."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from packages.decibel_shared.config import DecibelSettings, resolve_component_settings
from services.action.permit_manager.component import SERVICE_COMPONENT_ID


class PermitManagerSettings(BaseModel):
    """Permit Manager runtime settings; none are currently tunable."""

    model_config = ConfigDict(frozen=True, extra="forbid")


def resolve_permit_manager_settings(settings: DecibelSettings) -> PermitManagerSettings:
    """Resolve settings from ``components.service.permit_manager``."""
    return resolve_component_settings(
        settings=settings,
        component_id=str(SERVICE_COMPONENT_ID),
        model=PermitManagerSettings,
    )
