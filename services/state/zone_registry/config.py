"""Pydantic settings for Zone Registry Service."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from packages.decibel_shared.config import DecibelSettings, resolve_component_settings
from services.state.zone_registry.component import SERVICE_COMPONENT_ID


class ZoneRegistrySettings(BaseModel):
    """Zone Registry runtime settings; none are currently tunable."""

    model_config = ConfigDict(frozen=True, extra="forbid")


def resolve_zone_registry_settings(settings: DecibelSettings) -> ZoneRegistrySettings:
    """Resolve settings from ``components.service.zone_registry``."""
    return resolve_component_settings(
        settings=settings,
        component_id=str(SERVICE_COMPONENT_ID),
        model=ZoneRegistrySettings,
    )
