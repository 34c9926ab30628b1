"""Pydantic settings for Noise Monitor Service."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from packages.decibel_shared.config import DecibelSettings, resolve_component_settings
from services.state.noise_monitor.component import SERVICE_COMPONENT_ID


class NoiseMonitorSettings(BaseModel):
    """Bounds applied to reported readings."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_reading_decibel: int = Field(default=120, gt=0, le=300)


def resolve_noise_monitor_settings(settings: DecibelSettings) -> NoiseMonitorSettings:
    """Resolve settings from ``components.service.noise_monitor``."""
    return resolve_component_settings(
        settings=settings,
        component_id=str(SERVICE_COMPONENT_ID),
        model=NoiseMonitorSettings,
    )
