"""Pydantic settings for Trading Engine Service."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from packages.decibel_shared.config import DecibelSettings, resolve_component_settings
from services.action.trading_engine.component import SERVICE_COMPONENT_ID


class TradingEngineSettings(BaseModel):
    """Trading Engine runtime settings; none are currently tunable."""

    model_config = ConfigDict(frozen=True, extra="forbid")


def resolve_trading_engine_settings(settings: DecibelSettings) -> TradingEngineSettings:
    """Resolve settings from ``components.service.trading_engine``."""
    return resolve_component_settings(
        settings=settings,
        component_id=str(SERVICE_COMPONENT_ID),
        model=TradingEngineSettings,
    )
