"""Pydantic settings for Governance Engine Service."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from packages.decibel_shared.config import DecibelSettings, resolve_component_settings
from services.action.governance_engine.component import SERVICE_COMPONENT_ID


class GovernanceEngineSettings(BaseModel):
    """Voting window length and quorum for proposals."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    voting_period_blocks: int = Field(default=144, gt=0)
    quorum: int = Field(default=10, gt=0)


def resolve_governance_engine_settings(
    settings: DecibelSettings,
) -> GovernanceEngineSettings:
    """Resolve settings from ``components.service.governance_engine``."""
    return resolve_component_settings(
        settings=settings,
        component_id=str(SERVICE_COMPONENT_ID),
        model=GovernanceEngineSettings,
    )
