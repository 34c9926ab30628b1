"""Pydantic settings for the block clock adapter component."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from packages.decibel_shared.config import DecibelSettings, resolve_component_settings
from packages.decibel_shared.envelope import to_utc
from resources.adapters.block_clock.component import RESOURCE_COMPONENT_ID


class BlockClockSettings(BaseModel):
    """Block height source configuration.

    ``manual`` clocks start at ``start_block`` and move only when advanced by
    the host. ``wall`` clocks derive height from elapsed time since
    ``genesis`` in fixed ``seconds_per_block`` steps.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    mode: Literal["manual", "wall"] = "manual"
    start_block: int = Field(default=0, ge=0)
    genesis: datetime = datetime(2024, 1, 1, tzinfo=UTC)
    seconds_per_block: float = Field(default=600.0, gt=0)

    @field_validator("genesis")
    @classmethod
    def _normalize_genesis(cls, value: datetime) -> datetime:
        """Store genesis as an aware UTC timestamp."""
        return to_utc(value)


def resolve_block_clock_settings(settings: DecibelSettings) -> BlockClockSettings:
    """Resolve block clock settings from ``components.adapter.block_clock``."""
    return resolve_component_settings(
        settings=settings,
        component_id=str(RESOURCE_COMPONENT_ID),
        model=BlockClockSettings,
    )
