"""Request validation models for Zone Registry Service."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt


class CreateZoneRequest(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=256)
    max_decibel: NonNegativeInt
    is_quiet_zone: bool


class ZoneIdRequest(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    zone_id: NonNegativeInt
