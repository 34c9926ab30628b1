"""Request validation models for Noise Monitor Service."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, NonNegativeInt, StrictInt


class ReportNoiseRequest(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    zone_id: NonNegativeInt
    decibel_level: StrictInt


class ReadingKeyRequest(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    zone_id: NonNegativeInt
    block: NonNegativeInt
