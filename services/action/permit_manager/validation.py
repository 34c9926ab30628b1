"""Request validation models for Permit Manager Service."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, NonNegativeInt


class PermitTermsRequest(BaseModel):
    """Zone, loudness, and duration shared by fee quotes and applications."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    zone_id: NonNegativeInt
    requested_decibels: NonNegativeInt
    duration_blocks: NonNegativeInt


class PermitIdRequest(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    permit_id: NonNegativeInt
