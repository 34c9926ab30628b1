"""Request validation models for Allowance Ledger Service."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt

from packages.decibel_shared.envelope import PRINCIPAL_MAX_LENGTH


class AllocateRequest(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)

    zone_id: NonNegativeInt
    recipient: str = Field(min_length=1, max_length=PRINCIPAL_MAX_LENGTH)
    amount: NonNegativeInt
    duration_blocks: NonNegativeInt


class AllowanceKeyRequest(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)

    zone_id: NonNegativeInt
    holder: str = Field(min_length=1, max_length=PRINCIPAL_MAX_LENGTH)
