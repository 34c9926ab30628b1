"""Request validation models for Trading Engine Service."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt

from packages.decibel_shared.envelope import PRINCIPAL_MAX_LENGTH


class CreateOfferRequest(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    zone_id: NonNegativeInt
    decibel_amount: NonNegativeInt
    price: NonNegativeInt


class TokenIdRequest(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    token_id: NonNegativeInt


class TransferTokenRequest(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)

    token_id: NonNegativeInt
    recipient: str = Field(min_length=1, max_length=PRINCIPAL_MAX_LENGTH)
