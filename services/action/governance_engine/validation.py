"""Request validation models for Governance Engine Service."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, StrictBool

from packages.decibel_shared.envelope import PRINCIPAL_MAX_LENGTH


class CreateProposalRequest(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=256)
    description: str = Field(default="", max_length=4096)
    zone_id: NonNegativeInt
    proposed_max_decibel: NonNegativeInt


class VoteRequest(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    proposal_id: NonNegativeInt
    support: StrictBool


class ProposalIdRequest(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    proposal_id: NonNegativeInt


class VoteKeyRequest(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)

    proposal_id: NonNegativeInt
    voter: str = Field(min_length=1, max_length=PRINCIPAL_MAX_LENGTH)
