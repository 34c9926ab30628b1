"""Pydantic settings for the ownership token adapter component."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator

from packages.decibel_shared.config import DecibelSettings, resolve_component_settings
from resources.adapters.ownership_token.component import RESOURCE_COMPONENT_ID


class OwnershipTokenSettings(BaseModel):
    """Token metadata settings.

    ``token_uri_template`` is an opaque URI pattern; ``{token_id}`` is
    substituted. An empty template means tokens carry no URI.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    token_uri_template: str = ""

    @field_validator("token_uri_template")
    @classmethod
    def _validate_template(cls, value: str) -> str:
        """Allow only the ``{token_id}`` placeholder."""
        normalized = value.strip()
        try:
            normalized.format(token_id=0)
        except (KeyError, IndexError, ValueError) as exc:
            raise ValueError(
                "token_uri_template may only use the {token_id} placeholder"
            ) from exc
        return normalized


def resolve_ownership_token_settings(
    settings: DecibelSettings,
) -> OwnershipTokenSettings:
    """Resolve settings from ``components.adapter.ownership_token``."""
    return resolve_component_settings(
        settings=settings,
        component_id=str(RESOURCE_COMPONENT_ID),
        model=OwnershipTokenSettings,
    )
