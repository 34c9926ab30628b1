"""Ownership token adapter resource."""

from resources.adapters.ownership_token.adapter import (
    LedgerOwnershipTokenFacility,
    OwnershipTokenFacility,
)
from resources.adapters.ownership_token.component import (
    MANIFEST,
    RESOURCE_COMPONENT_ID,
)

__all__ = [
    "MANIFEST",
    "RESOURCE_COMPONENT_ID",
    "LedgerOwnershipTokenFacility",
    "OwnershipTokenFacility",
]
