"""Zone rules applied inside an open ledger transaction.

Other services call these to read or mutate zones as part of their own
transition, so every write commits or rolls back with the caller's.
"""

from __future__ import annotations

from packages.decibel_shared.errors import codes, reject
from resources.substrates.ledger_store import (
    LedgerCounter,
    LedgerTransaction,
    Zone,
)
from services.state.zone_registry.domain import (
    MAX_DECIBEL,
    MIN_DECIBEL,
    QUIET_ZONE_MAX_DECIBEL,
    QUIET_ZONE_PREMIUM,
    STANDARD_PREMIUM,
)


def check_decibel_ceiling(max_decibel: int, *, is_quiet_zone: bool) -> None:
    """Reject ceilings outside the global range or above the quiet-zone cap."""
    if not MIN_DECIBEL <= max_decibel <= MAX_DECIBEL:
        raise reject(
            codes.INVALID_DECIBEL,
            f"decibel value must be within [{MIN_DECIBEL}, {MAX_DECIBEL}]",
            metadata={"max_decibel": max_decibel},
        )
    if is_quiet_zone and max_decibel > QUIET_ZONE_MAX_DECIBEL:
        raise reject(
            codes.INVALID_DECIBEL,
            f"quiet zones require a ceiling of at most {QUIET_ZONE_MAX_DECIBEL}",
            metadata={"max_decibel": max_decibel},
        )


def create_zone(
    tx: LedgerTransaction,
    *,
    owner: str,
    name: str,
    max_decibel: int,
    is_quiet_zone: bool,
) -> Zone:
    check_decibel_ceiling(max_decibel, is_quiet_zone=is_quiet_zone)
    premium = QUIET_ZONE_PREMIUM if is_quiet_zone else STANDARD_PREMIUM
    zone = Zone(
        zone_id=tx.next_id(LedgerCounter.ZONE),
        name=name,
        max_decibel=max_decibel,
        current_usage=0,
        is_quiet_zone=is_quiet_zone,
        premium_multiplier=premium,
    )
    tx.put_zone(zone)
    tx.put_zone_owner(zone.zone_id, owner)
    tx.put_zone_premium(zone.zone_id, premium)
    return zone


def require_zone(tx: LedgerTransaction, zone_id: int) -> Zone:
    """Return the zone or reject with ``ZONE_NOT_FOUND``."""
    zone = tx.get_zone(zone_id)
    if zone is None:
        raise reject(
            codes.ZONE_NOT_FOUND, "zone not found", metadata={"zone_id": zone_id}
        )
    return zone


def require_zone_owner(tx: LedgerTransaction, zone_id: int, caller: str) -> Zone:
    """Return the zone when ``caller`` owns it, else reject."""
    zone = require_zone(tx, zone_id)
    if tx.get_zone_owner(zone_id) != caller:
        raise reject(
            codes.UNAUTHORIZED,
            "caller is not the zone owner",
            metadata={"zone_id": zone_id},
        )
    return zone


def zone_premium(tx: LedgerTransaction, zone: Zone) -> int:
    """Return the fee premium: the indexed multiplier for quiet zones, else 100."""
    if not zone.is_quiet_zone:
        return STANDARD_PREMIUM
    indexed = tx.get_zone_premium(zone.zone_id)
    return zone.premium_multiplier if indexed is None else indexed


def set_max_decibel(tx: LedgerTransaction, *, zone_id: int, max_decibel: int) -> Zone:
    """Overwrite a zone's ceiling, keeping the quiet-zone cap intact."""
    zone = require_zone(tx, zone_id)
    check_decibel_ceiling(max_decibel, is_quiet_zone=zone.is_quiet_zone)
    updated = zone.model_copy(update={"max_decibel": max_decibel})
    tx.put_zone(updated)
    return updated


def set_current_usage(tx: LedgerTransaction, *, zone_id: int, decibel_level: int) -> Zone:
    """Record the most recently reported decibel level on the zone."""
    zone = require_zone(tx, zone_id)
    updated = zone.model_copy(update={"current_usage": decibel_level})
    tx.put_zone(updated)
    return updated
