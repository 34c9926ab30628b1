"""Allowance rules applied inside an open ledger transaction."""

from __future__ import annotations

from packages.decibel_shared.errors import codes, reject
from resources.substrates.ledger_store import Allowance, LedgerTransaction
from services.state.zone_registry.transitions import require_zone_owner


def allocate(
    tx: LedgerTransaction,
    *,
    caller: str,
    zone_id: int,
    recipient: str,
    amount: int,
    duration_blocks: int,
    now: int,
) -> Allowance:
    """Reset ``recipient``'s allowance in a zone the caller owns.

    Any existing record is replaced: used capacity returns to zero and the
    expiry restarts from ``now``.
    """
    require_zone_owner(tx, zone_id, caller)
    if amount == 0:
        raise reject(codes.INVALID_AMOUNT, "allocation amount must be greater than zero")
    allowance = Allowance(
        zone_id=zone_id,
        holder=recipient,
        total_allowance=amount,
        used_allowance=0,
        expiry_block=now + duration_blocks,
    )
    tx.put_allowance(allowance)
    return allowance


def require_capacity(
    tx: LedgerTransaction, *, zone_id: int, holder: str, amount: int
) -> Allowance:
    """Return ``holder``'s allowance if it has ``amount`` spendable capacity."""
    allowance = tx.get_allowance(zone_id, holder)
    if allowance is None:
        raise reject(
            codes.NOT_FOUND,
            "allowance not found",
            metadata={"zone_id": zone_id, "holder": holder},
        )
    if allowance.remaining < amount:
        raise reject(
            codes.INSUFFICIENT_ALLOWANCE,
            "insufficient remaining allowance",
            metadata={"remaining": allowance.remaining, "requested": amount},
        )
    return allowance


def transfer_allowance(
    tx: LedgerTransaction,
    *,
    zone_id: int,
    sender: str,
    recipient: str,
    amount: int,
) -> tuple[Allowance, Allowance]:
    """Move ``amount`` of spendable capacity from ``sender`` to ``recipient``.

    The sender's used amount grows; the recipient's total grows (creating an
    empty record first if needed) and its expiry extends to the later of the
    two. Returns the updated ``(sender, recipient)`` records.
    """
    source = require_capacity(tx, zone_id=zone_id, holder=sender, amount=amount)
    debited = source.model_copy(
        update={"used_allowance": source.used_allowance + amount}
    )
    tx.put_allowance(debited)

    # Re-read after the debit so a self-transfer sees its own write.
    target = tx.get_allowance(zone_id, recipient) or Allowance(
        zone_id=zone_id, holder=recipient
    )
    credited = target.model_copy(
        update={
            "total_allowance": target.total_allowance + amount,
            "expiry_block": max(debited.expiry_block, target.expiry_block),
        }
    )
    tx.put_allowance(credited)
    return tx.get_allowance(zone_id, sender) or debited, credited
