"""Ownership token facility backed by the ledger store's token table.

Every call takes the caller's open ``LedgerTransaction`` so token moves commit
or roll back together with the rest of the transition.
"""

from __future__ import annotations

from typing import Protocol

from packages.decibel_shared.errors import codes, reject
from resources.adapters.ownership_token.config import OwnershipTokenSettings
from resources.substrates.ledger_store import LedgerCounter, LedgerTransaction


class OwnershipTokenFacility(Protocol):
    """Transferable unit backing trade offers."""

    def mint(self, tx: LedgerTransaction, *, owner: str) -> int:
        """Issue the next token id to ``owner`` and return it."""

    def transfer(
        self, tx: LedgerTransaction, *, token_id: int, sender: str, recipient: str
    ) -> None:
        """Move ``token_id`` from ``sender`` to ``recipient``."""

    def owner_of(self, tx: LedgerTransaction, *, token_id: int) -> str | None: ...

    def last_id(self, tx: LedgerTransaction) -> int: ...

    def token_uri(self, token_id: int) -> str | None: ...


class LedgerOwnershipTokenFacility:
    """Default facility storing ownership in the ledger ``tokens`` table."""

    def __init__(self, *, settings: OwnershipTokenSettings) -> None:
        self._settings = settings

    def mint(self, tx: LedgerTransaction, *, owner: str) -> int:
        token_id = tx.next_id(LedgerCounter.TOKEN)
        if tx.get_token_owner(token_id) is not None:
            raise reject(
                codes.ALREADY_EXISTS,
                "token already minted",
                metadata={"token_id": token_id},
            )
        tx.put_token_owner(token_id, owner)
        return token_id

    def transfer(
        self, tx: LedgerTransaction, *, token_id: int, sender: str, recipient: str
    ) -> None:
        current = tx.get_token_owner(token_id)
        if current is None:
            raise reject(
                codes.NOT_FOUND, "token not found", metadata={"token_id": token_id}
            )
        if current != sender:
            raise reject(
                codes.UNAUTHORIZED,
                "sender does not own token",
                metadata={"token_id": token_id},
            )
        tx.put_token_owner(token_id, recipient)

    def owner_of(self, tx: LedgerTransaction, *, token_id: int) -> str | None:
        return tx.get_token_owner(token_id)

    def last_id(self, tx: LedgerTransaction) -> int:
        return tx.last_id(LedgerCounter.TOKEN)

    def token_uri(self, token_id: int) -> str | None:
        template = self._settings.token_uri_template
        if not template:
            return None
        return template.format(token_id=token_id)
