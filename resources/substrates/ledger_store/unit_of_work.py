"""Run ledger transitions and classify their failures."""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar

from packages.decibel_shared.errors import ErrorDetail, TransitionRejected
from resources.substrates.ledger_store.interfaces import LedgerStore, LedgerTransaction
from resources.substrates.postgres.errors import (
    is_postgres_error,
    normalize_postgres_error,
)

T = TypeVar("T")


class LedgerUnitOfWork:
    """Execute one callback inside one all-or-nothing store transaction."""

    def __init__(self, store: LedgerStore) -> None:
        self._store = store

    @property
    def store(self) -> LedgerStore:
        return self._store

    def run(self, fn: Callable[[LedgerTransaction], T]) -> T:
        """Run ``fn`` with an open transaction; any exception rolls it back."""
        with self._store.transaction() as tx:
            return fn(tx)


def transition_error(exc: Exception) -> ErrorDetail | None:
    """Return the envelope error for a known failure, or ``None`` if unknown.

    Rejections carry their domain error verbatim; driver errors are
    normalized. Anything else is left to the caller to report as a
    dependency failure.
    """
    if isinstance(exc, TransitionRejected):
        return exc.detail
    if is_postgres_error(exc):
        return normalize_postgres_error(exc)
    return None
