"""Exception used to abort a ledger transition with one domain error."""

from __future__ import annotations

from typing import Mapping

from .factories import ledger_error
from .types import ErrorDetail


class TransitionRejected(Exception):
    """Raised inside a store transaction when a precondition is violated.

    The store rolls back every write made by the transaction before the
    exception leaves ``transaction()``; services convert ``detail`` into a
    failure envelope.
    """

    def __init__(self, detail: ErrorDetail) -> None:
        super().__init__(f"{detail.code}: {detail.message}")
        self.detail = detail


def reject(
    code: str,
    message: str,
    *,
    metadata: Mapping[str, object] | None = None,
) -> TransitionRejected:
    """Build a ``TransitionRejected`` for one ledger error code."""
    return TransitionRejected(ledger_error(code, message, metadata=metadata))
