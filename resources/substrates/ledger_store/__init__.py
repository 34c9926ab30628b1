"""Durable keyed ledger store: protocol, records, and backends."""

from resources.substrates.ledger_store.component import MANIFEST, RESOURCE_COMPONENT_ID
from resources.substrates.ledger_store.interfaces import (
    LedgerCounter,
    LedgerStore,
    LedgerTransaction,
)
from resources.substrates.ledger_store.memory import InMemoryLedgerStore
from resources.substrates.ledger_store.unit_of_work import (
    LedgerUnitOfWork,
    transition_error,
)
from resources.substrates.ledger_store.records import (
    Allowance,
    NoiseReading,
    Permit,
    Proposal,
    TradeOffer,
    Vote,
    Zone,
)

__all__ = [
    "MANIFEST",
    "RESOURCE_COMPONENT_ID",
    "Allowance",
    "InMemoryLedgerStore",
    "LedgerCounter",
    "LedgerStore",
    "LedgerTransaction",
    "LedgerUnitOfWork",
    "NoiseReading",
    "Permit",
    "Proposal",
    "TradeOffer",
    "Vote",
    "Zone",
    "transition_error",
]
