"""Postgres-backed ledger store over SQLAlchemy Core tables."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any, TypeVar

from pydantic import BaseModel
from sqlalchemy import Engine, Table, and_, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.orm import Session, sessionmaker

from resources.substrates.ledger_store.data.schema import (
    allowances,
    counters,
    noise_readings,
    permits,
    proposals,
    tokens,
    trade_offers,
    votes,
    zone_owners,
    zone_premiums,
    zones,
)
from resources.substrates.ledger_store.interfaces import LedgerCounter
from resources.substrates.ledger_store.records import (
    Allowance,
    NoiseReading,
    Permit,
    Proposal,
    TradeOffer,
    Vote,
    Zone,
)
from resources.substrates.postgres import (
    PostgresSettings,
    create_postgres_engine,
    create_session_factory,
    ping,
    transactional_session,
)

TRecord = TypeVar("TRecord", bound=BaseModel)


class PostgresLedgerTransaction:
    """Ledger table access bound to one open SQLAlchemy session."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def next_id(self, counter: LedgerCounter) -> int:
        stmt = (
            insert(counters)
            .values(name=counter.value, value=1)
            .on_conflict_do_update(
                index_elements=[counters.c.name],
                set_={"value": counters.c.value + 1},
            )
            .returning(counters.c.value)
        )
        return int(self._session.execute(stmt).scalar_one())

    def last_id(self, counter: LedgerCounter) -> int:
        value = self._session.execute(
            select(counters.c.value).where(counters.c.name == counter.value)
        ).scalar_one_or_none()
        return 0 if value is None else int(value)

    def get_zone(self, zone_id: int) -> Zone | None:
        return self._fetch(zones, Zone, zone_id=zone_id)

    def put_zone(self, zone: Zone) -> None:
        self._upsert(zones, zone.model_dump(), keys=("zone_id",))

    def get_zone_owner(self, zone_id: int) -> str | None:
        return self._scalar(zone_owners.c.owner, zone_owners.c.zone_id == zone_id)

    def put_zone_owner(self, zone_id: int, owner: str) -> None:
        self._upsert(zone_owners, {"zone_id": zone_id, "owner": owner}, keys=("zone_id",))

    def get_zone_premium(self, zone_id: int) -> int | None:
        return self._scalar(
            zone_premiums.c.premium_multiplier, zone_premiums.c.zone_id == zone_id
        )

    def put_zone_premium(self, zone_id: int, premium_multiplier: int) -> None:
        self._upsert(
            zone_premiums,
            {"zone_id": zone_id, "premium_multiplier": premium_multiplier},
            keys=("zone_id",),
        )

    def get_allowance(self, zone_id: int, holder: str) -> Allowance | None:
        return self._fetch(allowances, Allowance, zone_id=zone_id, holder=holder)

    def put_allowance(self, allowance: Allowance) -> None:
        self._upsert(allowances, allowance.model_dump(), keys=("zone_id", "holder"))

    def get_noise_reading(self, zone_id: int, block: int) -> NoiseReading | None:
        return self._fetch(noise_readings, NoiseReading, zone_id=zone_id, block=block)

    def put_noise_reading(self, reading: NoiseReading) -> None:
        self._upsert(noise_readings, reading.model_dump(), keys=("zone_id", "block"))

    def get_permit(self, permit_id: int) -> Permit | None:
        return self._fetch(permits, Permit, permit_id=permit_id)

    def put_permit(self, permit: Permit) -> None:
        self._upsert(permits, permit.model_dump(), keys=("permit_id",))

    def get_trade_offer(self, token_id: int) -> TradeOffer | None:
        return self._fetch(trade_offers, TradeOffer, token_id=token_id)

    def put_trade_offer(self, offer: TradeOffer) -> None:
        self._upsert(trade_offers, offer.model_dump(), keys=("token_id",))

    def get_proposal(self, proposal_id: int) -> Proposal | None:
        return self._fetch(proposals, Proposal, proposal_id=proposal_id)

    def put_proposal(self, proposal: Proposal) -> None:
        self._upsert(proposals, proposal.model_dump(), keys=("proposal_id",))

    def get_vote(self, proposal_id: int, voter: str) -> Vote | None:
        return self._fetch(votes, Vote, proposal_id=proposal_id, voter=voter)

    def put_vote(self, vote: Vote) -> None:
        self._upsert(votes, vote.model_dump(), keys=("proposal_id", "voter"))

    def get_token_owner(self, token_id: int) -> str | None:
        return self._scalar(tokens.c.owner, tokens.c.token_id == token_id)

    def put_token_owner(self, token_id: int, owner: str) -> None:
        self._upsert(tokens, {"token_id": token_id, "owner": owner}, keys=("token_id",))

    def _fetch(
        self, table: Table, model: type[TRecord], **keys: object
    ) -> TRecord | None:
        # Row locks keep read-modify-write transitions isolated under
        # READ COMMITTED as well as SERIALIZABLE.
        clause = and_(*(table.c[name] == value for name, value in keys.items()))
        row = (
            self._session.execute(select(table).where(clause).with_for_update())
            .mappings()
            .one_or_none()
        )
        return model.model_validate(dict(row)) if row is not None else None

    def _scalar(self, column: Any, clause: Any) -> Any:
        return self._session.execute(
            select(column).where(clause).with_for_update()
        ).scalar_one_or_none()

    def _upsert(
        self, table: Table, values: Mapping[str, object], *, keys: tuple[str, ...]
    ) -> None:
        stmt = insert(table).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c[name] for name in keys],
            set_={name: stmt.excluded[name] for name in values if name not in keys},
        )
        self._session.execute(stmt)


class PostgresLedgerStore:
    """Ledger store running each transition in one schema-scoped transaction."""

    def __init__(
        self,
        *,
        engine: Engine,
        session_factory: sessionmaker[Session],
        schema: str,
        health_timeout_seconds: float = 1.0,
    ) -> None:
        self._engine = engine
        self._session_factory = session_factory
        self._schema = schema
        self._health_timeout_seconds = health_timeout_seconds

    @classmethod
    def from_settings(cls, settings: PostgresSettings) -> "PostgresLedgerStore":
        """Build engine and session factory from resolved Postgres settings."""
        engine = create_postgres_engine(settings)
        return cls(
            engine=engine,
            session_factory=create_session_factory(engine),
            schema=settings.schema_name,
            health_timeout_seconds=settings.health_timeout_seconds,
        )

    @property
    def backend(self) -> str:
        return "postgres"

    @property
    def schema(self) -> str:
        return self._schema

    @contextmanager
    def transaction(self) -> Iterator[PostgresLedgerTransaction]:
        with transactional_session(self._session_factory, schema=self._schema) as session:
            yield PostgresLedgerTransaction(session)

    def is_healthy(self) -> bool:
        return ping(self._engine, timeout_seconds=self._health_timeout_seconds)

    def dispose(self) -> None:
        """Release pooled connections."""
        self._engine.dispose()
