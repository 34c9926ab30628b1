"""Transactional session helpers for the Postgres substrate."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import Engine, text
from sqlalchemy.orm import Session, sessionmaker


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Create a session factory bound to ``engine``."""
    return sessionmaker(
        bind=engine, autoflush=False, autocommit=False, expire_on_commit=False
    )


@contextmanager
def transactional_session(
    session_factory: sessionmaker[Session], *, schema: str | None = None
) -> Iterator[Session]:
    """Yield one session; commit on normal exit, roll back on any exception.

    When ``schema`` is given the transaction's search_path is pinned to it.
    """
    session = session_factory()
    try:
        if schema is not None:
            _validate_schema(schema)
            session.execute(text(f"SET LOCAL search_path TO {schema}, public"))
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def _validate_schema(schema: str) -> None:
    if not schema or not schema.replace("_", "").isalnum():
        raise ValueError("postgres schema must be alphanumeric/underscore")
