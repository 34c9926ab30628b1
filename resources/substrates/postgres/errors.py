"""Normalization of Postgres/SQLAlchemy failures into shared errors."""

from __future__ import annotations

from packages.decibel_shared.errors import (
    ErrorDetail,
    codes,
    dependency_error,
    internal_error,
)


def is_postgres_error(exc: Exception) -> bool:
    """Return whether ``exc`` originates from the SQLAlchemy/psycopg stack."""
    module = type(exc).__module__
    return module.startswith("sqlalchemy") or module.startswith("psycopg")


def normalize_postgres_error(exc: Exception) -> ErrorDetail:
    """Map one driver exception into a dependency or internal error.

    Serialization conflicts between concurrent transitions are retryable: the
    losing transition was rolled back in full and may be resubmitted.
    """
    exc_type_name = type(exc).__name__
    message = str(exc)
    metadata = {"exception_type": exc_type_name}

    if "SerializationFailure" in message or "could not serialize" in message:
        return dependency_error(
            "concurrent transition conflict",
            code=codes.DEPENDENCY_FAILURE,
            retryable=True,
            metadata=metadata,
        )

    if "OperationalError" in exc_type_name or "timeout" in message.lower():
        return dependency_error(
            "postgres unavailable",
            code=codes.DEPENDENCY_UNAVAILABLE,
            retryable=True,
            metadata=metadata,
        )

    if "InterfaceError" in exc_type_name or "ProgrammingError" in exc_type_name:
        return dependency_error(
            "postgres request failed",
            code=codes.DEPENDENCY_FAILURE,
            retryable=False,
            metadata=metadata,
        )

    return internal_error(
        "unexpected postgres failure",
        code=codes.UNEXPECTED_EXCEPTION,
        metadata=metadata,
    )
