"""Typed result envelope returned by every public ledger operation."""

from __future__ import annotations

from typing import Generic, Iterable, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from packages.decibel_shared.errors import ErrorDetail

from .meta import EnvelopeMeta

T = TypeVar("T")


class Payload(BaseModel, Generic[T]):
    """Container for the domain value carried by an envelope."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    value: T


class Envelope(BaseModel, Generic[T]):
    """Metadata, optional payload, and errors for one operation result."""

    model_config = ConfigDict(frozen=True)

    metadata: EnvelopeMeta
    payload: Payload[T] | None
    errors: list[ErrorDetail] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        """Return ``True`` when no errors are present."""
        return len(self.errors) == 0

    @property
    def has_payload(self) -> bool:
        """Return ``True`` when payload is present."""
        return self.payload is not None

    @property
    def error_codes(self) -> tuple[str, ...]:
        """Return error codes in emission order."""
        return tuple(error.code for error in self.errors)


def success(*, meta: EnvelopeMeta, payload: T) -> Envelope[T]:
    """Build a successful envelope wrapping ``payload``."""
    return Envelope[T](metadata=meta, payload=Payload[T](value=payload), errors=[])


def failure(
    *,
    meta: EnvelopeMeta,
    errors: Iterable[ErrorDetail],
) -> Envelope[T]:
    """Build a failed envelope without payload."""
    return Envelope[T](metadata=meta, payload=None, errors=list(errors))
