"""Per-call metadata carried by every ledger operation.

``principal`` is the authenticated caller identity supplied by the host; the
ledger uses it for ownership checks and as the implicit sender/recipient of
several transitions. The remaining fields exist for correlation only.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict

PRINCIPAL_MAX_LENGTH = 128


class EnvelopeKind(str, Enum):
    """Intent classification for one envelope."""

    UNSPECIFIED = "unspecified"
    COMMAND = "command"
    QUERY = "query"
    RESULT = "result"


class EnvelopeMeta(BaseModel):
    """Canonical metadata attached to every request and result envelope.

    String fields are stripped on construction so a principal is keyed the
    same way as the holder and recipient names passed in request payloads.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    envelope_id: str
    trace_id: str
    parent_id: str
    timestamp: datetime
    kind: EnvelopeKind
    source: str
    principal: str


def new_meta(
    *,
    kind: EnvelopeKind,
    source: str,
    principal: str,
    trace_id: str | None = None,
    parent_id: str = "",
    envelope_id: str | None = None,
    timestamp: datetime | None = None,
) -> EnvelopeMeta:
    """Build ``EnvelopeMeta`` with generated ids and a UTC timestamp."""
    return EnvelopeMeta(
        envelope_id=envelope_id or uuid4().hex,
        trace_id=trace_id or uuid4().hex,
        parent_id=parent_id,
        timestamp=utc_now() if timestamp is None else to_utc(timestamp),
        kind=kind,
        source=source,
        principal=principal,
    )


def utc_now() -> datetime:
    """Return current UTC timestamp."""
    return datetime.now(UTC)


def to_utc(value: datetime) -> datetime:
    """Normalize naive or aware datetimes to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
