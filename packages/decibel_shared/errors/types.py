"""Error taxonomy shared by every ledger component.

Each failed state transition surfaces exactly one ``ErrorDetail`` whose
``code`` is stable and machine-readable. Categories group codes for transport
mapping and metrics; they never replace the code itself.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping


class ErrorCategory(str, Enum):
    """Coarse error families used for transport mapping and metrics."""

    UNSPECIFIED = "unspecified"
    VALIDATION = "validation"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    POLICY = "policy"
    DEPENDENCY = "dependency"
    INTERNAL = "internal"


@dataclass(frozen=True)
class ErrorDetail:
    """One structured error carried in an envelope."""

    code: str
    message: str
    category: ErrorCategory
    retryable: bool = False
    metadata: Mapping[str, str] = field(default_factory=dict)
