"""Block height sources for ledger transitions."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from threading import Lock
from typing import Protocol

from packages.decibel_shared.envelope import to_utc, utc_now
from resources.adapters.block_clock.config import BlockClockSettings


class BlockClock(Protocol):
    """Monotonically non-decreasing block height source."""

    def current_block(self) -> int:
        """Return the current block height."""


class ManualBlockClock:
    """Host-driven clock; height changes only through ``advance``/``set_block``."""

    def __init__(self, start_block: int = 0) -> None:
        if start_block < 0:
            raise ValueError("start_block must be >= 0")
        self._block = start_block
        self._lock = Lock()

    def current_block(self) -> int:
        return self._block

    def advance(self, blocks: int = 1) -> int:
        """Move the height forward by ``blocks`` and return the new height."""
        if blocks < 0:
            raise ValueError("block height cannot move backwards")
        with self._lock:
            self._block += blocks
            return self._block

    def set_block(self, block: int) -> None:
        """Jump to ``block``; moving backwards is rejected."""
        with self._lock:
            if block < self._block:
                raise ValueError(
                    f"block height cannot move backwards ({self._block} -> {block})"
                )
            self._block = block


class WallBlockClock:
    """Clock deriving height from wall time elapsed since a genesis instant."""

    def __init__(
        self,
        *,
        genesis: datetime,
        seconds_per_block: float,
        now: Callable[[], datetime] = utc_now,
    ) -> None:
        if seconds_per_block <= 0:
            raise ValueError("seconds_per_block must be > 0")
        self._genesis = to_utc(genesis)
        self._seconds_per_block = seconds_per_block
        self._now = now
        self._last = 0
        self._lock = Lock()

    def current_block(self) -> int:
        elapsed = (to_utc(self._now()) - self._genesis).total_seconds()
        height = max(0, int(elapsed // self._seconds_per_block))
        # Wall time may step backwards; the reported height never does.
        with self._lock:
            self._last = max(self._last, height)
            return self._last


def build_block_clock(settings: BlockClockSettings) -> BlockClock:
    """Construct the clock selected by ``settings.mode``."""
    if settings.mode == "wall":
        return WallBlockClock(
            genesis=settings.genesis,
            seconds_per_block=settings.seconds_per_block,
        )
    return ManualBlockClock(start_block=settings.start_block)
