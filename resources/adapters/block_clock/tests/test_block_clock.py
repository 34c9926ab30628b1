"""Tests for block clock behavior and settings."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from packages.decibel_shared.config import load_settings
from resources.adapters.block_clock.adapter import (
    ManualBlockClock,
    WallBlockClock,
    build_block_clock,
)
from resources.adapters.block_clock.config import resolve_block_clock_settings

_GENESIS = datetime(2024, 1, 1, tzinfo=UTC)


def test_manual_clock_advances_and_never_moves_backwards() -> None:
    clock = ManualBlockClock(start_block=5)
    assert clock.current_block() == 5
    assert clock.advance(3) == 8
    clock.set_block(10)
    assert clock.current_block() == 10
    with pytest.raises(ValueError):
        clock.set_block(9)
    with pytest.raises(ValueError):
        clock.advance(-1)


def test_wall_clock_counts_whole_blocks_since_genesis() -> None:
    """Height should be the number of complete block intervals elapsed."""
    now = {"value": _GENESIS + timedelta(seconds=1250)}
    clock = WallBlockClock(
        genesis=_GENESIS, seconds_per_block=600, now=lambda: now["value"]
    )
    assert clock.current_block() == 2


def test_wall_clock_is_monotonic_when_time_steps_back() -> None:
    now = {"value": _GENESIS + timedelta(seconds=3000)}
    clock = WallBlockClock(
        genesis=_GENESIS, seconds_per_block=600, now=lambda: now["value"]
    )
    assert clock.current_block() == 5
    now["value"] = _GENESIS + timedelta(seconds=100)
    assert clock.current_block() == 5


def test_wall_clock_before_genesis_reports_zero() -> None:
    clock = WallBlockClock(
        genesis=_GENESIS,
        seconds_per_block=600,
        now=lambda: _GENESIS - timedelta(days=1),
    )
    assert clock.current_block() == 0


def test_settings_select_clock_mode(tmp_path) -> None:
    settings = load_settings(
        config_path=tmp_path / "missing.yaml",
        components={"adapter": {"block_clock": {"mode": "manual", "start_block": 7}}},
    )
    clock = build_block_clock(resolve_block_clock_settings(settings))
    assert isinstance(clock, ManualBlockClock)
    assert clock.current_block() == 7


def test_settings_default_to_ten_minute_blocks(tmp_path) -> None:
    settings = load_settings(config_path=tmp_path / "missing.yaml")
    resolved = resolve_block_clock_settings(settings)
    assert resolved.seconds_per_block == 600
    assert resolved.genesis.tzinfo is not None
