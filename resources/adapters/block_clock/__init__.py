"""Block clock adapter resource."""

from resources.adapters.block_clock.adapter import (
    BlockClock,
    ManualBlockClock,
    WallBlockClock,
    build_block_clock,
)
from resources.adapters.block_clock.component import MANIFEST, RESOURCE_COMPONENT_ID

__all__ = [
    "MANIFEST",
    "RESOURCE_COMPONENT_ID",
    "BlockClock",
    "ManualBlockClock",
    "WallBlockClock",
    "build_block_clock",
]
