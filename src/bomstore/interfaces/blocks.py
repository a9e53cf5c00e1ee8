"""Protocol definition for block resolution."""

from __future__ import annotations

from typing import Protocol

from ..core.types import BlockId, BlockPointer


class BlockResolver(Protocol):
    """Resolves opaque block ids to byte ranges of the container."""

    def __len__(self) -> int:
        """Return number of slots in the block table."""
        ...

    def pointer(self, block_id: BlockId) -> BlockPointer:
        """Return the (offset, length) slot for a block id."""
        ...

    def resolve(self, block_id: BlockId) -> bytes:
        """Return the bytes of a block, bounds-checked against the buffer."""
        ...
