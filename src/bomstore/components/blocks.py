"""Block table implementation.

Maps opaque block ids to bounds-checked byte ranges of the container.
"""

from __future__ import annotations

import logging
import struct

from ..core.errors import BlockOutOfRangeError, MalformedHeaderError, TruncatedBlockError
from ..core.types import BlockId, BlockPointer

logger = logging.getLogger(__name__)

# Pointer array format: [count(4B)] then count x [offset(4B)][length(4B)], big-endian
COUNT_FORMAT = ">I"
POINTER_FORMAT = ">II"
COUNT_SIZE = struct.calcsize(COUNT_FORMAT)
POINTER_SIZE = struct.calcsize(POINTER_FORMAT)


def parse_pointers(region: bytes, what: str = "block table") -> tuple[list[BlockPointer], int]:
    """Decode one counted pointer array from the start of region.

    Returns:
        The pointers and the number of bytes consumed.
    """
    if len(region) < COUNT_SIZE:
        raise MalformedHeaderError(f"{what} too short for its count field: {len(region)} bytes")

    count = struct.unpack_from(COUNT_FORMAT, region, 0)[0]
    needed = COUNT_SIZE + count * POINTER_SIZE
    if needed > len(region):
        raise MalformedHeaderError(
            f"{what} declares {count} entries ({needed} bytes) "
            f"but its region holds {len(region)} bytes"
        )

    pointers = [
        BlockPointer(*struct.unpack_from(POINTER_FORMAT, region, COUNT_SIZE + i * POINTER_SIZE))
        for i in range(count)
    ]
    return pointers, needed


class BlockTable:
    """Flat array of (offset, length) slots over an immutable buffer.

    Args:
        buffer: Full contents of the container
        pointers: Decoded block table slots
        free_list: Decoded free-list slots (informational)

    Invariants:
        - Block id 0 is reserved and never dereferenced
        - Every resolved range lies inside the buffer
        - Raw offsets never leave this class except through pointer()
    """

    def __init__(
        self,
        buffer: bytes,
        pointers: list[BlockPointer],
        free_list: list[BlockPointer] | None = None,
    ):
        self._buffer = buffer
        self._pointers = tuple(pointers)
        self.free_list = tuple(free_list or ())

    @classmethod
    def parse(cls, buffer: bytes, offset: int, length: int) -> BlockTable:
        """Decode the block table and trailing free list from the index region."""
        end = offset + length
        if end > len(buffer):
            raise TruncatedBlockError(
                f"Index region {offset}+{length} exceeds buffer of {len(buffer)} bytes"
            )

        region = buffer[offset:end]
        pointers, consumed = parse_pointers(region, "block table")

        # Free list follows the block table when the region has room for it
        free_list: list[BlockPointer] = []
        if len(region) - consumed >= COUNT_SIZE:
            free_list, _ = parse_pointers(region[consumed:], "free list")

        logger.debug(f"Parsed block table: {len(pointers)} blocks, {len(free_list)} free")
        return cls(buffer, pointers, free_list)

    def __len__(self) -> int:
        return len(self._pointers)

    def pointer(self, block_id: BlockId) -> BlockPointer:
        """Return the (offset, length) slot for a block id."""
        if block_id <= 0 or block_id >= len(self._pointers):
            raise BlockOutOfRangeError(block_id, len(self._pointers))
        return self._pointers[block_id]

    def resolve(self, block_id: BlockId) -> bytes:
        """Return the bytes of a block, bounds-checked against the buffer."""
        offset, length = self.pointer(block_id)
        if offset + length > len(self._buffer):
            raise TruncatedBlockError(
                f"Block {block_id} at {offset}+{length} exceeds buffer of {len(self._buffer)} bytes",
                block_id=block_id,
            )
        return self._buffer[offset:offset + length]

    def block_ids(self) -> range:
        """Return every dereferenceable block id."""
        return range(1, len(self._pointers))
