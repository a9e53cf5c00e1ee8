"""Exception hierarchy for the BOM reader.

Defines all custom exceptions raised while decoding a container.
"""

from __future__ import annotations


class BOMError(Exception):
    """Base exception for all BOM errors."""
    pass


class MalformedBOMError(BOMError):
    """Base for every structural decoding failure."""
    pass


class BadMagicError(MalformedBOMError):
    """Raised when the container does not start with the BOMStore signature."""
    pass


class UnsupportedVersionError(MalformedBOMError):
    """Raised when a header or tree declares a version we cannot read."""
    pass


class MalformedHeaderError(MalformedBOMError):
    """Raised when a header region is inconsistent with its declared size."""
    pass


class BlockOutOfRangeError(MalformedBOMError):
    """Raised when a block id is 0 or not covered by the block table."""

    def __init__(self, block_id: int, count: int):
        self.block_id = block_id
        self.count = count
        super().__init__(f"Block id {block_id} outside block table of {count} entries")


class TruncatedBlockError(MalformedBOMError):
    """Raised when a declared region extends past the end of the buffer."""

    def __init__(self, message: str, block_id: int | None = None):
        self.block_id = block_id
        super().__init__(message)


class InvalidNodeTypeError(MalformedBOMError):
    """Raised when a tree node's leaf/internal flag is not recognized."""

    def __init__(self, block_id: int, flag: int):
        self.block_id = block_id
        self.flag = flag
        super().__init__(f"Node {block_id} has invalid leaf flag {flag}")


class CorruptEntryCountError(MalformedBOMError):
    """Raised when a node's entry count does not fit in the node."""

    def __init__(self, block_id: int, count: int, capacity: int):
        self.block_id = block_id
        self.count = count
        self.capacity = capacity
        super().__init__(
            f"Node {block_id} declares {count} entries but only holds {capacity}"
        )


class CyclicTreeError(MalformedBOMError):
    """Raised when a tree walk revisits a node or exceeds the node ceiling."""

    def __init__(self, message: str, block_id: int | None = None):
        self.block_id = block_id
        super().__init__(message)


class MalformedRecordError(MalformedBOMError):
    """Raised when a key or value block is shorter than its fixed layout."""
    pass


class CyclicAncestryError(MalformedBOMError):
    """Raised when a parent chain loops back on itself."""

    def __init__(self, entry_id: int, chain: list[int]):
        self.entry_id = entry_id
        self.chain = chain
        super().__init__(f"Cyclic ancestry resolving entry {entry_id}: {chain}")


class DanglingParentError(MalformedBOMError):
    """Raised when a parent id never appears as an entry id."""

    def __init__(self, entry_id: int, parent_id: int):
        self.entry_id = entry_id
        self.parent_id = parent_id
        super().__init__(f"Entry {entry_id} references missing parent {parent_id}")


class VariableNotFoundError(BOMError, KeyError):
    """Raised when a variable name is not present in the container."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(name)

    def __str__(self) -> str:
        return f"No variable named {self.name!r}"
