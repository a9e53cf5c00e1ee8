"""Common type definitions for the BOM reader.

Defines the read-only views decoded out of a BOM container.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import NamedTuple

# Core primitive types
BlockId = int
EntryId = int


class BlockPointer(NamedTuple):
    """One (offset, length) slot of the block table."""
    offset: int
    length: int


@dataclass(frozen=True)
class BOMHeader:
    """Fixed container header at offset 0."""
    magic: bytes
    version: int
    block_count: int
    index_offset: int
    index_length: int
    vars_offset: int
    vars_length: int


@dataclass(frozen=True)
class Variable:
    """A named entry point into the container."""
    name: str
    block_id: BlockId


@dataclass(frozen=True)
class TreeHeader:
    """Header block a variable points at.

    Attributes:
        version: Tree format version
        child_block_id: Root node of the paged tree
        node_size: Declared page size
        entry_count: Declared number of leaf entries
        is_leaf: Trailing flag byte, informational only
    """
    version: int
    child_block_id: BlockId
    node_size: int
    entry_count: int
    is_leaf: bool


class NodeKind(IntEnum):
    """Discriminant stored in the first u16 of every tree node."""
    INTERNAL = 0
    LEAF = 1


class LeafEntry(NamedTuple):
    key_block: BlockId
    value_block: BlockId


class ChildRef(NamedTuple):
    child_block: BlockId
    key_block: BlockId


@dataclass(frozen=True)
class InternalNode:
    block_id: BlockId
    forward_link: BlockId | None
    backward_link: BlockId | None
    children: tuple[ChildRef, ...]
    kind: NodeKind = field(default=NodeKind.INTERNAL, init=False)


@dataclass(frozen=True)
class LeafNode:
    block_id: BlockId
    forward_link: BlockId | None
    backward_link: BlockId | None
    entries: tuple[LeafEntry, ...]
    kind: NodeKind = field(default=NodeKind.LEAF, init=False)


TreeNode = InternalNode | LeafNode


class PathType(IntEnum):
    """Type tag at the start of a path info record."""
    FILE = 1
    DIRECTORY = 2
    SYMLINK = 3
    DEVICE = 4


class PathKey(NamedTuple):
    """Decoded key of a path-bearing tree entry."""
    parent_id: EntryId
    name: bytes


class PathValue(NamedTuple):
    """Decoded value of a Paths entry: its identity and metadata block."""
    entry_id: EntryId
    info_block: BlockId


@dataclass(frozen=True)
class FileInfo:
    mode: int
    uid: int
    gid: int
    size: int
    mtime: int
    checksum: int
    architecture: int = 0
    path_type: PathType = field(default=PathType.FILE, init=False)


@dataclass(frozen=True)
class DirectoryInfo:
    mode: int
    uid: int
    gid: int
    size: int = 0
    mtime: int = 0
    architecture: int = 0
    path_type: PathType = field(default=PathType.DIRECTORY, init=False)


@dataclass(frozen=True)
class SymlinkInfo:
    mode: int
    uid: int
    gid: int
    target: bytes
    size: int = 0
    mtime: int = 0
    checksum: int = 0
    architecture: int = 0
    path_type: PathType = field(default=PathType.SYMLINK, init=False)


@dataclass(frozen=True)
class DeviceInfo:
    mode: int
    uid: int
    gid: int
    major: int
    minor: int
    size: int = 0
    mtime: int = 0
    architecture: int = 0
    path_type: PathType = field(default=PathType.DEVICE, init=False)


@dataclass(frozen=True)
class UnknownInfo:
    """Record with a type tag this reader does not know; bytes kept as-is."""
    type_tag: int
    raw_bytes: bytes


PathInfo = FileInfo | DirectoryInfo | SymlinkInfo | DeviceInfo | UnknownInfo


@dataclass(frozen=True)
class PathRecord:
    """One fully decoded leaf entry of a path-bearing tree."""
    entry_id: EntryId
    parent_id: EntryId
    name: bytes
    info: PathInfo | None


class BOMInfoEntry(NamedTuple):
    cpu_type: int
    reserved0: int
    file_size: int
    reserved1: int


@dataclass(frozen=True)
class BOMInfo:
    """Contents of the ``BomInfo`` variable."""
    version: int
    path_count: int
    entries: tuple[BOMInfoEntry, ...]
