"""Paged tree reader.

Decodes tree headers and nodes through the block table and walks them lazily.
"""

from __future__ import annotations

import logging
import struct
from collections.abc import Iterator

from sortedcontainers import SortedDict

from ..core.config import BOMConfig
from ..core.errors import (
    CorruptEntryCountError,
    CyclicTreeError,
    InvalidNodeTypeError,
    MalformedHeaderError,
    TruncatedBlockError,
    UnsupportedVersionError,
)
from ..core.types import (
    BlockId,
    ChildRef,
    InternalNode,
    LeafEntry,
    LeafNode,
    NodeKind,
    PathRecord,
    TreeHeader,
    TreeNode,
)
from ..interfaces.blocks import BlockResolver
from .paths import PathNode, PathResolver, build_index
from .records import decode_key, decode_path_value, decode_value

logger = logging.getLogger(__name__)

# Tree header format: [magic "tree"(4B)][version(4B)][child(4B)][node_size(4B)]
#                     [entry_count(4B)][flag(1B)]
TREE_MAGIC = b"tree"
TREE_HEADER_FORMAT = ">4sIIIIB"
TREE_HEADER_SIZE = struct.calcsize(TREE_HEADER_FORMAT)

# Node format: [is_leaf(2B)][count(2B)][forward(4B)][backward(4B)] then count x [a(4B)][b(4B)]
# Leaf pairs are (value_block, key_block); internal pairs are (child_block, key_block).
NODE_HEADER_FORMAT = ">HHII"
NODE_HEADER_SIZE = struct.calcsize(NODE_HEADER_FORMAT)
NODE_PAIR_FORMAT = ">II"
NODE_PAIR_SIZE = struct.calcsize(NODE_PAIR_FORMAT)


def decode_tree_header(data: bytes, supported_versions: tuple[int, ...] = (1,)) -> TreeHeader:
    """Decode the header block a variable points at."""
    if len(data) < TREE_HEADER_SIZE:
        raise MalformedHeaderError(f"Tree header needs {TREE_HEADER_SIZE} bytes, got {len(data)}")
    magic, version, child, node_size, entry_count, flag = struct.unpack_from(TREE_HEADER_FORMAT, data, 0)
    if magic != TREE_MAGIC:
        raise MalformedHeaderError(f"Invalid tree magic: {magic!r}")
    if version not in supported_versions:
        raise UnsupportedVersionError(f"Unsupported tree version: {version}")
    return TreeHeader(version, child, node_size, entry_count, bool(flag))


def decode_node(block_id: BlockId, data: bytes) -> TreeNode:
    """Decode one tree node, checking its entry count against its size."""
    if len(data) < NODE_HEADER_SIZE:
        raise TruncatedBlockError(
            f"Node {block_id} is {len(data)} bytes, shorter than a node header", block_id
        )
    flag, count, forward, backward = struct.unpack_from(NODE_HEADER_FORMAT, data, 0)

    if flag not in (NodeKind.INTERNAL, NodeKind.LEAF):
        raise InvalidNodeTypeError(block_id, flag)

    capacity = (len(data) - NODE_HEADER_SIZE) // NODE_PAIR_SIZE
    if count > capacity:
        raise CorruptEntryCountError(block_id, count, capacity)

    pairs = [
        struct.unpack_from(NODE_PAIR_FORMAT, data, NODE_HEADER_SIZE + i * NODE_PAIR_SIZE)
        for i in range(count)
    ]
    forward_link = forward or None
    backward_link = backward or None

    if flag == NodeKind.LEAF:
        entries = tuple(LeafEntry(key_block=key, value_block=value) for value, key in pairs)
        return LeafNode(block_id, forward_link, backward_link, entries)
    children = tuple(ChildRef(child_block=child, key_block=key) for child, key in pairs)
    return InternalNode(block_id, forward_link, backward_link, children)


class TreeReader:
    """Opens trees rooted at variable blocks.

    Args:
        blocks: Block resolver for the container
        config: Reader configuration
    """

    def __init__(self, blocks: BlockResolver, config: BOMConfig | None = None):
        self.blocks = blocks
        self.config = config or BOMConfig()

    def open_tree(self, root: BlockId) -> TreeHandle:
        """Read the tree header at root and return a handle for iteration."""
        header = decode_tree_header(self.blocks.resolve(root), self.config.supported_versions)
        logger.debug(
            f"Opened tree at block {root}: child={header.child_block_id} "
            f"entries={header.entry_count} node_size={header.node_size}"
        )
        return TreeHandle(self.blocks, root, header, self.config)


class TreeHandle:
    """Restartable, read-only view of one tree.

    Every iteration re-descends from the root node; there is no shared cursor.

    Invariants:
        - Internal children are visited in stored order, depth first
        - A node is visited at most once per walk; a revisit raises CyclicTreeError
        - No walk visits more nodes than the ceiling allows. The default
          ceiling is the number of dereferenceable block ids, which the
          revisit check already guarantees; max_nodes tightens it
    """

    def __init__(self, blocks: BlockResolver, root: BlockId, header: TreeHeader, config: BOMConfig):
        self.blocks = blocks
        self.root = root
        self.header = header
        self.config = config

    @property
    def node_ceiling(self) -> int:
        """Return the most nodes one walk may visit."""
        return self.config.max_nodes or len(self.blocks) - 1

    def read_block(self, block_id: BlockId) -> bytes:
        """Return the bytes behind a block id."""
        return self.blocks.resolve(block_id)

    def read_node(self, block_id: BlockId) -> TreeNode:
        """Decode the tree node stored in a block."""
        return decode_node(block_id, self.blocks.resolve(block_id))

    def _visit(self, block_id: BlockId, visited: set[BlockId]) -> TreeNode:
        if block_id in visited:
            raise CyclicTreeError(f"Tree at block {self.root} revisits node {block_id}", block_id)
        visited.add(block_id)
        if len(visited) > self.node_ceiling:
            raise CyclicTreeError(
                f"Tree at block {self.root} exceeds {self.node_ceiling} nodes", block_id
            )
        return self.read_node(block_id)

    def iterate(self) -> Iterator[LeafEntry]:
        """Yield (key_block, value_block) pairs, pre-order and left to right."""
        visited: set[BlockId] = set()
        stack = [self.header.child_block_id]

        while stack:
            node = self._visit(stack.pop(), visited)
            if isinstance(node, LeafNode):
                yield from node.entries
            elif isinstance(node, InternalNode):
                stack.extend(child.child_block for child in reversed(node.children))
            else:
                raise TypeError(f"Unexpected node {node!r}")

    __iter__ = iterate

    def scan_leaf_chain(self) -> Iterator[LeafEntry]:
        """Yield entries by descending leftmost, then following forward links.

        Diagnostic alternative to iterate(). Leaves reached twice through
        sibling links are skipped with a warning.
        """
        visited: set[BlockId] = set()
        node = self._visit(self.header.child_block_id, visited)
        while isinstance(node, InternalNode):
            if not node.children:
                return
            node = self._visit(node.children[0].child_block, visited)

        while True:
            yield from node.entries
            next_id = node.forward_link
            if next_id is None:
                return
            if next_id in visited:
                logger.warning(f"Leaf {node.block_id} links forward to visited node {next_id}, stopping")
                return
            node = self._visit(next_id, visited)
            if not isinstance(node, LeafNode):
                logger.warning(f"Forward link {next_id} is not a leaf, stopping")
                return

    def items(self) -> Iterator[tuple[bytes, bytes]]:
        """Yield raw (key_bytes, value_bytes) for every leaf entry."""
        for entry in self.iterate():
            yield self.read_block(entry.key_block), self.read_block(entry.value_block)

    def _path_nodes(self) -> Iterator[PathNode]:
        positional = self.config.identity_scheme == "positional"
        for position, entry in enumerate(self.iterate(), start=1):
            key = decode_key(self.read_block(entry.key_block))
            if positional:
                entry_id = position
            else:
                entry_id = decode_path_value(self.read_block(entry.value_block)).entry_id
            yield entry_id, key.parent_id, key.name

    def records(self) -> Iterator[PathRecord]:
        """Yield fully decoded path records in traversal order."""
        positional = self.config.identity_scheme == "positional"
        for position, entry in enumerate(self.iterate(), start=1):
            key = decode_key(self.read_block(entry.key_block))
            value_bytes = self.read_block(entry.value_block)
            if positional:
                yield PathRecord(position, key.parent_id, key.name, decode_value(value_bytes))
                continue
            value = decode_path_value(value_bytes)
            info = decode_value(self.read_block(value.info_block))
            yield PathRecord(value.entry_id, key.parent_id, key.name, info)

    def path_resolver(self) -> PathResolver:
        """Build the ancestry index for this tree in one pass."""
        return PathResolver(build_index(self._path_nodes()), self.config.path_separator)

    def resolve_paths(self) -> SortedDict:
        """Return a SortedDict of entry id to full path."""
        return self.path_resolver().resolve_all()

    def manifest(self) -> Iterator[tuple[bytes, PathRecord]]:
        """Yield (full_path, record) for every entry in traversal order."""
        resolver = self.path_resolver()
        for record in self.records():
            yield resolver.resolve(record.entry_id), record
