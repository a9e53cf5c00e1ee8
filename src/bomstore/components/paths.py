"""Path reconstruction from flat (id, parent, name) records.

Uses sortedcontainers.SortedDict so resolved listings come back in id order.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sortedcontainers import SortedDict

from ..core.errors import CyclicAncestryError, DanglingParentError
from ..core.types import EntryId

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)

ROOT_PARENT = 0

PathNode = tuple[EntryId, EntryId, bytes]


def build_index(nodes: Iterable[PathNode]) -> dict[EntryId, tuple[EntryId, bytes]]:
    """Collect id -> (parent_id, name) in one pass. First occurrence of an id wins."""
    index: dict[EntryId, tuple[EntryId, bytes]] = {}
    for entry_id, parent_id, name in nodes:
        if entry_id in index:
            logger.warning(f"Duplicate entry id {entry_id}, keeping first occurrence")
            continue
        index[entry_id] = (parent_id, name)
    return index


class PathResolver:
    """Resolves full paths by walking parent chains over a fixed index.

    Args:
        index: Mapping of entry id to (parent_id, name)
        separator: Bytes placed between path components

    Invariants:
        - The index is never mutated after construction
        - Each id is resolved at most once (memoized)
        - A chain stops at parent id 0
    """

    def __init__(self, index: dict[EntryId, tuple[EntryId, bytes]], separator: bytes = b"/"):
        self._index = index
        self.separator = separator
        self._cache: dict[EntryId, bytes] = {}

    def __len__(self) -> int:
        return len(self._index)

    def resolve(self, entry_id: EntryId) -> bytes:
        """Return the full path of one entry."""
        if entry_id in self._cache:
            return self._cache[entry_id]
        if entry_id not in self._index:
            raise KeyError(entry_id)

        chain: list[EntryId] = []
        on_chain: set[EntryId] = set()
        current = entry_id
        base: bytes | None = None

        while True:
            if current in self._cache:
                base = self._cache[current]
                break
            if current in on_chain:
                raise CyclicAncestryError(entry_id, chain + [current])
            if current not in self._index:
                raise DanglingParentError(chain[-1], current)
            on_chain.add(current)
            chain.append(current)

            parent_id, _name = self._index[current]
            if parent_id == ROOT_PARENT:
                break
            current = parent_id

        # Fill in from the topmost unresolved ancestor down
        for node in reversed(chain):
            name = self._index[node][1]
            base = name if base is None else base + self.separator + name
            self._cache[node] = base

        return self._cache[entry_id]

    def resolve_all(self) -> SortedDict:
        """Return a SortedDict of every entry id to its full path."""
        result = SortedDict()
        for entry_id in self._index:
            result[entry_id] = self.resolve(entry_id)
        logger.debug(f"Resolved {len(result)} paths")
        return result


def resolve_all(nodes: Iterable[PathNode], separator: bytes = b"/") -> SortedDict:
    """Build the ancestry index from nodes and resolve every path."""
    return PathResolver(build_index(nodes), separator).resolve_all()
