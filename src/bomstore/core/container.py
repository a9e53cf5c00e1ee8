"""BOM container - main public API.

Ties together the header, block table, variable table and tree reader.
"""

from __future__ import annotations

import logging

from ..components.blocks import BlockTable
from ..components.header import VariableTable, parse_header
from ..components.records import decode_bom_info
from ..components.tree import TreeHandle, TreeReader
from .config import BOMConfig
from .errors import VariableNotFoundError
from .types import BlockId, BOMHeader, BOMInfo

logger = logging.getLogger(__name__)

BOM_INFO_VARIABLE = "BomInfo"


class BOMContainer:
    """Read-only view over the bytes of a BOM file.

    Args:
        data: Full contents of the container
        config: Reader configuration

    Public API:
        - list_variables(): Variable names in declared order
        - get_variable(name): Block id of a variable, or None
        - tree_for(name): Tree handle for a variable
        - paths(): Tree handle for the path manifest variable
        - bom_info(): Decoded BomInfo variable

    Invariants:
        - The buffer is never mutated
        - Block and variable tables are decoded once, at open
    """

    def __init__(self, data: bytes | bytearray | memoryview, config: BOMConfig | None = None):
        if isinstance(data, memoryview):
            data = data.tobytes()
        elif isinstance(data, bytearray):
            data = bytes(data)
        if not isinstance(data, bytes):
            raise TypeError("data must be bytes, bytearray, or memoryview")

        self.config = config or BOMConfig()
        self.buffer = data
        self.header: BOMHeader = parse_header(data, self.config.supported_versions)
        self.blocks = BlockTable.parse(data, self.header.index_offset, self.header.index_length)
        self.variables = VariableTable.parse(data, self.header.vars_offset, self.header.vars_length)
        self._reader = TreeReader(self.blocks, self.config)

        logger.info(
            f"Opened BOM: {len(data)} bytes, {len(self.blocks)} blocks, "
            f"{len(self.variables)} variables"
        )

    def __len__(self) -> int:
        return len(self.buffer)

    def list_variables(self) -> list[str]:
        """Return variable names in declared order."""
        return self.variables.names()

    def get_variable(self, name: str) -> BlockId | None:
        """Return the block id of name, first match winning, or None."""
        return self.variables.get(name)

    def read_block(self, block_id: BlockId) -> bytes:
        """Return the bytes behind a block id."""
        return self.blocks.resolve(block_id)

    def tree_for(self, name: str) -> TreeHandle:
        """Open the tree a variable points at."""
        block_id = self.get_variable(name)
        if block_id is None:
            raise VariableNotFoundError(name)
        return self._reader.open_tree(block_id)

    def paths(self) -> TreeHandle:
        """Open the path manifest tree."""
        return self.tree_for(self.config.paths_variable)

    def bom_info(self) -> BOMInfo:
        """Decode the BomInfo variable."""
        block_id = self.get_variable(BOM_INFO_VARIABLE)
        if block_id is None:
            raise VariableNotFoundError(BOM_INFO_VARIABLE)
        return decode_bom_info(self.blocks.resolve(block_id))


def open_bom(data: bytes | bytearray | memoryview, config: BOMConfig | None = None) -> BOMContainer:
    """Open a container from raw bytes."""
    return BOMContainer(data, config)
