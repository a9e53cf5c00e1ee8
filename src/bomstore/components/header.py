"""Container header and variable table.

Parses the fixed BOMStore header and the named-variable table.
"""

from __future__ import annotations

import logging
import struct
from collections.abc import Iterator

from ..core.errors import (
    BadMagicError,
    MalformedHeaderError,
    TruncatedBlockError,
    UnsupportedVersionError,
)
from ..core.types import BlockId, BOMHeader, Variable

logger = logging.getLogger(__name__)

# Header format: [magic(8B)][version(4B)][block_count(4B)][index_offset(4B)]
#                [index_length(4B)][vars_offset(4B)][vars_length(4B)], big-endian
MAGIC = b"BOMStore"
HEADER_FORMAT = ">8sIIIIII"
HEADER_SIZE = struct.calcsize(HEADER_FORMAT)

# Variable record format: [block_id(4B)][name_len(1B)][name]
VAR_PREFIX_FORMAT = ">IB"
VAR_PREFIX_SIZE = struct.calcsize(VAR_PREFIX_FORMAT)


def parse_header(buffer: bytes, supported_versions: tuple[int, ...] = (1,)) -> BOMHeader:
    """Decode and validate the fixed header at offset 0."""
    if len(buffer) < len(MAGIC) or buffer[:len(MAGIC)] != MAGIC:
        raise BadMagicError(f"Invalid magic: {bytes(buffer[:len(MAGIC)])!r}")
    if len(buffer) < HEADER_SIZE:
        raise MalformedHeaderError(f"Header needs {HEADER_SIZE} bytes, buffer has {len(buffer)}")

    header = BOMHeader(*struct.unpack_from(HEADER_FORMAT, buffer, 0))
    if header.version not in supported_versions:
        raise UnsupportedVersionError(f"Unsupported BOMStore version: {header.version}")

    logger.debug(
        f"Header: version={header.version} blocks={header.block_count} "
        f"index={header.index_offset}+{header.index_length} "
        f"vars={header.vars_offset}+{header.vars_length}"
    )
    return header


class VariableTable:
    """Ordered table of named entry points.

    Args:
        variables: Variables in the order the file declares them

    Invariants:
        - Declared order is preserved for listing
        - Lookup is exact-match and the first duplicate wins
    """

    def __init__(self, variables: list[Variable]):
        self._variables = tuple(variables)
        self._by_name: dict[str, BlockId] = {}
        for var in self._variables:
            self._by_name.setdefault(var.name, var.block_id)

    @classmethod
    def parse(cls, buffer: bytes, offset: int, length: int) -> VariableTable:
        """Decode the counted variable records in buffer[offset:offset+length]."""
        end = offset + length
        if end > len(buffer):
            raise TruncatedBlockError(
                f"Variable region {offset}+{length} exceeds buffer of {len(buffer)} bytes"
            )
        region = buffer[offset:end]
        if len(region) < 4:
            raise MalformedHeaderError(f"Variable table too short: {len(region)} bytes")

        count = struct.unpack_from(">I", region, 0)[0]
        pos = 4
        variables = []
        for i in range(count):
            if pos + VAR_PREFIX_SIZE > len(region):
                raise MalformedHeaderError(f"Variable {i} of {count} runs past variable table")
            block_id, name_len = struct.unpack_from(VAR_PREFIX_FORMAT, region, pos)
            pos += VAR_PREFIX_SIZE
            if pos + name_len > len(region):
                raise MalformedHeaderError(f"Name of variable {i} runs past variable table")
            name = region[pos:pos + name_len].decode("utf-8", errors="surrogateescape")
            pos += name_len
            variables.append(Variable(name, block_id))

        if len(set(v.name for v in variables)) != len(variables):
            logger.warning("Variable table contains duplicate names; first match wins")
        return cls(variables)

    def __len__(self) -> int:
        return len(self._variables)

    def __iter__(self) -> Iterator[Variable]:
        return iter(self._variables)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def names(self) -> list[str]:
        """Return variable names in declared order."""
        return [v.name for v in self._variables]

    def get(self, name: str) -> BlockId | None:
        """Return the block id for name, or None if absent."""
        return self._by_name.get(name)
