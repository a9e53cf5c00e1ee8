"""bomstore - reader for Apple BOM (Bill Of Materials) containers."""

from .core.config import BOMConfig
from .core.container import BOMContainer, open_bom
from .core.errors import (
    BOMError,
    MalformedBOMError,
    BadMagicError,
    UnsupportedVersionError,
    MalformedHeaderError,
    BlockOutOfRangeError,
    TruncatedBlockError,
    InvalidNodeTypeError,
    CorruptEntryCountError,
    CyclicTreeError,
    MalformedRecordError,
    CyclicAncestryError,
    DanglingParentError,
    VariableNotFoundError,
)
from .components.tree import TreeHandle
from .core.types import (
    BlockId,
    Variable,
    TreeHeader,
    LeafEntry,
    PathRecord,
    PathType,
    FileInfo,
    DirectoryInfo,
    SymlinkInfo,
    DeviceInfo,
    UnknownInfo,
    BOMInfo,
)

__all__ = [
    "BOMConfig",
    "BOMContainer",
    "open_bom",
    "TreeHandle",
    "BOMError",
    "MalformedBOMError",
    "BadMagicError",
    "UnsupportedVersionError",
    "MalformedHeaderError",
    "BlockOutOfRangeError",
    "TruncatedBlockError",
    "InvalidNodeTypeError",
    "CorruptEntryCountError",
    "CyclicTreeError",
    "MalformedRecordError",
    "CyclicAncestryError",
    "DanglingParentError",
    "VariableNotFoundError",
    "BlockId",
    "Variable",
    "TreeHeader",
    "LeafEntry",
    "PathRecord",
    "PathType",
    "FileInfo",
    "DirectoryInfo",
    "SymlinkInfo",
    "DeviceInfo",
    "UnknownInfo",
    "BOMInfo",
]
