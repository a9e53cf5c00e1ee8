"""Record decoders for leaf key/value blocks.

Pure byte-to-record transforms for the installer manifest layout.
"""

from __future__ import annotations

import logging
import struct

from ..core.errors import MalformedRecordError
from ..core.types import (
    BOMInfo,
    BOMInfoEntry,
    DeviceInfo,
    DirectoryInfo,
    FileInfo,
    PathInfo,
    PathKey,
    PathType,
    PathValue,
    SymlinkInfo,
    UnknownInfo,
)

logger = logging.getLogger(__name__)

# Key format:   [parent_id(4B)][name, NUL padded to end of block]
# Value format: [entry_id(4B)][info_block(4B)]
# Info format:  [type(1B)][pad(1B)][arch(2B)][mode(2B)][uid(4B)][gid(4B)]
#               [mtime(4B)][size(4B)][pad(1B)][checksum_or_dev(4B)]
#               symlinks add [target_len(4B)][target]
KEY_PREFIX = struct.Struct(">I")
PATH_VALUE = struct.Struct(">II")
INFO = struct.Struct(">BBHHIIIIBI")
TARGET_LEN = struct.Struct(">I")
BOM_INFO = struct.Struct(">III")
BOM_INFO_ENTRY = struct.Struct(">IIII")

KNOWN_TAGS = frozenset(t.value for t in PathType)


def decode_key(data: bytes) -> PathKey:
    """Decode a (parent_id, name) key.

    The name runs to the end of the block; trailing NULs are stripped and the
    remaining bytes are returned undecoded.
    """
    if len(data) < KEY_PREFIX.size:
        raise MalformedRecordError(f"Key block of {len(data)} bytes has no parent id")
    (parent_id,) = KEY_PREFIX.unpack_from(data, 0)
    return PathKey(parent_id, bytes(data[KEY_PREFIX.size:]).rstrip(b"\x00"))


def decode_path_value(data: bytes) -> PathValue:
    """Decode a Paths value block into its entry id and info block id."""
    if len(data) < PATH_VALUE.size:
        raise MalformedRecordError(f"Path value block of {len(data)} bytes is too short")
    return PathValue(*PATH_VALUE.unpack_from(data, 0))


def decode_value(data: bytes) -> PathInfo:
    """Decode a metadata record tagged by its leading type byte.

    Unknown tags come back as UnknownInfo holding the raw bytes.
    """
    if not data:
        raise MalformedRecordError("Empty metadata record")

    tag = data[0]
    if tag not in KNOWN_TAGS:
        logger.warning(f"Unknown record type tag {tag}, keeping {len(data)} raw bytes")
        return UnknownInfo(tag, bytes(data))

    if len(data) < INFO.size:
        raise MalformedRecordError(
            f"Metadata record of type {tag} needs {INFO.size} bytes, got {len(data)}"
        )
    (_tag, _pad, arch, mode, uid, gid, mtime, size, _pad2, extra) = INFO.unpack_from(data, 0)

    path_type = PathType(tag)
    if path_type is PathType.FILE:
        return FileInfo(mode, uid, gid, size, mtime, extra, architecture=arch)
    if path_type is PathType.DIRECTORY:
        return DirectoryInfo(mode, uid, gid, size=size, mtime=mtime, architecture=arch)
    if path_type is PathType.DEVICE:
        return DeviceInfo(
            mode, uid, gid,
            major=(extra >> 24) & 0xFF,
            minor=extra & 0xFFFFFF,
            size=size,
            mtime=mtime,
            architecture=arch,
        )

    # Symlink target is length-prefixed after the fixed part
    pos = INFO.size
    if len(data) < pos + TARGET_LEN.size:
        raise MalformedRecordError("Symlink record has no target length")
    (target_len,) = TARGET_LEN.unpack_from(data, pos)
    pos += TARGET_LEN.size
    if pos + target_len > len(data):
        raise MalformedRecordError(
            f"Symlink target of {target_len} bytes runs past record of {len(data)} bytes"
        )
    target = bytes(data[pos:pos + target_len]).rstrip(b"\x00")
    return SymlinkInfo(mode, uid, gid, target, size=size, mtime=mtime, checksum=extra, architecture=arch)


def decode_bom_info(data: bytes) -> BOMInfo:
    """Decode the BomInfo variable block."""
    if len(data) < BOM_INFO.size:
        raise MalformedRecordError(f"BomInfo block of {len(data)} bytes is too short")
    version, path_count, entry_count = BOM_INFO.unpack_from(data, 0)

    needed = BOM_INFO.size + entry_count * BOM_INFO_ENTRY.size
    if needed > len(data):
        raise MalformedRecordError(
            f"BomInfo declares {entry_count} entries but block holds {len(data)} bytes"
        )
    entries = tuple(
        BOMInfoEntry(*BOM_INFO_ENTRY.unpack_from(data, BOM_INFO.size + i * BOM_INFO_ENTRY.size))
        for i in range(entry_count)
    )
    return BOMInfo(version, path_count, entries)
