"""Shared fixtures: a builder for synthetic BOM containers."""

import struct

import pytest

HEADER_REGION = 512


class BOMBuilder:
    """Assemble BOM bytes block by block.

    Block 0 is the reserved null slot. Blocks are laid out after a 512-byte
    header region, followed by the variable table and the index region.
    """

    def __init__(self):
        self.blocks = [b""]
        self.variables = []
        self.pointer_overrides = {}
        self.free_list = [(0, 0)]

    # Blocks and variables

    def add_block(self, data):
        self.blocks.append(bytes(data))
        return len(self.blocks) - 1

    def reserve(self):
        return self.add_block(b"")

    def set_block(self, block_id, data):
        self.blocks[block_id] = bytes(data)

    def add_variable(self, name, block_id):
        self.variables.append((name, block_id))

    def override_pointer(self, block_id, offset, length):
        self.pointer_overrides[block_id] = (offset, length)

    # Encoders

    @staticmethod
    def tree_header(child, entry_count=0, node_size=4096, flag=0, magic=b"tree", version=1):
        return struct.pack(">4sIIIIB", magic, version, child, node_size, entry_count, flag)

    @staticmethod
    def leaf(entries, forward=0, backward=0, count=None):
        """entries: list of (key_block, value_block)."""
        count = len(entries) if count is None else count
        data = struct.pack(">HHII", 1, count, forward, backward)
        for key_block, value_block in entries:
            data += struct.pack(">II", value_block, key_block)
        return data

    @staticmethod
    def internal(children, forward=0, backward=0):
        """children: list of child block ids."""
        data = struct.pack(">HHII", 0, len(children), forward, backward)
        for child in children:
            data += struct.pack(">II", child, 0)
        return data

    @staticmethod
    def path_key(parent_id, name):
        return struct.pack(">I", parent_id) + name + b"\x00"

    @staticmethod
    def path_value(entry_id, info_block):
        return struct.pack(">II", entry_id, info_block)

    @staticmethod
    def info(path_type, mode, uid=0, gid=0, mtime=0, size=0, extra=0, arch=0):
        return struct.pack(">BBHHIIIIBI", path_type, 1, arch, mode, uid, gid, mtime, size, 1, extra)

    @classmethod
    def file_info(cls, mode=0o100644, uid=501, gid=20, size=0, mtime=0, checksum=0):
        return cls.info(1, mode, uid, gid, mtime, size, checksum)

    @classmethod
    def dir_info(cls, mode=0o40755, uid=0, gid=0, mtime=0):
        return cls.info(2, mode, uid, gid, mtime)

    @classmethod
    def symlink_info(cls, target, mode=0o120755, uid=0, gid=0):
        target = target + b"\x00"
        return cls.info(3, mode, uid, gid) + struct.pack(">I", len(target)) + target

    # Composite helpers

    def add_paths_tree(self, entries, name="Paths"):
        """Add a single-leaf Paths tree.

        entries: list of (entry_id, parent_id, name, info_bytes).
        Returns the tree header block id.
        """
        leaf_entries = []
        for entry_id, parent_id, entry_name, info in entries:
            info_block = self.add_block(info)
            value_block = self.add_block(self.path_value(entry_id, info_block))
            key_block = self.add_block(self.path_key(parent_id, entry_name))
            leaf_entries.append((key_block, value_block))
        leaf_block = self.add_block(self.leaf(leaf_entries))
        tree_block = self.add_block(self.tree_header(leaf_block, len(entries)))
        self.add_variable(name, tree_block)
        return tree_block

    def build(self, magic=b"BOMStore", version=1, index_slack=0):
        body = bytearray(HEADER_REGION)
        pointers = [(0, 0)]
        for data in self.blocks[1:]:
            pointers.append((len(body), len(data)))
            body += data
        for block_id, pointer in self.pointer_overrides.items():
            pointers[block_id] = pointer

        vars_offset = len(body)
        table = struct.pack(">I", len(self.variables))
        for name, block_id in self.variables:
            encoded = name.encode()
            table += struct.pack(">IB", block_id, len(encoded)) + encoded
        body += table

        index_offset = len(body)
        index = struct.pack(">I", len(pointers))
        for offset, length in pointers:
            index += struct.pack(">II", offset, length)
        index += struct.pack(">I", len(self.free_list))
        for offset, length in self.free_list:
            index += struct.pack(">II", offset, length)
        index += bytes(index_slack)
        body += index

        header = struct.pack(
            ">8sIIIIII",
            magic,
            version,
            len(self.blocks) - 1,
            index_offset,
            len(index),
            vars_offset,
            len(table),
        )
        body[: len(header)] = header
        return bytes(body)


@pytest.fixture
def builder():
    """Fresh synthetic BOM builder."""
    return BOMBuilder()
