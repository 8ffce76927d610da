"""Reading files, directories and pathnames from a Version 6 Unix filesystem."""

from __future__ import annotations

import itertools
import struct

from syslab.diskimg import SECTOR_SIZE
from syslab.layout import (
    BOOTBLOCK_MAGIC_NUM,
    BOOTBLOCK_SECTOR,
    DIRENT_NAME_LEN,
    DIRENT_SIZE,
    INODE_SIZE,
    INODE_START_SECTOR,
    INODES_PER_BLOCK,
    ROOT_INUMBER,
    SUPERBLOCK_SECTOR,
    DirEntry,
    Inode,
    Superblock,
)

_ADDRS_PER_BLOCK = SECTOR_SIZE // 2
_INDIRECT_BLOCKS = 7 * _ADDRS_PER_BLOCK
_MAX_PATH = 1024
_BLOCK_TABLE = struct.Struct(f"<{_ADDRS_PER_BLOCK}H")


class FilesystemError(Exception):
    """Raised when the filesystem cannot satisfy a request."""


class UnixFilesystem:
    """A read view of a V6 filesystem stored on a disk image."""

    def __init__(self, disk):
        self.disk = disk
        boot = disk.read_sector(BOOTBLOCK_SECTOR)
        if len(boot) != SECTOR_SIZE:
            raise FilesystemError("Error reading bootblock")
        magic = int.from_bytes(boot[:2], "little")
        if magic != BOOTBLOCK_MAGIC_NUM:
            raise FilesystemError(f"Bad magic number on disk(0x{magic:x})")
        raw = disk.read_sector(SUPERBLOCK_SECTOR)
        if len(raw) != SECTOR_SIZE:
            raise FilesystemError("Error reading superblock")
        self.superblock = Superblock.from_bytes(raw)

    @property
    def num_inodes(self):
        """One past the highest valid inode number."""
        return self.superblock.isize * INODES_PER_BLOCK

    def _read_full_sector(self, sector):
        data = self.disk.read_sector(sector)
        if len(data) != SECTOR_SIZE:
            raise FilesystemError(f"Error reading sector {sector}")
        return data

    def _read_block_table(self, sector):
        return _BLOCK_TABLE.unpack(self._read_full_sector(sector))

    def inode(self, inumber):
        """Fetch inode number ``inumber``."""
        if not 1 <= inumber < self.num_inodes:
            raise FilesystemError(f"inode number {inumber} out of range")
        sector = INODE_START_SECTOR + (inumber - 1) // INODES_PER_BLOCK
        start = ((inumber - 1) % INODES_PER_BLOCK) * INODE_SIZE
        data = self._read_full_sector(sector)
        return Inode.from_bytes(data[start:start + INODE_SIZE])

    def block_address(self, inode, block_num):
        """Return the disk sector holding file block ``block_num`` of ``inode``."""
        if not inode.is_allocated():
            raise FilesystemError("inode is not allocated")
        if block_num < 0:
            raise FilesystemError(f"negative block number {block_num}")

        if not inode.is_large():
            if block_num >= len(inode.addr):
                raise FilesystemError(f"block {block_num} beyond a small file")
            return inode.addr[block_num]

        if block_num < _INDIRECT_BLOCKS:
            table_sector = inode.addr[block_num // _ADDRS_PER_BLOCK]
            if table_sector == 0:
                raise FilesystemError(f"no indirect block for block {block_num}")
            return self._read_block_table(table_sector)[block_num % _ADDRS_PER_BLOCK]

        first, second = divmod(block_num - _INDIRECT_BLOCKS, _ADDRS_PER_BLOCK)
        if first >= _ADDRS_PER_BLOCK:
            raise FilesystemError(f"block {block_num} beyond the largest file")
        double_sector = inode.addr[7]
        if double_sector == 0:
            raise FilesystemError("no double-indirect block")
        table_sector = self._read_block_table(double_sector)[first]
        if table_sector == 0:
            raise FilesystemError(f"no indirect block for block {block_num}")
        return self._read_block_table(table_sector)[second]

    def read_block(self, inumber, block_num):
        """Return the valid bytes of file block ``block_num`` of inode ``inumber``."""
        inode = self.inode(inumber)
        sector = self.block_address(inode, block_num)
        data = self._read_full_sector(sector)
        valid = min(SECTOR_SIZE, inode.size() - block_num * SECTOR_SIZE)
        if valid < 0:
            raise FilesystemError(f"block {block_num} lies past the end of the file")
        return data[:valid]

    def _directory_inode(self, inumber):
        inode = self.inode(inumber)
        if not inode.is_allocated() or not inode.is_directory():
            raise FilesystemError(f"inode {inumber} is not an allocated directory")
        return inode

    def _iter_entries(self, inumber, inode):
        num_blocks = -(-inode.size() // SECTOR_SIZE)
        for block_num in range(num_blocks):
            data = self.read_block(inumber, block_num)
            usable = len(data) - len(data) % DIRENT_SIZE
            for start in range(0, usable, DIRENT_SIZE):
                yield DirEntry.from_bytes(data[start:start + DIRENT_SIZE])

    def find_name(self, name, dirinumber):
        """Find the entry called ``name`` in directory ``dirinumber``."""
        inode = self._directory_inode(dirinumber)
        wanted = name.split("\0", 1)[0][:DIRENT_NAME_LEN]
        for entry in self._iter_entries(dirinumber, inode):
            if entry.name == wanted:
                return entry
        raise FilesystemError(f"{name!r} not found in directory {dirinumber}")

    def lookup(self, pathname):
        """Return the inode number of an absolute ``pathname``."""
        if not pathname or not pathname.startswith("/"):
            raise FilesystemError(f"not an absolute path: {pathname!r}")
        inumber = ROOT_INUMBER
        for part in pathname[:_MAX_PATH - 1].split("/"):
            if part:
                inumber = self.find_name(part, inumber).inumber
        return inumber

    def dir_entries(self, inumber, limit=10000):
        """Return up to ``limit`` entries of directory ``inumber``."""
        inode = self._directory_inode(inumber)
        if limit < 1:
            raise FilesystemError("limit must be at least 1")
        if inode.size() % DIRENT_SIZE:
            raise FilesystemError(f"directory {inumber} has a malformed size")
        return list(itertools.islice(self._iter_entries(inumber, inode), limit))