"""On-disk structures of the Version 6 Unix filesystem."""

from __future__ import annotations

import struct
from dataclasses import dataclass

BOOTBLOCK_SECTOR = 0
SUPERBLOCK_SECTOR = 1
INODE_START_SECTOR = 2
ROOT_INUMBER = 1
BOOTBLOCK_MAGIC_NUM = 0o407

IALLOC = 0o100000
IFMT = 0o60000
IFDIR = 0o40000
IFCHR = 0o20000
IFBLK = 0o60000
ILARG = 0o10000
ISUID = 0o4000
ISGID = 0o2000
ISVTX = 0o1000
IREAD = 0o400
IWRITE = 0o200
IEXEC = 0o100

_SUPERBLOCK = struct.Struct("<3H100HH100H4B2H48H")
_INODE = struct.Struct("<HBBBBH8H2H2H")
_DIRENT = struct.Struct("<H14s")

SUPERBLOCK_SIZE = _SUPERBLOCK.size
INODE_SIZE = _INODE.size
DIRENT_SIZE = _DIRENT.size
DIRENT_NAME_LEN = 14
INODES_PER_BLOCK = 512 // INODE_SIZE


def _check_length(data, expected, what):
    if len(data) != expected:
        raise ValueError(f"{what} needs {expected} bytes, got {len(data)}")


@dataclass(frozen=True)
class Superblock:
    """The filesystem superblock."""

    isize: int
    fsize: int
    nfree: int
    free: tuple
    ninode: int
    inodes: tuple
    flock: int
    ilock: int
    fmod: int
    ronly: int
    time: tuple

    @classmethod
    def from_bytes(cls, data):
        _check_length(data, SUPERBLOCK_SIZE, "superblock")
        values = _SUPERBLOCK.unpack(bytes(data))
        return cls(
            isize=values[0],
            fsize=values[1],
            nfree=values[2],
            free=tuple(values[3:103]),
            ninode=values[103],
            inodes=tuple(values[104:204]),
            flock=values[204],
            ilock=values[205],
            fmod=values[206],
            ronly=values[207],
            time=tuple(values[208:210]),
        )


@dataclass(frozen=True)
class Inode:
    """An on-disk inode."""

    mode: int
    nlink: int
    uid: int
    gid: int
    size0: int
    size1: int
    addr: tuple
    atime: tuple
    mtime: tuple

    @classmethod
    def from_bytes(cls, data):
        _check_length(data, INODE_SIZE, "inode")
        values = _INODE.unpack(bytes(data))
        return cls(
            mode=values[0],
            nlink=values[1],
            uid=values[2],
            gid=values[3],
            size0=values[4],
            size1=values[5],
            addr=tuple(values[6:14]),
            atime=tuple(values[14:16]),
            mtime=tuple(values[16:18]),
        )

    def size(self):
        """File size in bytes, from its three-byte encoding."""
        return (self.size0 << 16) | self.size1

    def is_allocated(self):
        return bool(self.mode & IALLOC)

    def is_directory(self):
        return (self.mode & IFMT) == IFDIR

    def is_large(self):
        return bool(self.mode & ILARG)


@dataclass(frozen=True)
class DirEntry:
    """A directory entry: an inode number and a name of up to 14 bytes."""

    inumber: int
    name: str

    @classmethod
    def from_bytes(cls, data):
        _check_length(data, DIRENT_SIZE, "directory entry")
        inumber, raw = _DIRENT.unpack(bytes(data))
        return cls(inumber, raw.split(b"\0", 1)[0].decode("latin-1"))

    def to_bytes(self):
        raw = self.name.encode("latin-1")
        if len(raw) > DIRENT_NAME_LEN:
            raise ValueError(f"name longer than {DIRENT_NAME_LEN} bytes: {self.name!r}")
        try:
            return _DIRENT.pack(self.inumber, raw)
        except struct.error as exc:
            raise ValueError(f"invalid inode number {self.inumber}") from exc