"""SHA-1 checksums of files stored in a V6 filesystem."""

from __future__ import annotations

import hashlib

from syslab.diskimg import SECTOR_SIZE
from syslab.v6fs import FilesystemError

CHECKSUM_SIZE = 20
CHECKSUM_STRING_SIZE = 2 * CHECKSUM_SIZE + 1


def checksum_by_inumber(fs, inumber):
    """Return the SHA-1 digest of the contents of inode ``inumber``."""
    inode = fs.inode(inumber)
    if not inode.is_allocated():
        raise FilesystemError(f"inode {inumber} is not allocated")
    digest = hashlib.sha1()
    for offset in range(0, inode.size(), SECTOR_SIZE):
        digest.update(fs.read_block(inumber, offset // SECTOR_SIZE))
    return digest.digest()


def checksum_by_pathname(fs, pathname):
    """Return the SHA-1 digest of the file at the absolute ``pathname``."""
    return checksum_by_inumber(fs, fs.lookup(pathname))


def checksum_to_string(digest):
    """Render a checksum as lower-case hexadecimal."""
    return bytes(digest[:CHECKSUM_SIZE]).hex()


def checksums_equal(first, second):
    """Return True when two checksums agree."""
    return bytes(first[:CHECKSUM_SIZE]) == bytes(second[:CHECKSUM_SIZE])