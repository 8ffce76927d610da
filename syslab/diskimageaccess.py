"""Command-line inspection of a V6 disk image: superblock, inode and path checksums."""

from __future__ import annotations

import getopt
import sys

from syslab.checksum import (
    checksum_by_inumber,
    checksum_by_pathname,
    checksum_to_string,
    checksums_equal,
)
from syslab.diskimg import DiskImage
from syslab.layout import ROOT_INUMBER
from syslab.v6fs import FilesystemError, UnixFilesystem

_MAX_PATH = 1024
_MAX_ENTRIES = 10000


def dump_inode_checksums(fs, out, err):
    """Write the checksum of every allocated inode to ``out``."""
    for inumber in range(1, fs.num_inodes):
        try:
            inode = fs.inode(inumber)
        except FilesystemError:
            err.write(f"Can't read inode {inumber} \n")
            return
        if not inode.is_allocated():
            continue
        try:
            digest = checksum_by_inumber(fs, inumber)
        except FilesystemError:
            err.write(f"Inode {inumber} can't compute chksum\n")
            continue
        out.write(
            f"Inode {inumber} mode 0x{inode.mode:x} size {inode.size()} "
            f"checksum {checksum_to_string(digest)}\n"
        )


def _dump_path_and_children(fs, pathname, inumber, out, err):
    try:
        inode = fs.inode(inumber)
    except FilesystemError:
        err.write(f"Can't read inode {inumber} \n")
        return
    try:
        if not inode.is_allocated():
            raise FilesystemError(f"inode {inumber} is not allocated")
        by_inumber = checksum_by_inumber(fs, inumber)
        by_path = checksum_by_pathname(fs, pathname)
    except FilesystemError:
        err.write(f"Can't checksum inode {inumber} path {pathname}\n")
        return
    if not checksums_equal(by_inumber, by_path):
        err.write(f"Pathname checksum of {pathname} differs from inode {inumber}\n")
        return

    out.write(
        f"Path {pathname} {inumber} mode 0x{inode.mode:x} size {inode.size()} "
        f"checksum {checksum_to_string(by_path)}\n"
    )

    if pathname == "/":
        pathname = ""

    if not inode.is_directory():
        return
    if len(pathname) > _MAX_PATH - 16:
        err.write(f"Too deep of directories {pathname}\n")
    try:
        entries = fs.dir_entries(inumber, _MAX_ENTRIES)
    except FilesystemError:
        return
    for entry in entries:
        if entry.name in (".", ".."):
            continue
        _dump_path_and_children(fs, f"{pathname}/{entry.name}", entry.inumber, out, err)


def dump_pathname_checksums(fs, out, err):
    """Write the checksum of every file reachable from the root to ``out``."""
    _dump_path_and_children(fs, "/", ROOT_INUMBER, out, err)


def print_directory(fs, pathname, out, err):
    """Write every entry of the directory at ``pathname`` to ``out``."""
    try:
        inumber = fs.lookup(pathname)
    except FilesystemError:
        err.write(f"Can't find {pathname}\n")
        return
    try:
        entries = fs.dir_entries(inumber, _MAX_ENTRIES)
    except FilesystemError:
        err.write(f"Can't read entries from {pathname}\n")
        return
    for entry in entries:
        out.write(f"Direntry {pathname} Name {entry.name} Inumber {entry.inumber}\n")


def _usage(progname, err):
    err.write(f"Usage: {progname} <options> diskimagePath\n")
    err.write("where <options> can be:\n")
    err.write("-q     don't print extra info\n")
    err.write("-i     print all inode checksums\n")
    err.write("-p     print all pathname checksums\n")
    return 1


def main(argv=None):
    """Run the command; return the process exit status."""
    out, err = sys.stdout, sys.stderr
    args = sys.argv[1:] if argv is None else list(argv)
    progname = "diskimageaccess"
    try:
        options, positional = getopt.gnu_getopt(args, "iqp")
    except getopt.GetoptError:
        return _usage(progname, err)
    if len(positional) != 1:
        return _usage(progname, err)

    flags = {flag for flag, _ in options}
    quiet = "-q" in flags
    diskpath = positional[0]
    label = args[0]

    try:
        disk = DiskImage(diskpath, read_only=True)
    except OSError:
        err.write(f"Can't open diskimagePath {diskpath}\n")
        return 1

    with disk:
        try:
            fs = UnixFilesystem(disk)
        except FilesystemError as exc:
            err.write(f"{exc}\n")
            err.write("Failed to initialize unix filesystem\n")
            return 1

        if not quiet:
            try:
                disksize = disk.size()
            except OSError:
                err.write(f"Error getting the size of {label}\n")
                return 1
            sb = fs.superblock
            out.write(f"Disk {label} is {disksize} bytes ({disksize // 1024} KB)\n")
            out.write(f"Superblock s_isize {sb.isize}\n")
            out.write(f"Superblock s_fsize {sb.fsize}\n")
            out.write(f"Superblock s_nfree {sb.nfree}\n")
            out.write(f"Superblock s_ninode {sb.ninode}\n")

        if "-i" in flags:
            dump_inode_checksums(fs, out, err)
        if "-p" in flags:
            dump_pathname_checksums(fs, out, err)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())