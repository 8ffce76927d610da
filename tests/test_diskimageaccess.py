import hashlib
import io
import struct

import pytest

from syslab.diskimageaccess import (
    dump_inode_checksums,
    dump_pathname_checksums,
    main,
    print_directory,
)
from syslab.diskimg import DiskImage
from syslab.layout import IALLOC, IFDIR, DirEntry
from syslab.v6fs import UnixFilesystem

FILE_CONTENT = bytes((i * 7) % 251 for i in range(600))
SMALL_CONTENT = b"abc"
DIR_MODE = IALLOC | IFDIR | 0o755
FILE_MODE = IALLOC | 0o644
ROOT = [(".", 1), ("..", 1), ("hello.txt", 2), ("sub", 3)]
SUB = [(".", 3), ("..", 1), ("a", 4)]


def _inode(mode, size, addrs):
    addrs = list(addrs) + [0] * (8 - len(addrs))
    return struct.pack("<HBBBBH8H2H2H", mode, 1, 0, 0, size >> 16, size & 0xFFFF,
                       *addrs, 0, 0, 0, 0)


def _dir(entries):
    return b"".join(DirEntry(n, name).to_bytes() for name, n in entries)


def _build_image(path):
    sectors = [bytearray(512) for _ in range(8)]
    struct.pack_into("<H", sectors[0], 0, 0o407)
    struct.pack_into("<HHH", sectors[1], 0, 1, 8, 0)
    root = _dir(ROOT)
    sub = _dir(SUB)
    inodes = (
        _inode(DIR_MODE, len(root), [3])
        + _inode(FILE_MODE, len(FILE_CONTENT), [4, 5])
        + _inode(DIR_MODE, len(sub), [6])
        + _inode(FILE_MODE, len(SMALL_CONTENT), [7])
    )
    sectors[2][: len(inodes)] = inodes
    sectors[3][: len(root)] = root
    sectors[4][:] = FILE_CONTENT[:512]
    sectors[5][: len(FILE_CONTENT) - 512] = FILE_CONTENT[512:]
    sectors[6][: len(sub)] = sub
    sectors[7][: len(SMALL_CONTENT)] = SMALL_CONTENT
    path.write_bytes(b"".join(sectors))


def _sha(data):
    return hashlib.sha1(data).hexdigest()


def _expected_lines(prefix):
    root, sub = _dir(ROOT), _dir(SUB)
    return [
        f"{prefix[0]} 1 mode 0x{DIR_MODE:x} size {len(root)} checksum {_sha(root)}",
        f"{prefix[1]} 2 mode 0x{FILE_MODE:x} size 600 checksum {_sha(FILE_CONTENT)}",
        f"{prefix[2]} 3 mode 0x{DIR_MODE:x} size {len(sub)} checksum {_sha(sub)}",
        f"{prefix[3]} 4 mode 0x{FILE_MODE:x} size 3 checksum {_sha(SMALL_CONTENT)}",
    ]


@pytest.fixture
def image(tmp_path):
    path = tmp_path / "disk.img"
    _build_image(path)
    return path


@pytest.fixture
def fs(image):
    with DiskImage(image) as disk:
        yield UnixFilesystem(disk)


def test_dump_inode_checksums(fs):
    out, err = io.StringIO(), io.StringIO()
    dump_inode_checksums(fs, out, err)
    assert out.getvalue().splitlines() == _expected_lines(["Inode"] * 4)
    assert err.getvalue() == ""


def test_dump_pathname_checksums(fs):
    out, err = io.StringIO(), io.StringIO()
    dump_pathname_checksums(fs, out, err)
    prefixes = ["Path /", "Path /hello.txt", "Path /sub", "Path /sub/a"]
    assert out.getvalue().splitlines() == _expected_lines(prefixes)
    assert err.getvalue() == ""


def test_print_directory(fs):
    out, err = io.StringIO(), io.StringIO()
    print_directory(fs, "/sub", out, err)
    assert out.getvalue().splitlines() == [
        "Direntry /sub Name . Inumber 3",
        "Direntry /sub Name .. Inumber 1",
        "Direntry /sub Name a Inumber 4",
    ]


def test_print_directory_missing(fs):
    out, err = io.StringIO(), io.StringIO()
    print_directory(fs, "/missing", out, err)
    assert out.getvalue() == ""
    assert err.getvalue() == "Can't find /missing\n"


def test_print_directory_of_file(fs):
    out, err = io.StringIO(), io.StringIO()
    print_directory(fs, "/hello.txt", out, err)
    assert err.getvalue() == "Can't read entries from /hello.txt\n"


def test_main_quiet_inode_dump(image, capsys):
    assert main(["-q", "-i", str(image)]) == 0
    captured = capsys.readouterr()
    assert captured.out.splitlines() == _expected_lines(["Inode"] * 4)


def test_main_prints_superblock(image, capsys):
    assert main([str(image)]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines == [
        f"Disk {image} is 4096 bytes (4 KB)",
        "Superblock s_isize 1",
        "Superblock s_fsize 8",
        "Superblock s_nfree 0",
        "Superblock s_ninode 0",
    ]


def test_main_path_dump(image, capsys):
    assert main(["-qp", str(image)]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert [line.split()[1] for line in lines] == ["/", "/hello.txt", "/sub", "/sub/a"]


def test_main_usage_without_image(capsys):
    assert main([]) == 1
    assert "Usage:" in capsys.readouterr().err


def test_main_unknown_option(image, capsys):
    assert main(["-x", str(image)]) == 1
    assert "-p     print all pathname checksums" in capsys.readouterr().err


def test_main_missing_file(tmp_path, capsys):
    missing = tmp_path / "none.img"
    assert main([str(missing)]) == 1
    assert capsys.readouterr().err == f"Can't open diskimagePath {missing}\n"


def test_main_bad_magic(tmp_path, capsys):
    bad = tmp_path / "zero.img"
    bad.write_bytes(bytes(2048))
    assert main([str(bad)]) == 1
    assert "Failed to initialize unix filesystem" in capsys.readouterr().err