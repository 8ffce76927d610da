import struct

import pytest

from syslab.diskimg import SECTOR_SIZE, DiskImage
from syslab.layout import IALLOC, IFDIR, ILARG, DirEntry
from syslab.v6fs import FilesystemError, UnixFilesystem

LONG_NAME = "abcdefghijklmn"
DOUBLE_SIZE = 1793 * SECTOR_SIZE


def _inode(mode, size, addr):
    addr = tuple(addr) + (0,) * (8 - len(addr))
    return struct.pack("<HBBBBH8H2H2H", mode, 1, 0, 0, size >> 16, size & 0xFFFF, *addr, 0, 0, 0, 0)


def _dir_block(entries):
    return b"".join(DirEntry(num, name).to_bytes() for num, name in entries)


def _table(values):
    return struct.pack(f"<{len(values)}H", *values)


def _sector(data=b""):
    return data + bytes(SECTOR_SIZE - len(data))


def _build_image(magic=0o407):
    sectors = [_sector() for _ in range(24)]
    sectors[0] = _sector(struct.pack("<H", magic))
    superblock = struct.pack("<3H100HH100H4B2H48H", 2, 24, 0, *([0] * 100), 0, *([0] * 100), 0, 0, 0, 0, 0, 0, *([0] * 48))
    sectors[1] = superblock

    root = [(1, "."), (1, ".."), (2, "hello.txt"), (3, "sub"), (2, LONG_NAME)]
    sub = [(3, "."), (1, ".."), (4, "big")]
    inodes = [
        _inode(IALLOC | IFDIR | 0o755, len(root) * 16, [10]),
        _inode(IALLOC | 0o644, 600, [11, 12]),
        _inode(IALLOC | IFDIR | 0o755, len(sub) * 16, [13]),
        _inode(IALLOC | ILARG | 0o644, 3 * SECTOR_SIZE, [14]),
        _inode(0, 0, []),
        _inode(IALLOC | ILARG | 0o644, DOUBLE_SIZE, [0, 0, 0, 0, 0, 0, 0, 20]),
    ]
    inode_area = b"".join(inodes)
    inode_area += bytes(2 * SECTOR_SIZE - len(inode_area))
    sectors[2] = inode_area[:SECTOR_SIZE]
    sectors[3] = inode_area[SECTOR_SIZE:]

    sectors[10] = _sector(_dir_block(root))
    sectors[11] = b"A" * SECTOR_SIZE
    sectors[12] = _sector(b"B" * 88)
    sectors[13] = _sector(_dir_block(sub))
    sectors[14] = _sector(_table([15, 16, 17]))
    sectors[15] = b"x" * SECTOR_SIZE
    sectors[16] = b"y" * SECTOR_SIZE
    sectors[17] = b"z" * SECTOR_SIZE
    sectors[20] = _sector(_table([21]))
    sectors[21] = _sector(_table([22]))
    sectors[22] = b"d" * SECTOR_SIZE
    return b"".join(sectors)


@pytest.fixture
def fs(tmp_path):
    path = tmp_path / "v6.img"
    path.write_bytes(_build_image())
    with DiskImage(path) as disk:
        yield UnixFilesystem(disk)


def test_superblock_loaded(fs):
    assert fs.superblock.isize == 2
    assert fs.superblock.fsize == 24
    assert fs.num_inodes == 32


def test_bad_magic(tmp_path):
    path = tmp_path / "bad.img"
    path.write_bytes(_build_image(magic=0o410))
    with DiskImage(path) as disk:
        with pytest.raises(FilesystemError, match="Bad magic"):
            UnixFilesystem(disk)


def test_truncated_image(tmp_path):
    path = tmp_path / "short.img"
    path.write_bytes(b"\x07\x01")
    with DiskImage(path) as disk:
        with pytest.raises(FilesystemError, match="bootblock"):
            UnixFilesystem(disk)


def test_missing_superblock(tmp_path):
    path = tmp_path / "nosb.img"
    path.write_bytes(_build_image()[:SECTOR_SIZE + 10])
    with DiskImage(path) as disk:
        with pytest.raises(FilesystemError, match="superblock"):
            UnixFilesystem(disk)


@pytest.mark.parametrize("inumber", [0, -1, 32, 100])
def test_inode_out_of_range(fs, inumber):
    with pytest.raises(FilesystemError):
        fs.inode(inumber)


def test_inode_contents(fs):
    root = fs.inode(1)
    assert root.is_directory() and root.is_allocated()
    assert fs.inode(2).size() == 600
    assert fs.inode(2).addr[:2] == (11, 12)
    assert not fs.inode(5).is_allocated()
    assert not fs.inode(31).is_allocated()


def test_read_block_full_and_partial(fs):
    assert fs.read_block(2, 0) == b"A" * SECTOR_SIZE
    assert fs.read_block(2, 1) == b"B" * 88


def test_read_block_past_end(fs):
    with pytest.raises(FilesystemError):
        fs.read_block(2, 3)


def test_read_block_unallocated(fs):
    with pytest.raises(FilesystemError):
        fs.read_block(5, 0)


def test_small_file_block_limit(fs):
    with pytest.raises(FilesystemError):
        fs.block_address(fs.inode(2), 8)
    with pytest.raises(FilesystemError):
        fs.block_address(fs.inode(2), -1)


def test_large_file_indirect(fs):
    big = fs.inode(4)
    assert [fs.block_address(big, n) for n in range(3)] == [15, 16, 17]
    assert fs.read_block(4, 2) == b"z" * SECTOR_SIZE


def test_large_file_missing_indirect(fs):
    with pytest.raises(FilesystemError):
        fs.block_address(fs.inode(4), 256)


def test_double_indirect(fs):
    huge = fs.inode(6)
    assert huge.size() == DOUBLE_SIZE
    assert fs.block_address(huge, 7 * 256) == 22
    assert fs.read_block(6, 7 * 256) == b"d" * SECTOR_SIZE


def test_double_indirect_out_of_range(fs):
    huge = fs.inode(6)
    with pytest.raises(FilesystemError):
        fs.block_address(huge, 7 * 256 + 256 * 256)
    with pytest.raises(FilesystemError):
        fs.block_address(huge, 7 * 256 + 256)


def test_find_name(fs):
    assert fs.find_name("hello.txt", 1) == DirEntry(2, "hello.txt")
    assert fs.find_name("big", 3).inumber == 4


def test_find_name_compares_first_fourteen(fs):
    assert fs.find_name(LONG_NAME + "XYZ", 1).inumber == 2
    with pytest.raises(FilesystemError):
        fs.find_name(LONG_NAME[:-1], 1)


def test_find_name_missing(fs):
    with pytest.raises(FilesystemError):
        fs.find_name("nothing", 1)


def test_find_name_in_file_fails(fs):
    with pytest.raises(FilesystemError):
        fs.find_name("x", 2)


@pytest.mark.parametrize(
    "path, expected",
    [("/", 1), ("/hello.txt", 2), ("/sub", 3), ("/sub/big", 4), ("//sub//big/", 4), ("/sub/..", 1)],
)
def test_lookup(fs, path, expected):
    assert fs.lookup(path) == expected


@pytest.mark.parametrize("path", ["", "hello.txt", "/missing", "/hello.txt/x", "/sub/nope"])
def test_lookup_errors(fs, path):
    with pytest.raises(FilesystemError):
        fs.lookup(path)


def test_dir_entries(fs):
    names = [entry.name for entry in fs.dir_entries(1)]
    assert names == [".", "..", "hello.txt", "sub", LONG_NAME]
    assert fs.dir_entries(3) == [DirEntry(3, "."), DirEntry(1, ".."), DirEntry(4, "big")]


def test_dir_entries_limit(fs):
    assert len(fs.dir_entries(1, 2)) == 2
    with pytest.raises(FilesystemError):
        fs.dir_entries(1, 0)


def test_dir_entries_not_directory(fs):
    with pytest.raises(FilesystemError):
        fs.dir_entries(2)
    with pytest.raises(FilesystemError):
        fs.dir_entries(5)