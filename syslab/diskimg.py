"""Sector-level access to a disk image file."""

from __future__ import annotations

import os

SECTOR_SIZE = 512


class DiskImage:
    """A disk image opened for reading (and optionally writing) whole sectors."""

    def __init__(self, path, read_only=True):
        self.path = os.fspath(path)
        self.read_only = read_only
        self._file = open(self.path, "rb" if read_only else "r+b")

    def size(self):
        """Return the size of the image in bytes."""
        return self._file.seek(0, os.SEEK_END)

    def _seek_sector(self, sector):
        if sector < 0:
            raise ValueError(f"negative sector number {sector}")
        self._file.seek(sector * SECTOR_SIZE)

    def read_sector(self, sector):
        """Read one sector; the result is shorter near the end of the image."""
        self._seek_sector(sector)
        return self._file.read(SECTOR_SIZE)

    def write_sector(self, sector, data):
        """Write one full sector and return the number of bytes written."""
        if len(data) != SECTOR_SIZE:
            raise ValueError(f"sector data must be {SECTOR_SIZE} bytes, got {len(data)}")
        self._seek_sector(sector)
        written = self._file.write(bytes(data))
        self._file.flush()
        return written

    @property
    def closed(self):
        return self._file.closed

    def close(self):
        self._file.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()