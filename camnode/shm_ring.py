"""Shared-memory ring buffer for the multi-process data plane."""

from __future__ import annotations

import mmap
import os
import struct
import tempfile
from typing import Optional

# head, tail, slot_size, slot_count
_HEADER = struct.Struct("=QQQQ")
SHM_HEADER_SIZE = _HEADER.size
_HEAD_OFFSET = 0
_TAIL_OFFSET = 8
_WORD = struct.Struct("=Q")


def _anonymous_fd() -> int:
    if hasattr(os, "memfd_create"):
        return os.memfd_create("cam_shm", os.MFD_CLOEXEC)
    fd, name = tempfile.mkstemp(prefix="cam_shm")
    os.unlink(name)
    return fd


class ShmRingBuf:
    """Ring buffer whose indices and slots live in a shared mapping.

    The mapping starts with a header holding head, tail, slot size and
    slot count, so every process mapping the same file descriptor sees
    the same ring. As with the in-memory ring, a push onto a full ring
    drops the oldest entry. The object owns its file descriptor and
    closes it on close().
    """

    def __init__(self, fd: int, slot_size: int, slot_count: int) -> None:
        """Map an existing shared-memory file descriptor, taking ownership of it."""
        if slot_size <= 0 or slot_count <= 0:
            raise ValueError("slot_size and slot_count must be positive")
        self._size = SHM_HEADER_SIZE + slot_size * slot_count
        self._map = mmap.mmap(
            fd, self._size, mmap.MAP_SHARED, mmap.PROT_READ | mmap.PROT_WRITE
        )
        self._fd = fd
        self._slot_size = slot_size
        self._slot_count = slot_count

    @classmethod
    def create(cls, slot_size: int, slot_count: int) -> ShmRingBuf:
        """Allocate a new anonymous shared region and initialise an empty ring."""
        if slot_size <= 0 or slot_count <= 0:
            raise ValueError("slot_size and slot_count must be positive")
        fd = _anonymous_fd()
        try:
            os.ftruncate(fd, SHM_HEADER_SIZE + slot_size * slot_count)
            ring = cls(fd, slot_size, slot_count)
        except BaseException:
            os.close(fd)
            raise
        _HEADER.pack_into(ring._map, 0, 0, 0, slot_size, slot_count)
        return ring

    @classmethod
    def from_fd(cls, fd: int, slot_size: int, slot_count: int) -> ShmRingBuf:
        """Map a ring created elsewhere; the new object owns fd."""
        return cls(fd, slot_size, slot_count)

    def fd(self) -> int:
        return self._fd

    @property
    def slot_size(self) -> int:
        return self._slot_size

    @property
    def slot_count(self) -> int:
        return self._slot_count

    def _load(self, offset: int) -> int:
        return _WORD.unpack_from(self._map, offset)[0]

    def _store(self, offset: int, value: int) -> None:
        _WORD.pack_into(self._map, offset, value)

    def push(self, data: bytes) -> bool:
        """Store data (truncated to the slot size) in the next slot."""
        chunk = bytes(data[: self._slot_size])
        head = self._load(_HEAD_OFFSET)
        next_head = (head + 1) % self._slot_count
        tail = self._load(_TAIL_OFFSET)
        if next_head == tail:
            self._store(_TAIL_OFFSET, (tail + 1) % self._slot_count)
        offset = SHM_HEADER_SIZE + head * self._slot_size
        self._map[offset : offset + self._slot_size] = chunk.ljust(self._slot_size, b"\0")
        self._store(_HEAD_OFFSET, next_head)
        return True

    def pop(self, max_len: Optional[int] = None) -> Optional[bytes]:
        """Remove and return the oldest slot (up to max_len bytes), or None if empty."""
        tail = self._load(_TAIL_OFFSET)
        head = self._load(_HEAD_OFFSET)
        if tail == head:
            return None
        length = self._slot_size if max_len is None else min(max_len, self._slot_size)
        if length < 0:
            raise ValueError("max_len must not be negative")
        offset = SHM_HEADER_SIZE + tail * self._slot_size
        out = bytes(self._map[offset : offset + length])
        self._store(_TAIL_OFFSET, (tail + 1) % self._slot_count)
        return out

    def is_empty(self) -> bool:
        return self._load(_HEAD_OFFSET) == self._load(_TAIL_OFFSET)

    def close(self) -> None:
        """Unmap the region and close the file descriptor."""
        if not self._map.closed:
            self._map.close()
        if self._fd >= 0:
            os.close(self._fd)
            self._fd = -1

    def __enter__(self) -> ShmRingBuf:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()