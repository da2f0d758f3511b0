"""Single-producer single-consumer ring buffer of fixed-size slots."""

from __future__ import annotations

from typing import Optional


class SpscRingBuf:
    """Ring of ``slot_count`` slots of ``slot_size`` bytes.

    One slot is kept free to tell full from empty, so at most
    ``slot_count - 1`` entries are held. When full, a push overwrites
    the oldest entry. Each slot is zero-padded to ``slot_size``.
    """

    def __init__(self, slot_size: int, slot_count: int) -> None:
        if slot_size <= 0 or slot_count <= 0:
            raise ValueError("slot_size and slot_count must be positive")
        self._slot_size = slot_size
        self._slot_count = slot_count
        self._buf = bytearray(slot_size * slot_count)
        self._head = 0
        self._tail = 0

    @property
    def slot_size(self) -> int:
        return self._slot_size

    @property
    def slot_count(self) -> int:
        return self._slot_count

    def __len__(self) -> int:
        head, tail = self._head, self._tail
        if head >= tail:
            return head - tail
        return self._slot_count - (tail - head)

    def is_empty(self) -> bool:
        return self._head == self._tail

    def is_full(self) -> bool:
        return (self._head + 1) % self._slot_count == self._tail

    def push(self, data: bytes) -> bool:
        """Store data (truncated to the slot size) in the next slot."""
        chunk = bytes(data[: self._slot_size])
        head = self._head
        next_head = (head + 1) % self._slot_count
        if next_head == self._tail:
            self._tail = (self._tail + 1) % self._slot_count
        offset = head * self._slot_size
        self._buf[offset : offset + self._slot_size] = chunk.ljust(self._slot_size, b"\0")
        self._head = next_head
        return True

    def _read(self, max_len: Optional[int]) -> Optional[bytes]:
        if self._tail == self._head:
            return None
        length = self._slot_size if max_len is None else min(max_len, self._slot_size)
        if length < 0:
            raise ValueError("max_len must not be negative")
        offset = self._tail * self._slot_size
        return bytes(self._buf[offset : offset + length])

    def pop(self, max_len: Optional[int] = None) -> Optional[bytes]:
        """Remove and return the oldest slot (up to max_len bytes), or None if empty."""
        out = self._read(max_len)
        if out is not None:
            self._tail = (self._tail + 1) % self._slot_count
        return out

    def peek(self, max_len: Optional[int] = None) -> Optional[bytes]:
        """Return the oldest slot without consuming it, or None if empty."""
        return self._read(max_len)

    def clear(self) -> None:
        """Discard all stored entries."""
        self._tail = self._head