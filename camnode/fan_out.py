"""One producer writing to several independent ring buffers."""

from __future__ import annotations

import threading
from typing import Optional

from .ring_buffer import SpscRingBuf

MAX_FANOUT = 8


class RefCountedSlot:
    """Thread-safe reference count for a shared frame buffer."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._refcount = 0
        self.data_len = 0

    def acquire(self) -> int:
        """Add a reference; return the new count."""
        with self._lock:
            self._refcount += 1
            return self._refcount

    def release(self) -> int:
        """Drop a reference; return the new count."""
        with self._lock:
            if self._refcount == 0:
                raise ValueError("release without a matching acquire")
            self._refcount -= 1
            return self._refcount

    def count(self) -> int:
        with self._lock:
            return self._refcount

    def reset(self) -> None:
        """Clear the count and the stored data length."""
        with self._lock:
            self._refcount = 0
            self.data_len = 0


class FanOutPublisher:
    """Copies each published message into up to MAX_FANOUT consumer rings."""

    def __init__(self) -> None:
        self._rings: list[Optional[SpscRingBuf]] = [None] * MAX_FANOUT

    def add_consumer(self, ring: SpscRingBuf) -> Optional[int]:
        """Attach a ring; return its consumer index, or None when at capacity."""
        for index, slot in enumerate(self._rings):
            if slot is None:
                self._rings[index] = ring
                return index
        return None

    def remove_consumer(self, index: int) -> bool:
        """Detach the consumer at index; return whether one was there."""
        if not 0 <= index < MAX_FANOUT or self._rings[index] is None:
            return False
        self._rings[index] = None
        return True

    def active_count(self) -> int:
        return sum(ring is not None for ring in self._rings)

    def publish(self, data: bytes) -> int:
        """Push data to every active consumer; return how many received it."""
        count = 0
        for ring in self._rings:
            if ring is not None:
                ring.push(data)
                count += 1
        return count