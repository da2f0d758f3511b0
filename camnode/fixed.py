"""Fixed-capacity string and vector containers."""

from __future__ import annotations

from typing import Generic, Iterator, TypeVar

T = TypeVar("T")


def _valid_prefix(data: bytes) -> bytes:
    """Longest prefix of ``data`` that is valid UTF-8."""
    try:
        data.decode("utf-8")
    except UnicodeDecodeError as exc:
        return data[: exc.start]
    return data


class FixedString:
    """UTF-8 string whose encoded length never exceeds a byte capacity."""

    __slots__ = ("_capacity", "_data")

    def __init__(self, capacity: int) -> None:
        if capacity < 0:
            raise ValueError("capacity must not be negative")
        self._capacity = capacity
        self._data = b""

    @classmethod
    def from_str(cls, capacity: int, text: str) -> FixedString:
        """Build from text, truncated to capacity on a character boundary."""
        fs = cls(capacity)
        fs._data = _valid_prefix(text.encode("utf-8")[:capacity])
        return fs

    @classmethod
    def from_bytes(cls, capacity: int, data: bytes) -> FixedString:
        """Build from UTF-8 bytes; raises UnicodeDecodeError if they are invalid."""
        raw = bytes(data)
        raw.decode("utf-8")
        fs = cls(capacity)
        fs._data = _valid_prefix(raw[:capacity])
        return fs

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return len(self._data)

    def __str__(self) -> str:
        return self._data.decode("utf-8")

    def __bytes__(self) -> bytes:
        return self._data

    def __repr__(self) -> str:
        return f'"{self}"'

    def __eq__(self, other: object) -> bool:
        if isinstance(other, FixedString):
            return self._data == other._data
        if isinstance(other, str):
            return str(self) == other
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def push_str(self, text: str) -> bool:
        """Append text if it fits whole; return whether it was appended."""
        encoded = text.encode("utf-8")
        if len(encoded) > self._capacity - len(self._data):
            return False
        self._data += encoded
        return True

    def write(self, text: str) -> int:
        """Append as much of text as fits; return the number of bytes written."""
        encoded = text.encode("utf-8")
        if self.push_str(text):
            return len(encoded)
        remaining = self._capacity - len(self._data)
        part = _valid_prefix(encoded[:remaining])
        self._data += part
        return len(part)

    def clear(self) -> None:
        self._data = b""

    def truncate(self, max_len: int) -> None:
        """Shorten to at most max_len bytes, backing off to a character boundary."""
        if max_len < 0:
            raise ValueError("max_len must not be negative")
        if max_len >= len(self._data):
            return
        self._data = _valid_prefix(self._data[:max_len])


class FixedVec(Generic[T]):
    """List with a fixed maximum number of elements."""

    __slots__ = ("_capacity", "_items")

    def __init__(self, capacity: int) -> None:
        if capacity < 0:
            raise ValueError("capacity must not be negative")
        self._capacity = capacity
        self._items: list[T] = []

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __getitem__(self, index: int) -> T:
        return self._items[index]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, FixedVec):
            return self._items == other._items
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"FixedVec({self._items!r})"

    def is_full(self) -> bool:
        return len(self._items) >= self._capacity

    def push(self, value: T) -> None:
        """Append a value; raises OverflowError when full."""
        if self.is_full():
            raise OverflowError(f"FixedVec is full (capacity {self._capacity})")
        self._items.append(value)

    def pop(self) -> T:
        """Remove and return the last value; raises IndexError when empty."""
        if not self._items:
            raise IndexError("pop from empty FixedVec")
        return self._items.pop()

    def clear(self) -> None:
        self._items.clear()

    def get(self, index: int) -> T | None:
        """Element at index, or None when out of range."""
        if 0 <= index < len(self._items):
            return self._items[index]
        return None

    def remove(self, index: int) -> T:
        """Remove and return the element at index, shifting the rest left."""
        if not 0 <= index < len(self._items):
            raise IndexError("FixedVec index out of range")
        return self._items.pop(index)