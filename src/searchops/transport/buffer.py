"""Append-only byte buffer reused across bulk batches."""

from __future__ import annotations

from typing import Union

BytesLike = Union[bytes, bytearray, memoryview]


class GrowableBuffer:
    """Byte buffer that grows on demand and hands out frozen slices.

    The backing ``bytearray`` is allocated once with ``capacity`` bytes and only
    replaced (doubling) when a write does not fit. ``slice()`` copies out exactly
    the bytes written since the previous slice and rewinds the write cursor, so
    a warmed-up buffer serves every following batch without reallocating.
    """

    def __init__(self, capacity: int = 1024) -> None:
        self._data = bytearray(max(1, int(capacity)))
        self._pos = 0

    def __len__(self) -> int:
        return self._pos

    @property
    def capacity(self) -> int:
        return len(self._data)

    def _ensure(self, extra: int) -> None:
        needed = self._pos + extra
        if needed <= len(self._data):
            return
        size = len(self._data)
        while size < needed:
            size *= 2
        grown = bytearray(size)
        grown[: self._pos] = self._data[: self._pos]
        self._data = grown

    def write_buffer(self, chunk: BytesLike) -> None:
        """Append raw bytes."""
        n = len(chunk)
        if not n:
            return
        self._ensure(n)
        self._data[self._pos : self._pos + n] = chunk
        self._pos += n

    def write(self, text: str) -> None:
        """Append ``text`` encoded as UTF-8."""
        self.write_buffer(text.encode("utf-8"))

    def slice(self) -> bytes:
        """Return the bytes written since the last slice and rewind to zero."""
        out = bytes(self._data[: self._pos])
        self._pos = 0
        return out

    def reset(self) -> None:
        """Discard written bytes without returning them."""
        self._pos = 0
