from __future__ import annotations

import struct
from typing import Dict, Optional, Tuple

from .errors import MalformedStringError, OutOfBoundsError


_STRUCTS: Dict[Tuple[str, str], struct.Struct] = {
    (order, code): struct.Struct(order + code) for order in (">", "<") for code in ("B", "H", "I", "Q")
}


class ByteCursor:
    """Sequential reader over an immutable byte buffer.

    Integers are big-endian unless ``byteorder="<"`` is given. ``end`` limits
    the readable window, so a cursor can be confined to one entry's region of
    a larger archive. A failed read never moves the cursor.
    """

    def __init__(self, data: bytes, pos: int = 0, end: Optional[int] = None, byteorder: str = ">"):
        if byteorder not in (">", "<"):
            raise ValueError("byteorder must be '>' or '<'")
        if end is None:
            end = len(data)
        if end < 0 or end > len(data):
            raise OutOfBoundsError(f"cursor end {end} outside buffer of {len(data)} bytes")
        if pos < 0 or pos > end:
            raise OutOfBoundsError(f"cursor position {pos} outside 0..{end}")
        self._data = data
        self._pos = pos
        self._end = end
        self._order = byteorder

    @property
    def pos(self) -> int:
        return self._pos

    @property
    def end(self) -> int:
        return self._end

    @property
    def remaining(self) -> int:
        return self._end - self._pos

    def seek(self, pos: int) -> None:
        if pos < 0 or pos > self._end:
            raise OutOfBoundsError(f"seek to {pos} outside 0..{self._end}")
        self._pos = pos

    def skip(self, n: int) -> None:
        self._require(n)
        self._pos += n

    def _require(self, n: int) -> None:
        if n < 0 or self._pos + n > self._end:
            raise OutOfBoundsError(f"read of {n} bytes at {self._pos} exceeds end {self._end}")

    def _unpack(self, code: str) -> int:
        st = _STRUCTS[(self._order, code)]
        self._require(st.size)
        (value,) = st.unpack_from(self._data, self._pos)
        self._pos += st.size
        return value

    def read_u8(self) -> int:
        return self._unpack("B")

    def read_u16(self) -> int:
        return self._unpack("H")

    def read_u32(self) -> int:
        return self._unpack("I")

    def read_u64(self) -> int:
        return self._unpack("Q")

    def read_bytes(self, n: int) -> bytes:
        self._require(n)
        out = bytes(self._data[self._pos : self._pos + n])
        self._pos += n
        return out

    def read_cstring(self) -> bytes:
        """Read up to the next NUL and move past it; the NUL is not returned."""
        nul = self._data.find(b"\x00", self._pos, self._end)
        if nul < 0:
            raise MalformedStringError(f"unterminated string at offset {self._pos}")
        out = bytes(self._data[self._pos : nul])
        self._pos = nul + 1
        return out
