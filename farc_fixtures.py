"""In-memory FArc builders used by the test modules."""

from __future__ import annotations

import os
import struct
import zlib
from dataclasses import dataclass
from typing import List, Optional, Sequence

import zstandard
from Cryptodome.Cipher import AES

from farc.constants import (
    AFLAG_ENCRYPTED,
    EFLAG_GZIP,
    EFLAG_SPLIT_CHUNKS,
    EFLAG_ZSTD,
    SIG_FARC,
)
from farc.crypto import FARC_AES_KEY


@dataclass
class FixtureEntry:
    name: str
    stored: bytes
    uncompressed_size: int
    flags: int = 0
    # overrides for malformed tables
    offset: Optional[int] = None
    compressed_size: Optional[int] = None


def stored_entry(name: str, data: bytes) -> FixtureEntry:
    return FixtureEntry(name, data, len(data))


def gzip_entry(name: str, data: bytes, *, wbits: int = 31) -> FixtureEntry:
    c = zlib.compressobj(6, zlib.DEFLATED, wbits)
    return FixtureEntry(name, c.compress(data) + c.flush(), len(data), EFLAG_GZIP)


def zstd_entry(name: str, data: bytes) -> FixtureEntry:
    return FixtureEntry(name, zstandard.ZstdCompressor().compress(data), len(data), EFLAG_ZSTD)


def chunk_table(stream: bytes, chunk_size: int, *, lead: int = 0) -> bytes:
    """Prefix stream with a lead word and little-endian sizes of its pieces."""
    sizes = [len(stream[i : i + chunk_size]) for i in range(0, len(stream), chunk_size)]
    return struct.pack("<I", lead) + b"".join(struct.pack("<I", s) for s in sizes) + stream


def split(entry: FixtureEntry, chunk_size: int) -> FixtureEntry:
    entry.stored = chunk_table(entry.stored, chunk_size)
    entry.flags |= EFLAG_SPLIT_CHUNKS
    return entry


def _pad16(data: bytes) -> bytes:
    return data + b"\x00" * (-len(data) % 16)


def build_farc(
    entries: Sequence[FixtureEntry],
    *,
    signature: bytes = SIG_FARC,
    encrypted: bool = False,
    flags: int = 0,
    iv: Optional[bytes] = None,
    key: bytes = FARC_AES_KEY,
    file_count: Optional[int] = None,
) -> bytes:
    """Assemble a complete archive.

    Stored offsets are 16 + the position inside the body (everything after
    the 16-byte prefix, or after the IV when encrypted), which is the
    absolute position for plain archives and the absolute position minus
    16 for encrypted ones.
    """
    if encrypted:
        flags |= AFLAG_ENCRYPTED
    table_len = 16 + sum(len(e.name.encode("utf-8")) + 1 + 16 for e in entries)
    count = len(entries) if file_count is None else file_count
    body = bytearray(struct.pack(">IIII", 0x10, 1, count, 0x10))
    payloads = bytearray()
    records: List[bytes] = []
    for e in entries:
        off = 16 + table_len + len(payloads) if e.offset is None else e.offset
        csize = len(e.stored) if e.compressed_size is None else e.compressed_size
        payloads += e.stored
        records.append(e.name.encode("utf-8") + b"\x00" + struct.pack(">IIII", off, csize, e.uncompressed_size, e.flags))
    body += b"".join(records) + payloads
    prefix = signature + struct.pack(">III", 0x10, flags, 0)
    if not encrypted:
        return prefix + bytes(body)
    iv = iv if iv is not None else os.urandom(16)
    cipher = AES.new(key, AES.MODE_CBC, iv=iv)
    return prefix + iv + cipher.encrypt(_pad16(bytes(body)))

