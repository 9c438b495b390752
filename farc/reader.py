from __future__ import annotations

import enum
import sys
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from .constants import (
    SIG_FArC,
    SIG_FARC,
    SIG_FARc,
    AES_IV_SIZE,
    IV_OFFSET,
    ENCRYPTED_DATA_OFFSET,
    ENCRYPTED_ENTRY_OFFSET_ADJUST,
    METHOD_NONE,
    METHOD_GZIP,
    METHOD_ZSTD,
)
from .crypto import CryptoProvider, FARC_AES_KEY
from .cursor import ByteCursor
from .errors import (
    DecodeError,
    EntryBoundsError,
    FormatError,
    MalformedStringError,
    OutOfBoundsError,
    TruncatedError,
    UnknownSignatureError,
    UnsupportedMethodError,
)
from .flags import ArchiveFlags, EntryFlags, decode_archive_flags, decode_entry_flags


class Signature(enum.Enum):
    INVALID = None
    FArC = SIG_FArC
    FARC = SIG_FARC
    FARc = SIG_FARc

    @classmethod
    def from_tag(cls, tag: bytes) -> "Signature":
        for sig in cls:
            if sig.value is not None and sig.value == tag:
                return sig
        return cls.INVALID


@dataclass
class Entry:
    index: int
    name: str
    offset: int
    compressed_size: int
    uncompressed_size: int
    flags: EntryFlags
    decoded: Optional[bytes] = None
    error: Optional[DecodeError] = None

    @property
    def method(self) -> str:
        gz = self.flags.gzip_compressed
        zs = self.flags.zstd_compressed
        if gz and zs:
            raise UnsupportedMethodError(
                f"file[{self.index}] {self.name!r} sets both gzip and zstd flags (0x{self.flags.raw:08X})"
            )
        if gz:
            return METHOD_GZIP
        if zs:
            return METHOD_ZSTD
        return METHOD_NONE


@dataclass
class Archive:
    signature: Signature
    raw: bytes
    header_size: int = 0
    flags: ArchiveFlags = field(default_factory=ArchiveFlags)
    # always-zero word, alignment A, either 1 or 4, alignment B
    reserved: Tuple[int, ...] = ()
    iv: Optional[bytes] = None
    entries: List[Entry] = field(default_factory=list)

    @property
    def encrypted(self) -> bool:
        return self.flags.encrypted


class ArchiveParser:
    """Turn the raw bytes of an FArc file into an :class:`Archive`.

    Header fields are big-endian. When the archive flags mark it encrypted,
    everything after the 16-byte IV is decrypted in place before the entry
    table is read, and every entry offset is moved forward by 16 bytes.

    Args:
        crypto: AES-128-CBC provider; defaults to :class:`CryptoProvider`.
        key: 16-byte archive key; defaults to the published FArc key.
        strict: When False an unrecognised signature produces an empty
            archive with ``Signature.INVALID`` instead of raising.
    """

    def __init__(self, crypto: Optional[CryptoProvider] = None, key: bytes = FARC_AES_KEY, strict: bool = True):
        self.crypto = crypto if crypto is not None else CryptoProvider()
        self.key = key
        self.strict = strict

    def parse(self, data: Union[bytes, bytearray]) -> Archive:
        try:
            return self._parse(data)
        except (OutOfBoundsError, MalformedStringError) as exc:
            raise TruncatedError(f"FArc header or entry table truncated: {exc}")

    def _parse(self, data: Union[bytes, bytearray]) -> Archive:
        cur = ByteCursor(data)
        tag = cur.read_bytes(4)
        signature = Signature.from_tag(tag)
        if signature is Signature.INVALID:
            if self.strict:
                raise UnknownSignatureError(f"Unexpected FArc signature {tag!r}")
            print(f"Warning: unexpected FArc signature {tag!r}; no entries read", file=sys.stderr)
            return Archive(signature=signature, raw=bytes(data))

        header_size = cur.read_u32()
        flags = decode_archive_flags(cur.read_u32())
        always_zero = cur.read_u32()

        iv = None
        if flags.encrypted:
            cur.seek(IV_OFFSET)
            iv = cur.read_bytes(AES_IV_SIZE)
            buf = bytearray(data)
            self.crypto.decrypt_in_place(memoryview(buf)[ENCRYPTED_DATA_OFFSET:], self.key, iv)
            raw = bytes(buf)
            cur = ByteCursor(raw, pos=ENCRYPTED_DATA_OFFSET)
        else:
            raw = bytes(data)
            cur = ByteCursor(raw, pos=cur.pos)

        alignment_a = cur.read_u32()
        either_1_or_4 = cur.read_u32()
        file_count = cur.read_u32()
        alignment_b = cur.read_u32()

        entries: List[Entry] = []
        for i in range(file_count):
            entries.append(self._read_entry(cur, i, flags.encrypted, len(raw)))

        return Archive(
            signature=signature,
            raw=raw,
            header_size=header_size,
            flags=flags,
            reserved=(always_zero, alignment_a, either_1_or_4, alignment_b),
            iv=iv,
            entries=entries,
        )

    @staticmethod
    def _read_entry(cur: ByteCursor, index: int, encrypted: bool, raw_len: int) -> Entry:
        name_raw = cur.read_cstring()
        try:
            name = name_raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise FormatError(f"file[{index}] name is not valid UTF-8: {exc}")
        offset = cur.read_u32()
        compressed_size = cur.read_u32()
        uncompressed_size = cur.read_u32()
        flags = decode_entry_flags(cur.read_u32())
        if encrypted:
            offset += ENCRYPTED_ENTRY_OFFSET_ADJUST
        if offset + compressed_size > raw_len:
            raise EntryBoundsError(
                f"file[{index}] {name!r} spans {offset}..{offset + compressed_size} beyond archive size {raw_len}"
            )
        return Entry(
            index=index,
            name=name,
            offset=offset,
            compressed_size=compressed_size,
            uncompressed_size=uncompressed_size,
            flags=flags,
        )


def read_archive(path: str, **parser_options) -> Archive:
    """Read a whole FArc file into memory and parse it."""
    with open(path, "rb") as f:
        data = f.read()
    return ArchiveParser(**parser_options).parse(data)
