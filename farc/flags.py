from __future__ import annotations

from dataclasses import dataclass, fields
from typing import List

from .constants import (
    AFLAG_UNK0,
    AFLAG_GZIP,
    AFLAG_ENCRYPTED,
    AFLAG_UNK3,
    AFLAG_UNK4,
    AFLAG_UNK5,
    AFLAG_ZSTD,
    AFLAG_UNK7,
    EFLAG_UNK0,
    EFLAG_GZIP,
    EFLAG_ENCRYPTED,
    EFLAG_UNK3,
    EFLAG_SPLIT_CHUNKS,
    EFLAG_ZSTD,
)


def _set_names(obj) -> List[str]:
    return [f.name for f in fields(obj) if f.name != "raw" and getattr(obj, f.name)]


@dataclass(frozen=True)
class ArchiveFlags:
    raw: int = 0
    unk0: bool = False
    gzip_compressed: bool = False
    encrypted: bool = False
    unk3: bool = False
    unk4: bool = False
    unk5: bool = False
    zstd_compressed: bool = False
    unk7: bool = False

    def describe(self) -> List[str]:
        return _set_names(self)


@dataclass(frozen=True)
class EntryFlags:
    raw: int = 0
    unk0: bool = False
    gzip_compressed: bool = False
    encrypted: bool = False
    unk3: bool = False
    split_chunks: bool = False
    zstd_compressed: bool = False

    def describe(self) -> List[str]:
        return _set_names(self)


def decode_archive_flags(word: int) -> ArchiveFlags:
    return ArchiveFlags(
        raw=word,
        unk0=bool(word & AFLAG_UNK0),
        gzip_compressed=bool(word & AFLAG_GZIP),
        encrypted=bool(word & AFLAG_ENCRYPTED),
        unk3=bool(word & AFLAG_UNK3),
        unk4=bool(word & AFLAG_UNK4),
        unk5=bool(word & AFLAG_UNK5),
        zstd_compressed=bool(word & AFLAG_ZSTD),
        unk7=bool(word & AFLAG_UNK7),
    )


def decode_entry_flags(word: int) -> EntryFlags:
    return EntryFlags(
        raw=word,
        unk0=bool(word & EFLAG_UNK0),
        gzip_compressed=bool(word & EFLAG_GZIP),
        encrypted=bool(word & EFLAG_ENCRYPTED),
        unk3=bool(word & EFLAG_UNK3),
        split_chunks=bool(word & EFLAG_SPLIT_CHUNKS),
        zstd_compressed=bool(word & EFLAG_ZSTD),
    )
