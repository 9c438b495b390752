"""
farc — extractor for the FArc archives of Fate/Grand Order Arcade.

Features:

- Header and entry-table parsing for the FArC/FARC/FARc signatures.
- Whole-archive AES-128-CBC decryption with the published archive key (PyCryptodomex).
- Per-entry decompression: stored, gzip/zlib/raw DEFLATE, Zstandard (zstandard).
- Split-chunk entries: the chunk-size table is skipped to reach the payload.
- Entries decode in parallel; a failing entry is reported and skipped.

Programmatic use goes through farc.reader.read_archive, farc.decoder.EntryDecoder
and farc.extract.extract_archive; the CLI lives in farc.cli.
"""

__version__ = "0.1"

__all__ = [
    "constants",
    "cursor",
    "flags",
    "crypto",
    "codec",
    "reader",
    "decoder",
    "extract",
]
