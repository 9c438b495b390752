from __future__ import annotations

import zlib

import zstandard

from .errors import DecompressFailedError


_GZIP_MAGIC = b"\x1f\x8b"
_GZIP_HEADER_SIZE = 10


def _has_gzip_header(data: bytes) -> bool:
    return len(data) > _GZIP_HEADER_SIZE and data[:2] == _GZIP_MAGIC and data[2] == 8


def _has_zlib_header(data: bytes) -> bool:
    if len(data) < 2:
        return False
    cmf, flg = data[0], data[1]
    return (cmf & 0x0F) == 8 and (cmf >> 4) <= 7 and ((cmf << 8) | flg) % 31 == 0


def inflate_window_bits(data: bytes) -> int:
    """Pick zlib window bits for gzip-framed, zlib-framed or raw DEFLATE input."""
    if _has_gzip_header(data):
        return 16 + zlib.MAX_WBITS
    if _has_zlib_header(data):
        return zlib.MAX_WBITS
    return -zlib.MAX_WBITS


class CodecProvider:
    """Decompression back ends used by the entry decoder.

    Both calls return at most ``expected_size + 1`` bytes so an oversized
    stream is detected without inflating it completely. Callers compare the
    result length against the declared size.
    """

    def inflate(self, data: bytes, expected_size: int) -> bytes:
        d = zlib.decompressobj(inflate_window_bits(data))
        try:
            return d.decompress(data, expected_size + 1)
        except zlib.error as e:
            raise DecompressFailedError(f"inflate failed: {e}")

    def zstd_decompress(self, data: bytes, expected_size: int) -> bytes:
        try:
            d = zstandard.ZstdDecompressor()
            return d.decompress(data, max_output_size=expected_size + 1)
        except zstandard.ZstdError as e:
            raise DecompressFailedError(f"zstd decompression failed: {e}")
