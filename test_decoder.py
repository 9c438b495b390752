from __future__ import annotations

import os
import struct
import unittest

from farc.codec import CodecProvider
from farc.constants import EFLAG_GZIP, EFLAG_SPLIT_CHUNKS, EFLAG_ZSTD
from farc.decoder import EntryDecoder
from farc.errors import (
    CorruptChunkTableError,
    DecompressFailedError,
    UnsupportedMethodError,
)
from farc.reader import ArchiveParser
from farc_fixtures import FixtureEntry, build_farc, gzip_entry, split, stored_entry, zstd_entry


class _ShortCodec(CodecProvider):
    """Inflates normally, then drops the last 20 bytes."""

    def inflate(self, data, expected_size):
        return super().inflate(data, expected_size)[:-20]


def _parse(entries, **kw):
    return ArchiveParser().parse(build_farc(entries, **kw))


class DecodeMethodTests(unittest.TestCase):
    def setUp(self):
        self.decoder = EntryDecoder()

    def test_stored_is_exact_copy(self):
        data = os.urandom(777)
        archive = _parse([stored_entry("raw.bin", data)])
        entry = archive.entries[0]
        out = self.decoder.decode(archive, entry)
        self.assertEqual(out, data)
        self.assertEqual(out, archive.raw[entry.offset : entry.offset + entry.uncompressed_size])

    def test_stored_copies_declared_size_only(self):
        entry = FixtureEntry("pad.bin", b"hello" + b"\x00" * 11, 5)
        archive = _parse([entry])
        self.assertEqual(self.decoder.decode(archive, archive.entries[0]), b"hello")

    def test_stored_short_payload(self):
        entry = FixtureEntry("short.bin", b"abc", 10)
        archive = _parse([entry])
        with self.assertRaises(DecompressFailedError):
            self.decoder.decode(archive, archive.entries[0])

    def test_gzip_zlib_and_raw_deflate(self):
        data = b"The quick brown fox. " * 200
        archive = _parse([
            gzip_entry("gz.txt", data),
            gzip_entry("zl.txt", data, wbits=15),
            gzip_entry("raw.txt", data, wbits=-15),
        ])
        for entry in archive.entries:
            self.assertEqual(self.decoder.decode(archive, entry), data, entry.name)

    def test_zstd(self):
        data = os.urandom(64) * 50
        archive = _parse([zstd_entry("z.bin", data)])
        self.assertEqual(self.decoder.decode(archive, archive.entries[0]), data)

    def test_empty_entry(self):
        archive = _parse([stored_entry("empty.txt", b""), gzip_entry("empty.gz", b"")])
        for entry in archive.entries:
            self.assertEqual(self.decoder.decode(archive, entry), b"")

    def test_encrypted_archive_entries(self):
        data = b"encrypted payload " * 30
        archive = _parse([gzip_entry("a.txt", data), zstd_entry("b.txt", data)], encrypted=True)
        for entry in archive.entries:
            self.assertEqual(self.decoder.decode(archive, entry), data)

    def test_idempotent(self):
        archive = _parse([gzip_entry("a.txt", b"again " * 100)])
        entry = archive.entries[0]
        self.assertEqual(self.decoder.decode(archive, entry), self.decoder.decode(archive, entry))

    def test_conflicting_flags(self):
        entry = stored_entry("both.bin", b"abc")
        entry.flags = EFLAG_GZIP | EFLAG_ZSTD
        archive = _parse([entry])
        with self.assertRaises(UnsupportedMethodError):
            self.decoder.decode(archive, archive.entries[0])


class LengthInvariantTests(unittest.TestCase):
    def test_declared_larger_than_output(self):
        entry = gzip_entry("short.txt", b"x" * 80)
        entry.uncompressed_size = 100
        archive = _parse([entry])
        with self.assertRaises(DecompressFailedError):
            EntryDecoder().decode(archive, archive.entries[0])

    def test_declared_smaller_than_output(self):
        entry = zstd_entry("long.bin", b"y" * 80)
        entry.uncompressed_size = 50
        archive = _parse([entry])
        with self.assertRaises(DecompressFailedError):
            EntryDecoder().decode(archive, archive.entries[0])

    def test_codec_returning_short_buffer(self):
        archive = _parse([gzip_entry("a.txt", b"z" * 100)])
        with self.assertRaises(DecompressFailedError):
            EntryDecoder(codecs=_ShortCodec()).decode(archive, archive.entries[0])

    def test_corrupt_streams(self):
        bad_gzip = FixtureEntry("bad.gz", b"\xff\xff\xff\xff", 10, EFLAG_GZIP)
        bad_zstd = FixtureEntry("bad.zst", b"\x00" * 16, 10, EFLAG_ZSTD)
        archive = _parse([bad_gzip, bad_zstd])
        for entry in archive.entries:
            with self.assertRaises(DecompressFailedError):
                EntryDecoder().decode(archive, entry)


class ChunkTableTests(unittest.TestCase):
    def test_split_gzip_skips_table(self):
        data = os.urandom(2000) + b"a" * 4000
        entry = split(gzip_entry("split.bin", data), 256)
        archive = _parse([entry])
        self.assertTrue(archive.entries[0].flags.split_chunks)
        self.assertEqual(EntryDecoder().decode(archive, archive.entries[0]), data)

    def test_split_zstd_and_stored(self):
        data = b"chunked " * 500
        archive = _parse([
            split(zstd_entry("z.bin", data), 100),
            split(stored_entry("s.bin", data), 1000),
        ])
        for entry in archive.entries:
            self.assertEqual(EntryDecoder().decode(archive, entry), data, entry.name)

    def test_split_in_encrypted_archive(self):
        data = b"secret chunks " * 300
        archive = _parse([split(gzip_entry("e.bin", data), 64)], encrypted=True)
        self.assertEqual(EntryDecoder().decode(archive, archive.entries[0]), data)

    def test_runaway_table_hits_iteration_bound(self):
        table = struct.pack("<I", 0) + b"\x00" * 4 * 40
        entry = FixtureEntry("loop.bin", table, 0, EFLAG_SPLIT_CHUNKS)
        archive = _parse([entry])
        with self.assertRaises(CorruptChunkTableError):
            EntryDecoder(max_chunk_iterations=8).decode(archive, archive.entries[0])
        # 40 zero-size words fit within the bound of 64
        self.assertEqual(EntryDecoder(max_chunk_iterations=64).decode(archive, archive.entries[0]), b"")

    def test_default_bound_is_16384(self):
        table = struct.pack("<I", 0) + b"\x00" * 4 * 16400
        entry = FixtureEntry("loop.bin", table, 0, EFLAG_SPLIT_CHUNKS)
        archive = _parse([entry])
        with self.assertRaises(CorruptChunkTableError):
            EntryDecoder().decode(archive, archive.entries[0])

    def test_oversized_chunk_ends_scan(self):
        # 9 - (0xFFFFFFF0 + 4) is negative, so the scan stops after one word
        table = struct.pack("<II", 0, 0xFFFFFFF0)
        entry = FixtureEntry("wrap.bin", table + b"hello", 5, EFLAG_SPLIT_CHUNKS)
        archive = _parse([entry])
        self.assertEqual(EntryDecoder().decode(archive, archive.entries[0]), b"hello")

    def test_table_overrunning_entry(self):
        entry = FixtureEntry("tiny.bin", b"\x01\x00\x00\x00\x02\x00", 0, EFLAG_SPLIT_CHUNKS)
        archive = _parse([entry, stored_entry("next.bin", b"sibling")])
        with self.assertRaises(CorruptChunkTableError):
            EntryDecoder().decode(archive, archive.entries[0])
        self.assertEqual(EntryDecoder().decode(archive, archive.entries[1]), b"sibling")


class ParallelDecodeTests(unittest.TestCase):
    def test_iter_decoded_preserves_order(self):
        blobs = [os.urandom(100 + i) for i in range(12)]
        entries = [gzip_entry(f"f{i:02d}.bin", b) if i % 2 else zstd_entry(f"f{i:02d}.bin", b) for i, b in enumerate(blobs)]
        archive = _parse(entries)
        results = list(EntryDecoder().iter_decoded(archive, jobs=3))
        self.assertEqual([e.index for e, _, _ in results], list(range(12)))
        for (entry, data, err), blob in zip(results, blobs):
            self.assertIsNone(err)
            self.assertEqual(data, blob)
            self.assertIsNone(entry.decoded)

    def test_decode_all_isolates_failures(self):
        short = gzip_entry("short.txt", b"x" * 80)
        short.uncompressed_size = 100
        archive = _parse([stored_entry("a.txt", b"hello"), short, zstd_entry("c.txt", b"world")])
        failed = EntryDecoder().decode_all(archive, jobs=2)
        self.assertEqual([e.name for e in failed], ["short.txt"])
        a, b, c = archive.entries
        self.assertEqual(a.decoded, b"hello")
        self.assertIsNone(b.decoded)
        self.assertIsInstance(b.error, DecompressFailedError)
        self.assertEqual(c.decoded, b"world")
        self.assertIsNone(c.error)

    def test_decode_entry(self):
        archive = _parse([stored_entry("a.txt", b"hello")])
        decoder = EntryDecoder()
        self.assertTrue(decoder.decode_entry(archive, archive.entries[0]))
        self.assertEqual(archive.entries[0].decoded, b"hello")


if __name__ == "__main__":
    unittest.main()
