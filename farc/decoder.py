from __future__ import annotations

import collections
import concurrent.futures as _fut
import os
from typing import Deque, Iterator, List, Optional, Tuple

from .codec import CodecProvider
from .constants import (
    CHUNK_WORD_SIZE,
    MAX_CHUNK_TABLE_ITERATIONS,
    METHOD_GZIP,
    METHOD_NONE,
    METHOD_ZSTD,
)
from .cursor import ByteCursor
from .errors import (
    CorruptChunkTableError,
    DecodeError,
    DecompressFailedError,
    OutOfBoundsError,
    UnsupportedMethodError,
)
from .reader import Archive, Entry


DecodeResult = Tuple[Entry, Optional[bytes], Optional[DecodeError]]


def default_jobs() -> int:
    return max(1, os.cpu_count() or 1)


class EntryDecoder:
    """Locate and decompress the payload of individual archive entries.

    ``decode`` is pure: it reads the shared, already decrypted archive
    buffer and returns a fresh ``bytes`` object, so it is safe to run for
    several entries at once.
    """

    def __init__(self, codecs: Optional[CodecProvider] = None, max_chunk_iterations: int = MAX_CHUNK_TABLE_ITERATIONS):
        self.codecs = codecs if codecs is not None else CodecProvider()
        self.max_chunk_iterations = max_chunk_iterations

    def decode(self, archive: Archive, entry: Entry) -> bytes:
        end = entry.offset + entry.compressed_size
        if end > len(archive.raw):
            raise DecompressFailedError(
                f"file[{entry.index}] {entry.name!r} data ends at {end}, past archive size {len(archive.raw)}"
            )
        # chunk-table words are little-endian, unlike the header
        cur = ByteCursor(archive.raw, pos=entry.offset, end=end, byteorder="<")
        if entry.flags.split_chunks:
            self._skip_chunk_table(cur, entry)
        payload = archive.raw[cur.pos : end]
        method = entry.method
        expected = entry.uncompressed_size

        if method == METHOD_NONE:
            if len(payload) < expected:
                raise DecompressFailedError(
                    f"file[{entry.index}] {entry.name!r} stores {len(payload)} bytes, {expected} declared"
                )
            out = payload[:expected]
        elif method == METHOD_GZIP:
            out = self.codecs.inflate(payload, expected)
        elif method == METHOD_ZSTD:
            out = self.codecs.zstd_decompress(payload, expected)
        else:
            raise UnsupportedMethodError(f"file[{entry.index}] {entry.name!r} uses unknown method {method!r}")

        if len(out) != expected:
            raise DecompressFailedError(
                f"file[{entry.index}] {entry.name!r} decoded to {len(out)} bytes, {expected} declared"
            )
        return bytes(out)

    def _skip_chunk_table(self, cur: ByteCursor, entry: Entry) -> None:
        """Move cur past the lead word and chunk-size table of a split entry.

        The scan stops once no more than one word of the declared compressed
        size remains unaccounted for. The chunk sizes are not used otherwise.
        """
        try:
            cur.read_u32()  # lead word, meaning unknown
            remaining = entry.compressed_size - CHUNK_WORD_SIZE
            for _ in range(self.max_chunk_iterations):
                chunk_size = cur.read_u32()
                remaining -= chunk_size + CHUNK_WORD_SIZE
                if remaining <= CHUNK_WORD_SIZE:
                    break
            else:
                raise CorruptChunkTableError(
                    f"file[{entry.index}] {entry.name!r} chunk table exceeds {self.max_chunk_iterations} entries"
                )
        except OutOfBoundsError as exc:
            raise CorruptChunkTableError(f"file[{entry.index}] {entry.name!r} chunk table overruns entry data: {exc}")

    def decode_entry(self, archive: Archive, entry: Entry) -> bool:
        """Decode entry and record the outcome on it; returns success."""
        try:
            entry.decoded = self.decode(archive, entry)
        except DecodeError as exc:
            entry.error = exc
            return False
        return True

    def iter_decoded(self, archive: Archive, jobs: Optional[int] = None) -> Iterator[DecodeResult]:
        """Decode all entries on a thread pool, yielding results in table order.

        At most ``2 * jobs`` entries are decoded ahead of the consumer, which
        bounds memory to the raw archive plus the in-flight outputs.
        """
        workers = max(1, int(jobs)) if jobs else default_jobs()

        def _run(entry: Entry) -> DecodeResult:
            try:
                return entry, self.decode(archive, entry), None
            except DecodeError as exc:
                return entry, None, exc

        pending: Deque[_fut.Future] = collections.deque()
        todo = iter(archive.entries)
        with _fut.ThreadPoolExecutor(max_workers=workers) as ex:
            for entry in todo:
                pending.append(ex.submit(_run, entry))
                if len(pending) >= 2 * workers:
                    break
            while pending:
                result = pending.popleft().result()
                nxt = next(todo, None)
                if nxt is not None:
                    pending.append(ex.submit(_run, nxt))
                yield result

    def decode_all(self, archive: Archive, jobs: Optional[int] = None) -> List[Entry]:
        """Populate ``decoded``/``error`` on every entry; returns the failures."""
        failed: List[Entry] = []
        for entry, data, err in self.iter_decoded(archive, jobs=jobs):
            if err is None:
                entry.decoded = data
            else:
                entry.error = err
                failed.append(entry)
        return failed
