from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from typing import List, Optional

from .decoder import EntryDecoder
from .errors import ExtractError, UnknownSignatureError
from .pathutil import safe_join, trim_extension
from .reader import Archive, Entry, Signature, read_archive


@dataclass
class ExtractResult:
    written: List[str] = field(default_factory=list)
    failed: List[int] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


def default_output_dir(archive_path: str) -> str:
    """Directory named after the archive, beside it (``a/b.farc`` -> ``a/b``).

    An archive without an extension gets an ``_extracted`` suffix instead so
    the directory never collides with the archive itself.
    """
    base = trim_extension(archive_path)
    if base == archive_path:
        return archive_path + "_extracted"
    return base


def _report(entry: Entry, reason: object) -> None:
    print(f"Error: unable to extract file[{entry.index}] {entry.name!r}: {reason}", file=sys.stderr)


class Extractor:
    """Write decoded entries below an output directory.

    Entries are decoded on the decoder's pool and written on the calling
    thread in table order, so a repeated name ends up holding the data of
    its last occurrence.
    """

    def __init__(self, outdir: str, *, quiet: bool = False):
        self.outdir = outdir
        self.quiet = quiet

    def target_path(self, entry: Entry) -> str:
        if not entry.name:
            raise ExtractError("entry has an empty name")
        try:
            return safe_join(self.outdir, entry.name)
        except ValueError as exc:
            raise ExtractError(f"unsafe entry name: {exc}")

    def write_entry(self, entry: Entry, data: bytes) -> str:
        dst = self.target_path(entry)
        os.makedirs(os.path.dirname(dst) or ".", exist_ok=True)
        with open(dst, "wb") as wf:
            wf.write(data)
        return dst

    def extract(self, archive: Archive, decoder: Optional[EntryDecoder] = None, *, jobs: Optional[int] = None) -> ExtractResult:
        if archive.signature is Signature.INVALID:
            raise UnknownSignatureError("Refusing to extract an archive with an invalid signature")
        decoder = decoder if decoder is not None else EntryDecoder()
        os.makedirs(self.outdir, exist_ok=True)

        result = ExtractResult()
        total = len(archive.entries)
        for n, (entry, data, err) in enumerate(decoder.iter_decoded(archive, jobs=jobs), start=1):
            if err is not None:
                entry.error = err
                result.failed.append(entry.index)
                _report(entry, err)
                continue
            try:
                dst = self.write_entry(entry, data)
            except (ExtractError, OSError) as exc:
                result.failed.append(entry.index)
                _report(entry, exc)
                continue
            result.written.append(dst)
            if not self.quiet:
                print(f"  extracting: {n:>4}/{total:<4} {entry.name}")
        return result


def extract_archive(
    path: str,
    outdir: Optional[str] = None,
    *,
    jobs: Optional[int] = None,
    quiet: bool = False,
) -> ExtractResult:
    """Read, decrypt, decode and extract one FArc archive.

    Args:
        path: Input ``.farc`` file.
        outdir: Output directory; defaults to the archive path without its
            extension.
        jobs: Maximum decode workers; defaults to the CPU count.
        quiet: Suppress per-entry progress lines.

    Returns:
        An :class:`ExtractResult` listing written paths and failed entry
        indices.

    Raises:
        FormatError, CryptoError: The archive could not be parsed.
        OSError: The archive could not be read or the output directory
            could not be created.
    """
    archive = read_archive(path)
    target = outdir if outdir is not None else default_output_dir(path)
    return Extractor(target, quiet=quiet).extract(archive, EntryDecoder(), jobs=jobs)
