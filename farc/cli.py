from __future__ import annotations

import argparse
import sys
from typing import List

from farc.extract import Extractor, default_output_dir
from farc.decoder import EntryDecoder
from farc.reader import read_archive
from farc.errors import FArcError, CryptoError, FormatError


_DESCRIPTION = (
    "Extract compressed/encrypted files stored within modern FArc files "
    "used by Fate/Grand Order Arcade."
)
_EPILOG = (
    "Output files are written into a sub directory next to the input file, "
    "named after it without its extension."
)


def cmd_extract(archive: str, *, outdir: str | None = None, jobs: int | None = None, quiet: bool = False) -> bool:
    """Parse, decrypt and extract every entry of one archive.

    Args:
        archive: Path to a .farc file.
        outdir: Destination directory; defaults to the archive path without
            its extension.
        jobs: Maximum decode workers (default: CPU count).
        quiet: Only print the summary line.

    Returns:
        True when every entry was written, False if any entry failed.

    Raises:
        FormatError: Unknown signature or truncated/inconsistent entry table.
        CryptoError: The encrypted region could not be decrypted.
        OSError: The archive could not be read or the output not created.
    """
    farc = read_archive(archive)
    target = outdir if outdir is not None else default_output_dir(archive)
    if not quiet:
        flags = ", ".join(farc.flags.describe()) or "none"
        print(f"Archive: {archive} ({farc.signature.value.decode('ascii')}, flags: {flags}, {len(farc.entries)} file(s))")
    result = Extractor(target, quiet=quiet).extract(farc, EntryDecoder(), jobs=jobs)
    print(f"Summary: written={len(result.written)} failed={len(result.failed)}")
    return result.ok


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="farc",
        description=_DESCRIPTION,
        epilog=_EPILOG,
    )
    ap.add_argument("archive", nargs="?", help='Input FArc path, e.g. "{input_farc_file}.farc"')
    return ap


def main(argv: List[str] | None = None):
    ap = _build_parser()
    args = ap.parse_args(argv)
    if not args.archive:
        ap.print_help()
        sys.exit(1)
    try:
        ok = cmd_extract(args.archive)
    except FormatError as e:
        print(f"Error: failed to parse file entries: {e}", file=sys.stderr)
        sys.exit(1)
    except CryptoError as e:
        print(f"Error: failed to decrypt archive: {e}", file=sys.stderr)
        sys.exit(1)
    except (FArcError, OSError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    if not ok:
        print("Error: failed to extract output files", file=sys.stderr)
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
