from __future__ import annotations

import os


def norm_path(p: str) -> str:
    """Normalize an entry name to a canonical forward-slash relative path.

    Rules:
    - Convert backslashes to slashes
    - Strip leading/trailing slashes
    - Remove empty and '.' segments
    - Reject '..' segments, drive letters and NUL
    """
    if "\x00" in p:
        raise ValueError("Path may not contain NUL")
    p = p.replace("\\", "/").strip("/")
    parts = [q for q in p.split("/") if q not in ("", ".")]
    for q in parts:
        if q == "..":
            raise ValueError("Path may not contain '..'")
    if parts and len(parts[0]) == 2 and parts[0][1] == ":":
        raise ValueError("Path may not contain a drive letter")
    if not parts:
        raise ValueError("Path is empty")
    return "/".join(parts)


def safe_join(root: str, name: str) -> str:
    """Join an entry name under root, refusing anything that escapes it."""
    rel = norm_path(name)
    return os.path.join(root, *rel.split("/"))


def trim_extension(path: str) -> str:
    """Drop the final extension of path; dots in directory names are kept."""
    base, _ext = os.path.splitext(path)
    return base
