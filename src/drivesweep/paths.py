"""Path normalization and containment checks.

Every delete-safety decision goes through these helpers, so comparison keys
must be identical for equal paths regardless of case, separator style or
`.` and `..` segments.
"""

import ntpath
import os
from collections.abc import Iterable

SEPARATOR = "\\"


def normalize_path(path: str | os.PathLike) -> str:
    """Canonical comparison key: `..` collapsed, backslash separators, lowercase."""
    return ntpath.normpath(os.fspath(path)).lower()


def resolve_path(path: str | os.PathLike) -> str:
    """
    Resolve the path a delete call would actually reach.

    `.` and `..` segments are collapsed and links in the parent directories
    are followed. The final component is kept as is, since removing a link
    removes only the link.

    Args:
        path: Candidate path

    Returns:
        Absolute path of the entry itself
    """
    path = os.path.normpath(os.fspath(path))
    parent, name = os.path.split(path)
    if not name:
        return path
    return os.path.join(os.path.realpath(parent), name)


def normalize_paths(paths: Iterable[str]) -> set[str]:
    """Build a lookup set of comparison keys."""
    return {normalize_path(path) for path in paths}


def same_path(left: str | os.PathLike, right: str | os.PathLike) -> bool:
    """Compare two paths ignoring case, separator style and trailing separators."""
    left_key = normalize_path(left).rstrip(SEPARATOR)
    right_key = normalize_path(right).rstrip(SEPARATOR)
    return left_key == right_key


def _prefix(root_key: str) -> str:
    return root_key if root_key.endswith(SEPARATOR) else root_key + SEPARATOR


def contained_in(root: str | os.PathLike, path: str | os.PathLike) -> bool:
    """
    Check whether path lies inside root.

    A file root only contains itself. A directory root (or one that does not
    exist) contains itself and everything below it.

    Args:
        root: Category or volume root
        path: Candidate path

    Returns:
        True if path is inside root's scope
    """
    root_key = normalize_path(root)
    target = normalize_path(path)

    if os.path.isfile(root):
        return target == root_key

    prefix = _prefix(root_key)
    return target == prefix.rstrip(SEPARATOR) or target == root_key or target.startswith(prefix)


def within_any_root(roots: Iterable[str], path: str | os.PathLike) -> bool:
    """Check containment against a list of roots."""
    return any(contained_in(root, path) for root in roots)


def dedup_paths(paths: Iterable[str | os.PathLike]) -> list[str]:
    """Drop paths whose comparison key was already seen, keeping order."""
    seen: set[str] = set()
    output = []
    for path in paths:
        key = normalize_path(path)
        if key in seen:
            continue
        seen.add(key)
        output.append(os.fspath(path))
    return output
