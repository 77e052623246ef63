"""Whole-volume sweep for large and suspicious items."""

import logging
import os
from collections.abc import Iterable

from drivesweep.models import CategoryDefinition, LargeItem
from drivesweep.paths import normalize_path, same_path, within_any_root
from drivesweep.scanner import cutoff_time, matches_cutoff, walk_tree

logger = logging.getLogger(__name__)

SUSPICIOUS_KEYWORDS = ("log", "cache", "temp", "tmp")


def contains_keyword(text: str, keywords: Iterable[str] = SUSPICIOUS_KEYWORDS) -> bool:
    """Case-insensitive substring match against any keyword."""
    lowered = text.lower()
    return any(keyword in lowered for keyword in keywords)


def find_suspicious_dir(
    directory: str | None,
    keywords: Iterable[str] = SUSPICIOUS_KEYWORDS,
    stop_at: str | None = None,
) -> str | None:
    """
    Find the nearest directory, starting at the given one and walking up,
    whose own name contains a keyword.

    Args:
        directory: Directory to start from
        keywords: Name fragments to look for
        stop_at: Sweep root; it and its ancestors are never considered

    Returns:
        The matching directory, or None once the root is reached
    """
    current = directory
    while current:
        if stop_at is not None and same_path(current, stop_at):
            return None
        name = os.path.basename(current.rstrip("\\/"))
        if name and contains_keyword(name, keywords):
            return current
        parent = os.path.dirname(current.rstrip("\\/"))
        if not parent or parent == current:
            return None
        current = parent
    return None


def match_category_id(
    path: str,
    stat: os.stat_result,
    categories: list[CategoryDefinition],
    cutoffs: dict[str, float | None],
) -> str | None:
    """First category (in catalog order) whose roots hold the path and whose filter it passes."""
    for definition in categories:
        if not within_any_root(definition.roots, path):
            continue
        if not matches_cutoff(stat, cutoffs[definition.id]):
            continue
        return definition.id
    return None


def scan_large_items(
    volume_root: str,
    categories: list[CategoryDefinition],
    limit: int,
    min_size_bytes: int,
    now: float | None = None,
) -> list[LargeItem]:
    """
    Sweep a volume for large files and large cache/log/temp directories.

    Files at or above the threshold are reported individually. Every file's
    size is also credited to its nearest keyword-named ancestor directory;
    directories whose credited total meets the threshold are reported too.

    Args:
        volume_root: Directory to sweep
        categories: Catalog used to annotate files with a category id
        limit: Maximum number of items returned
        min_size_bytes: Size threshold for files and directories
        now: Reference time for category time filters

    Returns:
        Items sorted by size, largest first
    """
    cutoffs = {c.id: cutoff_time(c.time_filter, now) for c in categories}
    large_files: list[LargeItem] = []
    suspicious_dirs: dict[str, list] = {}

    for entry in walk_tree(volume_root):
        if not entry.is_file:
            continue
        try:
            stat = entry.stat()
        except OSError:
            continue
        size = stat.st_size
        path = entry.path

        if size >= min_size_bytes:
            name = os.path.basename(path)
            large_files.append(
                LargeItem(
                    path=path,
                    name=name,
                    size_bytes=size,
                    is_dir=False,
                    suspicious=contains_keyword(name) or contains_keyword(path),
                    category_id=match_category_id(path, stat, categories, cutoffs),
                )
            )

        suspicious_dir = find_suspicious_dir(os.path.dirname(path), stop_at=volume_root)
        if suspicious_dir is not None:
            slot = suspicious_dirs.setdefault(normalize_path(suspicious_dir), [suspicious_dir, 0])
            slot[1] += size

    large_dirs = [
        LargeItem(
            path=path,
            name=os.path.basename(path.rstrip("\\/")) or path,
            size_bytes=size,
            is_dir=True,
            suspicious=True,
        )
        for path, size in suspicious_dirs.values()
        if size >= min_size_bytes
    ]

    items = large_files + large_dirs
    items.sort(key=lambda item: item.size_bytes, reverse=True)
    logger.info(
        "Volume sweep found %d large files and %d suspicious directories",
        len(large_files),
        len(large_dirs),
    )
    return items[:limit]
