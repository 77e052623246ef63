"""Category scanning for drivesweep.

Scans are best effort: an unreadable entry is skipped, never fatal.
"""

import logging
import os
import time
from collections.abc import Iterator
from stat import FILE_ATTRIBUTE_REPARSE_POINT
from typing import NamedTuple

from drivesweep.models import (
    CategoryDefinition,
    CategoryItems,
    CategorySummary,
    CleanupItem,
    TimeFilter,
)

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86_400


class WalkEntry(NamedTuple):
    """A node produced by walk_tree."""

    path: str
    is_dir: bool
    is_file: bool
    dir_entry: os.DirEntry | None = None

    def stat(self) -> os.stat_result:
        if self.dir_entry is not None:
            return self.dir_entry.stat(follow_symlinks=False)
        return os.stat(self.path, follow_symlinks=False)


class CategoryScan(NamedTuple):
    size_bytes: int
    file_count: int


def walk_tree(root: str) -> Iterator[WalkEntry]:
    """
    Walk a directory tree in pre-order.

    The root itself is yielded first as a directory. Symbolic links and NTFS
    junctions are reported as neither file nor directory and are never
    followed. Directories that cannot be read are yielded but not descended
    into. Depth is bounded only by the filesystem.

    Args:
        root: Directory to walk

    Yields:
        WalkEntry for the root and every entry beneath it
    """
    yield WalkEntry(root, True, False)

    pending = [iter(_list_directory(root))]
    while pending:
        entry = next(pending[-1], None)
        if entry is None:
            pending.pop()
            continue

        try:
            is_dir = entry.is_dir(follow_symlinks=False) and not is_junction(entry)
            is_file = not is_dir and entry.is_file(follow_symlinks=False)
        except OSError:
            continue

        yield WalkEntry(entry.path, is_dir, is_file, entry)
        if is_dir:
            pending.append(iter(_list_directory(entry.path)))


def _list_directory(directory: str) -> list[os.DirEntry]:
    try:
        with os.scandir(directory) as it:
            return list(it)
    except OSError as e:
        logger.debug("Cannot read %s: %s", directory, e)
        return []


def is_junction(entry: os.DirEntry) -> bool:
    """
    Check for an NTFS junction.

    Junctions report as directories even with follow_symlinks=False, so they
    need their own test. Older interpreters lack DirEntry.is_junction; there
    the reparse-point attribute decides.
    """
    if hasattr(entry, "is_junction"):
        return entry.is_junction()
    attributes = getattr(entry.stat(follow_symlinks=False), "st_file_attributes", 0)
    return bool(attributes & FILE_ATTRIBUTE_REPARSE_POINT)


def cutoff_time(time_filter: TimeFilter, now: float | None = None) -> float | None:
    """
    Compute the modification-time cutoff for a filter.

    Args:
        time_filter: Category time filter
        now: Reference time in seconds since the epoch (defaults to now)

    Returns:
        Cutoff in seconds since the epoch, or None when everything matches.
        A cutoff before the epoch is clamped to the epoch.
    """
    if time_filter.older_than_days is None:
        return None
    now = time.time() if now is None else now
    age = time_filter.older_than_days * SECONDS_PER_DAY
    if age >= now:
        return 0.0
    return now - age


def matches_cutoff(stat: os.stat_result, cutoff: float | None) -> bool:
    """A file matches when it was last modified strictly before the cutoff."""
    if cutoff is None:
        return True
    return stat.st_mtime < cutoff


def to_item(path: str, stat: os.stat_result) -> CleanupItem:
    modified_ms = stat.st_mtime_ns // 1_000_000 if stat.st_mtime_ns >= 0 else None
    return CleanupItem(path=path, size_bytes=stat.st_size, modified_ms=modified_ms)


def _root_file_stat(root: str) -> os.stat_result | None:
    try:
        return os.stat(root)
    except OSError:
        return None


def scan_category(definition: CategoryDefinition, now: float | None = None) -> CategoryScan:
    """
    Total up the files of a category that pass its time filter.

    Args:
        definition: Category to scan
        now: Reference time for the time filter

    Returns:
        CategoryScan with size and file count
    """
    cutoff = cutoff_time(definition.time_filter, now)
    size_bytes = 0
    file_count = 0

    for root in definition.roots:
        if not os.path.exists(root):
            continue

        if os.path.isfile(root):
            stat = _root_file_stat(root)
            if stat is not None and matches_cutoff(stat, cutoff):
                size_bytes += stat.st_size
                file_count += 1
            continue

        for entry in walk_tree(root):
            if not entry.is_file:
                continue
            try:
                stat = entry.stat()
            except OSError:
                continue
            if matches_cutoff(stat, cutoff):
                size_bytes += stat.st_size
                file_count += 1

    return CategoryScan(size_bytes, file_count)


def list_category_items(
    definition: CategoryDefinition,
    limit: int,
    now: float | None = None,
) -> CategoryItems:
    """
    List a category's matching files in walk order, up to a limit.

    has_more is set as soon as the limit is reached while roots or entries
    remain unvisited.

    Args:
        definition: Category to list
        limit: Maximum number of items across all roots
        now: Reference time for the time filter

    Returns:
        CategoryItems
    """
    cutoff = cutoff_time(definition.time_filter, now)
    items: list[CleanupItem] = []
    has_more = False

    for root in definition.roots:
        if len(items) >= limit:
            has_more = True
            break
        if not os.path.exists(root):
            continue

        if os.path.isfile(root):
            stat = _root_file_stat(root)
            if stat is not None and matches_cutoff(stat, cutoff):
                items.append(to_item(root, stat))
            continue

        for entry in walk_tree(root):
            if len(items) >= limit:
                has_more = True
                break
            if not entry.is_file:
                continue
            try:
                stat = entry.stat()
            except OSError:
                continue
            if matches_cutoff(stat, cutoff):
                items.append(to_item(entry.path, stat))

    return CategoryItems(items=items, has_more=has_more)


def directory_metrics(path: str) -> tuple[int, int]:
    """
    Size and file count of everything under a directory.

    Returns:
        Tuple of (total_bytes, file_count)
    """
    size = 0
    count = 0
    for entry in walk_tree(path):
        if not entry.is_file:
            continue
        try:
            size += entry.stat().st_size
        except OSError:
            continue
        count += 1
    return size, count


def scan_all_categories(
    categories: list[CategoryDefinition],
    now: float | None = None,
) -> list[CategorySummary]:
    """Scan every category, in catalog order."""
    summaries = []
    for definition in categories:
        scan = scan_category(definition, now)
        logger.debug(
            "Scanned %s: %d bytes in %d files", definition.id, scan.size_bytes, scan.file_count
        )
        summaries.append(
            CategorySummary(
                id=definition.id,
                title=definition.title,
                description=definition.description,
                size_bytes=scan.size_bytes,
                file_count=scan.file_count,
            )
        )
    return summaries
