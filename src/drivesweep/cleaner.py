"""Cleanup execution with safety checks for drivesweep.

Nothing outside a category's roots (or, for clean_paths, outside the system
volume) is ever deleted. Delete failures are recorded per path and never stop
the rest of a batch.
"""

import logging
import os
import shutil
from pathlib import PurePath

from drivesweep.errors import CapabilityError
from drivesweep.models import (
    CategoryDefinition,
    CategoryStats,
    CleanRequest,
    CleanupResult,
    CleanupStrategy,
)
from drivesweep.paths import (
    contained_in,
    normalize_path,
    normalize_paths,
    resolve_path,
    same_path,
    within_any_root,
)
from drivesweep.scanner import cutoff_time, directory_metrics, matches_cutoff, walk_tree
from drivesweep.system import RecycleBinService

logger = logging.getLogger(__name__)

RECYCLE_BIN_PATH = "$Recycle.Bin"

OUTSIDE_CATEGORY_SCOPE = "Path is outside cleanup scope."
OUTSIDE_VOLUME_SCOPE = "Path is outside scan scope."
PATH_IS_DIRECTORY = "Path is a directory."
REFUSE_DRIVE_ROOT = "Refusing to delete drive root."


def _depth(path: str) -> int:
    return len(PurePath(path).parts)


def delete_file(
    path: str,
    cutoff: float | None,
    excluded: set[str],
    result: CleanupResult,
) -> None:
    """
    Delete one file if it is not excluded and passes the cutoff.

    Args:
        path: File to delete
        cutoff: Modification-time cutoff, or None for no filter
        excluded: Normalized paths to leave alone
        result: Accumulator for counters and failures
    """
    if normalize_path(path) in excluded:
        logger.debug("Skipping excluded file %s", path)
        return

    try:
        stat = os.stat(path)
    except OSError as e:
        result.record_failure(path, str(e))
        return

    if not matches_cutoff(stat, cutoff):
        return

    try:
        os.remove(path)
    except OSError as e:
        logger.warning("Could not delete %s: %s", path, e)
        result.record_failure(path, str(e))
        return

    result.record_deleted(stat.st_size)


def remove_empty_dirs(dirs: list[str]) -> None:
    """Remove directories deepest first, ignoring any that are not empty."""
    for directory in sorted(dirs, key=_depth, reverse=True):
        try:
            os.rmdir(directory)
        except OSError:
            continue


def walk_and_delete(
    definition: CategoryDefinition,
    excluded: set[str],
    now: float | None = None,
) -> CleanupResult:
    """
    Delete a category's matching files one by one.

    When the category removes empty directories, every directory visited
    (roots included) is removed afterwards if it ended up empty.
    """
    cutoff = cutoff_time(definition.time_filter, now)
    result = CleanupResult()
    dirs: list[str] = []

    for root in definition.roots:
        if not os.path.exists(root):
            continue

        if os.path.isfile(root):
            delete_file(root, cutoff, excluded, result)
            continue

        for entry in walk_tree(root):
            if entry.is_dir:
                if definition.remove_empty_dirs:
                    dirs.append(entry.path)
                continue
            if entry.is_file:
                delete_file(entry.path, cutoff, excluded, result)

        if definition.remove_empty_dirs:
            dirs.append(root)

    if definition.remove_empty_dirs and dirs:
        remove_empty_dirs(dirs)

    return result


def fast_clear(
    definition: CategoryDefinition,
    stats: CategoryStats | None,
) -> CleanupResult:
    """
    Remove every root of a category wholesale.

    Totals are taken from the caller's earlier scan because nothing is
    measured here. If any root fails the category reports zero, even though
    other roots may already be gone.
    """
    result = CleanupResult()

    for root in definition.roots:
        if not os.path.exists(root):
            continue
        try:
            if os.path.isfile(root):
                os.remove(root)
            else:
                shutil.rmtree(root)
        except OSError as e:
            logger.warning("Could not remove %s: %s", root, e)
            result.record_failure(root, str(e))

    if result.success and stats is not None:
        result.record_deleted(stats.size_bytes, stats.file_count)

    return result


def empty_recycle_bin(recycle_bin: RecycleBinService) -> CleanupResult:
    """Empty the trash through the platform capability, never by walking it."""
    result = CleanupResult()

    try:
        size_bytes, item_count = recycle_bin.query()
    except CapabilityError as e:
        logger.debug("Recycle bin query failed: %s", e)
        size_bytes, item_count = 0, 0

    try:
        recycle_bin.empty()
    except CapabilityError as e:
        logger.warning("Could not empty the recycle bin: %s", e)
        result.record_failure(RECYCLE_BIN_PATH, str(e))
        return result

    result.record_deleted(size_bytes, item_count)
    return result


def clean_category(
    definition: CategoryDefinition,
    excluded: set[str],
    stats: CategoryStats | None,
    recycle_bin: RecycleBinService,
    now: float | None = None,
) -> CleanupResult:
    """
    Clean one category, choosing a deletion strategy.

    The recycle-bin and fast-clear shortcuts only apply when nothing is
    excluded; otherwise the category is walked file by file.
    """
    if not excluded:
        if definition.strategy == CleanupStrategy.RECYCLE_BIN:
            return empty_recycle_bin(recycle_bin)
        if definition.strategy == CleanupStrategy.FAST_CLEAR and definition.remove_empty_dirs:
            return fast_clear(definition, stats)
    return walk_and_delete(definition, excluded, now)


def clean_included_paths(
    definition: CategoryDefinition,
    included: list[str],
    now: float | None = None,
) -> CleanupResult:
    """
    Delete exactly the listed files of a category.

    Each path must sit inside the category's roots and be a file. Scope is
    checked on the resolved path, and that same path is what gets deleted.
    Paths that fail the time filter are skipped without a failure. Duplicates
    (by normalized path) are handled once.
    """
    cutoff = cutoff_time(definition.time_filter, now)
    roots = [os.path.realpath(root) for root in definition.roots]
    result = CleanupResult()
    seen: set[str] = set()

    for path in included:
        target = resolve_path(path)
        key = normalize_path(target)
        if key in seen:
            continue
        seen.add(key)

        if not within_any_root(roots, target):
            result.record_failure(path, OUTSIDE_CATEGORY_SCOPE)
            continue

        try:
            stat = os.stat(target)
        except OSError as e:
            result.record_failure(path, str(e))
            continue

        if os.path.isdir(target):
            result.record_failure(path, PATH_IS_DIRECTORY)
            continue

        if not matches_cutoff(stat, cutoff):
            continue

        try:
            os.remove(target)
        except OSError as e:
            logger.warning("Could not delete %s: %s", path, e)
            result.record_failure(path, str(e))
            continue

        result.record_deleted(stat.st_size)

    return result


def clean_categories(
    categories: list[CategoryDefinition],
    request: CleanRequest,
    recycle_bin: RecycleBinService,
    now: float | None = None,
) -> CleanupResult:
    """
    Clean the requested categories in catalog order.

    A non-empty include list for a category overrides its selection: only
    those files are deleted, whether or not the category id was requested.

    Args:
        categories: Category catalog
        request: Ids, exclusions, inclusions and previous stats
        recycle_bin: Trash capability for the recycle-bin category
        now: Reference time for time filters

    Returns:
        Combined CleanupResult
    """
    requested = set(request.ids)
    total = CleanupResult()

    for definition in categories:
        included = request.included_paths.get(definition.id) or []
        if included:
            result = clean_included_paths(definition, included, now)
        elif definition.id in requested:
            excluded = normalize_paths(request.excluded_paths.get(definition.id, []))
            stats = request.category_stats.get(definition.id)
            result = clean_category(definition, excluded, stats, recycle_bin, now)
        else:
            continue

        logger.info(
            "Cleaned %s: %d bytes in %d files, %d failures",
            definition.id,
            result.deleted_bytes,
            result.deleted_count,
            len(result.failed),
        )
        total.merge(result)

    return total


def clean_paths(paths: list[str], volume_root: str) -> CleanupResult:
    """
    Delete user-confirmed paths from the large-item sweep.

    Every path is resolved before the scope and drive-root checks, so `.` and
    `..` segments cannot reach the volume root or anything outside it.

    Args:
        paths: Files or directories to delete
        volume_root: Root of the system volume; nothing outside it is touched

    Returns:
        CleanupResult
    """
    volume = os.path.realpath(volume_root)
    result = CleanupResult()
    seen: set[str] = set()

    for path in paths:
        target = resolve_path(path)
        key = normalize_path(target)
        if key in seen:
            continue
        seen.add(key)

        if not contained_in(volume, target):
            result.record_failure(path, OUTSIDE_VOLUME_SCOPE)
            continue
        if same_path(target, volume):
            result.record_failure(path, REFUSE_DRIVE_ROOT)
            continue

        try:
            stat = os.stat(target)
        except OSError as e:
            result.record_failure(path, str(e))
            continue

        try:
            if os.path.isdir(target):
                size, count = directory_metrics(target)
                shutil.rmtree(target)
            else:
                size, count = stat.st_size, 1
                os.remove(target)
        except OSError as e:
            logger.warning("Could not delete %s: %s", path, e)
            result.record_failure(path, str(e))
            continue

        result.record_deleted(size, count)

    return result
