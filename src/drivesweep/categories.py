"""Cleanup category definitions for drivesweep.

The catalog is a table of rows. Each row knows how to derive its roots from
the machine's base locations; adding a category means adding a row.
"""

import os
from collections.abc import Callable
from typing import NamedTuple

from drivesweep.models import CategoryDefinition, CleanupStrategy, TimeFilter
from drivesweep.paths import dedup_paths
from drivesweep.system import SystemPaths

DOWNLOADS_MAX_AGE_DAYS = 30


def _temp_roots(paths: SystemPaths) -> list[str]:
    roots = [os.path.join(paths.system_root, "Temp"), paths.temp_dir]
    if paths.local_app_data:
        roots.append(os.path.join(paths.local_app_data, "Temp"))
    return roots


def _recycle_bin_roots(paths: SystemPaths) -> list[str]:
    roots = [os.path.join(volume, "$Recycle.Bin") for volume in paths.volumes]
    if not roots:
        roots.append(os.path.join(paths.drive_root, "$Recycle.Bin"))
    return roots


def _downloads_roots(paths: SystemPaths) -> list[str]:
    if not paths.user_profile:
        return []
    return [os.path.join(paths.user_profile, "Downloads")]


def _system_cache_roots(paths: SystemPaths) -> list[str]:
    distribution = os.path.join(paths.system_root, "SoftwareDistribution")
    return [
        os.path.join(distribution, "Download"),
        os.path.join(distribution, "DeliveryOptimization", "Cache"),
    ]


def _browser_cache_roots(paths: SystemPaths) -> list[str]:
    if not paths.local_app_data:
        return []
    local = paths.local_app_data
    chrome_profile = os.path.join(local, "Google", "Chrome", "User Data", "Default")
    edge_profile = os.path.join(local, "Microsoft", "Edge", "User Data", "Default")
    return [
        os.path.join(local, "Microsoft", "Windows", "INetCache"),
        os.path.join(chrome_profile, "Cache"),
        os.path.join(chrome_profile, "Code Cache"),
        os.path.join(edge_profile, "Cache"),
        os.path.join(edge_profile, "Code Cache"),
    ]


def _system_log_roots(paths: SystemPaths) -> list[str]:
    return [
        os.path.join(paths.system_root, "Logs"),
        os.path.join(paths.system_root, "System32", "LogFiles"),
        os.path.join(paths.system_root, "Panther"),
    ]


def _windows_old_roots(paths: SystemPaths) -> list[str]:
    return [os.path.join(paths.drive_root, "Windows.old")]


class CategoryRow(NamedTuple):
    """One row of the category table."""

    id: str
    title: str
    description: str
    roots: Callable[[SystemPaths], list[str]]
    remove_empty_dirs: bool = True
    strategy: CleanupStrategy = CleanupStrategy.WALK
    max_age_days: int | None = None


# Definition order matters: cleaning and large-item matching walk it in order.
CATEGORY_TABLE: tuple[CategoryRow, ...] = (
    CategoryRow(
        id="temp_files",
        title="Temporary Files",
        description="Temporary files created by Windows and applications",
        roots=_temp_roots,
    ),
    CategoryRow(
        id="recycle_bin",
        title="Recycle Bin",
        description="Empty every file held in the Recycle Bin",
        roots=_recycle_bin_roots,
        strategy=CleanupStrategy.RECYCLE_BIN,
    ),
    CategoryRow(
        id="downloads_old",
        title="Downloads (Old Files)",
        description="Files in the Downloads folder older than 30 days",
        roots=_downloads_roots,
        remove_empty_dirs=False,
        max_age_days=DOWNLOADS_MAX_AGE_DAYS,
    ),
    CategoryRow(
        id="system_cache",
        title="System Cache",
        description="Windows Update downloads and delivery optimization cache",
        roots=_system_cache_roots,
        strategy=CleanupStrategy.FAST_CLEAR,
    ),
    CategoryRow(
        id="browser_cache",
        title="Browser Cache",
        description="Cached web content for Internet Explorer, Chrome and Edge",
        roots=_browser_cache_roots,
        strategy=CleanupStrategy.FAST_CLEAR,
    ),
    CategoryRow(
        id="system_logs",
        title="System Logs",
        description="Windows setup, event and application log files",
        roots=_system_log_roots,
    ),
    CategoryRow(
        id="windows_old",
        title="Previous Windows Installation",
        description="Old system files kept after a Windows upgrade",
        roots=_windows_old_roots,
    ),
)


def describe(row: CategoryRow, downloads_max_age_days: int = DOWNLOADS_MAX_AGE_DAYS) -> str:
    """Row description with the configured age threshold filled in."""
    if row.max_age_days is None or downloads_max_age_days == row.max_age_days:
        return row.description
    return row.description.replace(f"{row.max_age_days} days", f"{downloads_max_age_days} days")


def build_categories(
    paths: SystemPaths,
    downloads_max_age_days: int = DOWNLOADS_MAX_AGE_DAYS,
) -> list[CategoryDefinition]:
    """
    Compose the category catalog for a machine.

    Args:
        paths: Environment-derived base locations
        downloads_max_age_days: Age threshold for rows that filter by age

    Returns:
        Category definitions in table order
    """
    categories = []
    for row in CATEGORY_TABLE:
        time_filter = TimeFilter()
        if row.max_age_days is not None:
            time_filter = TimeFilter.older_than(downloads_max_age_days)

        categories.append(
            CategoryDefinition(
                id=row.id,
                title=row.title,
                description=describe(row, downloads_max_age_days),
                roots=tuple(dedup_paths(row.roots(paths))),
                time_filter=time_filter,
                remove_empty_dirs=row.remove_empty_dirs,
                strategy=row.strategy,
            )
        )
    return categories


def find_category(
    categories: list[CategoryDefinition], category_id: str
) -> CategoryDefinition | None:
    """Get a category by ID."""
    return next((c for c in categories if c.id == category_id), None)


def get_category_ids() -> list[str]:
    """All category IDs in definition order."""
    return [row.id for row in CATEGORY_TABLE]
