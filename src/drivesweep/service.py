"""Boundary operations exposed to the enclosing shell.

Each operation is a single blocking unit of work. ``submit`` runs one on the
worker thread so an interactive shell stays responsive; there is no
cancellation and no locking between overlapping requests.
"""

import logging
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from typing import TypeVar

from drivesweep import categories as catalog
from drivesweep import system
from drivesweep.cleaner import clean_categories, clean_paths
from drivesweep.config import Settings
from drivesweep.errors import UnknownCategoryError
from drivesweep.large_items import scan_large_items
from drivesweep.models import (
    CategoryDefinition,
    CategoryItems,
    CategorySummary,
    CleanRequest,
    CleanupResult,
    HibernationInfo,
    LargeItem,
    VolumeInfo,
)
from drivesweep.scanner import list_category_items, scan_all_categories
from drivesweep.system import (
    PowerConfig,
    PowercfgPowerConfig,
    PsutilVolumeLister,
    RecycleBinService,
    SystemPaths,
    VolumeLister,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_LARGE_ITEMS_LIMIT = 1000
MAX_CATEGORY_ITEMS_LIMIT = 2000

BYTES_PER_MB = 1024 * 1024


class Sweeper:
    """
    Entry point for every shell-facing operation.

    OS capabilities are injected; the defaults talk to the real machine.

    Args:
        volume_lister: Mount point enumeration and usage
        recycle_bin: Trash query and emptying
        power_config: Hibernation toggle
        system_paths: Base locations; read from the environment per call when None
        settings: User preferences
        platform: Platform name checked before each operation (sys.platform when None)
    """

    def __init__(
        self,
        volume_lister: VolumeLister | None = None,
        recycle_bin: RecycleBinService | None = None,
        power_config: PowerConfig | None = None,
        system_paths: SystemPaths | None = None,
        settings: Settings | None = None,
        platform: str | None = None,
    ):
        self.platform = platform
        self.volume_lister = volume_lister or PsutilVolumeLister()
        self.recycle_bin = recycle_bin or system.default_recycle_bin(platform)
        self.power_config = power_config or PowercfgPowerConfig()
        self.settings = settings or Settings()
        self._system_paths = system_paths
        self._executor: ThreadPoolExecutor | None = None

    # -------------------------------------------------------------------------
    # Worker thread
    # -------------------------------------------------------------------------

    def submit(self, operation: Callable[..., T], *args, **kwargs) -> "Future[T]":
        """Run an operation on the worker thread."""
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="drivesweep")
        return self._executor.submit(operation, *args, **kwargs)

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def __enter__(self) -> "Sweeper":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _ensure_platform(self) -> None:
        system.ensure_supported_platform(self.platform)

    def system_paths(self) -> SystemPaths:
        if self._system_paths is not None:
            return self._system_paths
        return SystemPaths.from_environment(self.volume_lister)

    def categories(self) -> list[CategoryDefinition]:
        """Build the catalog fresh for one request."""
        return catalog.build_categories(
            self.system_paths(),
            downloads_max_age_days=self.settings.downloads_max_age_days,
        )

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def get_volume_info(self) -> VolumeInfo:
        self._ensure_platform()
        return system.get_volume_info(self.system_paths(), self.volume_lister)

    def get_hibernation_info(self) -> HibernationInfo:
        self._ensure_platform()
        return system.get_hibernation_info(self.system_paths())

    def set_hibernation_enabled(self, enabled: bool) -> HibernationInfo:
        """Toggle hibernation, then report the new state."""
        self._ensure_platform()
        self.power_config.set_hibernation(enabled)
        return system.get_hibernation_info(self.system_paths())

    def scan_categories(self) -> list[CategorySummary]:
        self._ensure_platform()
        return scan_all_categories(self.categories())

    def scan_large_items(
        self,
        limit: int | None = None,
        min_size_mb: int | None = None,
    ) -> list[LargeItem]:
        """
        Sweep the system volume.

        Args:
            limit: Result cap (settings default, at most 1000)
            min_size_mb: Size threshold in MiB (settings default)
        """
        self._ensure_platform()
        limit = min(
            limit if limit is not None else self.settings.large_items_limit,
            MAX_LARGE_ITEMS_LIMIT,
        )
        if min_size_mb is None:
            min_size_mb = self.settings.large_items_min_size_mb
        paths = self.system_paths()
        return scan_large_items(
            paths.drive_root,
            self.categories(),
            limit=max(limit, 0),
            min_size_bytes=max(min_size_mb, 0) * BYTES_PER_MB,
        )

    def list_category_items(self, category_id: str, limit: int | None = None) -> CategoryItems:
        """
        List one category's files.

        Raises:
            UnknownCategoryError: The id is not in the catalog
        """
        self._ensure_platform()
        limit = min(
            limit if limit is not None else self.settings.category_items_limit,
            MAX_CATEGORY_ITEMS_LIMIT,
        )
        definition = catalog.find_category(self.categories(), category_id)
        if definition is None:
            raise UnknownCategoryError(category_id)
        return list_category_items(definition, max(limit, 0))

    def clean_categories(self, request: CleanRequest) -> CleanupResult:
        self._ensure_platform()
        logger.info("Cleaning categories %s", ", ".join(request.ids) or "(included paths only)")
        return clean_categories(self.categories(), request, self.recycle_bin)

    def clean_large_items(self, paths: list[str]) -> CleanupResult:
        self._ensure_platform()
        return clean_paths(paths, self.system_paths().drive_root)
