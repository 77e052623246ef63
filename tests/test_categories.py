"""Tests for cleanup categories."""

import os

from drivesweep.categories import (
    CATEGORY_TABLE,
    build_categories,
    describe,
    find_category,
    get_category_ids,
)
from drivesweep.models import CleanupStrategy
from drivesweep.paths import normalize_path
from drivesweep.system import SystemPaths

EXPECTED_IDS = [
    "temp_files",
    "recycle_bin",
    "downloads_old",
    "system_cache",
    "browser_cache",
    "system_logs",
    "windows_old",
]


class TestCategoryTable:
    def test_ids_in_definition_order(self):
        assert get_category_ids() == EXPECTED_IDS

    def test_ids_are_unique(self):
        ids = [row.id for row in CATEGORY_TABLE]
        assert len(ids) == len(set(ids))

    def test_rows_have_presentation_strings(self):
        for row in CATEGORY_TABLE:
            assert row.title
            assert row.description

    def test_describe_fills_in_age(self):
        rows = {row.id: row for row in CATEGORY_TABLE}
        assert describe(rows["downloads_old"], 90).endswith("older than 90 days")
        assert describe(rows["downloads_old"]) == rows["downloads_old"].description
        assert describe(rows["temp_files"], 90) == rows["temp_files"].description


class TestBuildCategories:
    def test_builds_every_row(self, system_paths):
        categories = build_categories(system_paths)
        assert [c.id for c in categories] == EXPECTED_IDS

    def test_temp_roots(self, system_paths):
        temp = find_category(build_categories(system_paths), "temp_files")
        assert temp.roots == (
            os.path.join(system_paths.system_root, "Temp"),
            system_paths.temp_dir,
            os.path.join(system_paths.local_app_data, "Temp"),
        )
        assert temp.remove_empty_dirs
        assert temp.time_filter.is_none

    def test_temp_roots_are_deduplicated(self, tmp_path):
        windows = str(tmp_path / "Windows")
        paths = SystemPaths(
            system_drive=str(tmp_path),
            system_root=windows,
            temp_dir=os.path.join(windows, "Temp").upper(),
            volume_root=str(tmp_path),
        )
        temp = find_category(build_categories(paths), "temp_files")
        assert len(temp.roots) == 1
        assert normalize_path(temp.roots[0]) == normalize_path(os.path.join(windows, "Temp"))

    def test_downloads_filter(self, system_paths):
        downloads = find_category(build_categories(system_paths), "downloads_old")
        assert downloads.roots == (os.path.join(system_paths.user_profile, "Downloads"),)
        assert downloads.time_filter.older_than_days == 30
        assert not downloads.remove_empty_dirs

    def test_downloads_age_is_configurable(self, system_paths):
        downloads = find_category(
            build_categories(system_paths, downloads_max_age_days=90), "downloads_old"
        )
        assert downloads.time_filter.older_than_days == 90
        assert "90 days" in downloads.description

    def test_strategies(self, system_paths):
        categories = {c.id: c for c in build_categories(system_paths)}
        assert categories["recycle_bin"].strategy == CleanupStrategy.RECYCLE_BIN
        assert categories["system_cache"].strategy == CleanupStrategy.FAST_CLEAR
        assert categories["browser_cache"].strategy == CleanupStrategy.FAST_CLEAR
        for cat_id in ("temp_files", "downloads_old", "system_logs", "windows_old"):
            assert categories[cat_id].strategy == CleanupStrategy.WALK

    def test_browser_cache_roots(self, system_paths):
        browser = find_category(build_categories(system_paths), "browser_cache")
        assert len(browser.roots) == 5
        for root in browser.roots:
            assert root.startswith(system_paths.local_app_data)

    def test_missing_profile_yields_empty_roots(self, tmp_path):
        paths = SystemPaths(
            system_drive=str(tmp_path),
            system_root=str(tmp_path / "Windows"),
            temp_dir=str(tmp_path / "scratch"),
            volume_root=str(tmp_path),
        )
        categories = {c.id: c for c in build_categories(paths)}
        assert categories["downloads_old"].roots == ()
        assert categories["browser_cache"].roots == ()
        assert len(categories["temp_files"].roots) == 2

    def test_recycle_bin_per_volume(self, system_paths):
        paths = system_paths.model_copy(update={"volumes": ("C:\\", "D:\\", "c:\\")})
        recycle = find_category(build_categories(paths), "recycle_bin")
        assert recycle.roots == (
            os.path.join("C:\\", "$Recycle.Bin"),
            os.path.join("D:\\", "$Recycle.Bin"),
        )

    def test_recycle_bin_falls_back_to_system_drive(self, system_paths):
        recycle = find_category(build_categories(system_paths), "recycle_bin")
        assert recycle.roots == (os.path.join(system_paths.drive_root, "$Recycle.Bin"),)

    def test_system_locations(self, system_paths):
        categories = {c.id: c for c in build_categories(system_paths)}
        root = system_paths.system_root
        assert categories["system_cache"].roots == (
            os.path.join(root, "SoftwareDistribution", "Download"),
            os.path.join(root, "SoftwareDistribution", "DeliveryOptimization", "Cache"),
        )
        assert categories["system_logs"].roots == (
            os.path.join(root, "Logs"),
            os.path.join(root, "System32", "LogFiles"),
            os.path.join(root, "Panther"),
        )
        assert categories["windows_old"].roots == (
            os.path.join(system_paths.drive_root, "Windows.old"),
        )

    def test_build_is_deterministic(self, system_paths):
        assert build_categories(system_paths) == build_categories(system_paths)


class TestFindCategory:
    def test_exists(self, system_paths):
        category = find_category(build_categories(system_paths), "system_logs")
        assert category is not None
        assert category.id == "system_logs"

    def test_not_exists(self, system_paths):
        assert find_category(build_categories(system_paths), "nonexistent") is None
