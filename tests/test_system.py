"""Tests for OS capability wrappers."""

import subprocess
from types import SimpleNamespace
from unittest.mock import patch

import pytest

from conftest import FakeVolumeLister, make_file
from drivesweep.errors import CapabilityError, PlatformUnsupportedError
from drivesweep.system import (
    PowercfgPowerConfig,
    PsutilVolumeLister,
    SystemPaths,
    UnsupportedRecycleBin,
    WindowsRecycleBin,
    default_recycle_bin,
    ensure_supported_platform,
    get_hibernation_info,
    get_volume_info,
    hibernation_file,
    join_path,
)


class TestPlatform:
    def test_windows_is_supported(self):
        ensure_supported_platform("win32")

    def test_other_platforms_are_rejected(self):
        with pytest.raises(PlatformUnsupportedError, match="Windows only"):
            ensure_supported_platform("linux")

    def test_default_recycle_bin(self):
        assert isinstance(default_recycle_bin("win32"), WindowsRecycleBin)
        assert isinstance(default_recycle_bin("darwin"), UnsupportedRecycleBin)

    def test_unsupported_recycle_bin_always_fails(self):
        recycle_bin = UnsupportedRecycleBin()
        with pytest.raises(CapabilityError):
            recycle_bin.query()
        with pytest.raises(CapabilityError):
            recycle_bin.empty()


class TestSystemPaths:
    def test_from_environment(self):
        environ = {
            "SystemDrive": "D:",
            "SystemRoot": "D:\\WINDOWS",
            "USERPROFILE": "D:\\Users\\alice",
            "LOCALAPPDATA": "D:\\Users\\alice\\AppData\\Local",
        }
        paths = SystemPaths.from_environment(FakeVolumeLister(["C:\\", "D:\\"]), environ=environ)

        assert paths.system_drive == "D:"
        assert paths.system_root == "D:\\WINDOWS"
        assert paths.user_profile == "D:\\Users\\alice"
        assert paths.local_app_data == "D:\\Users\\alice\\AppData\\Local"
        assert paths.volumes == ("C:\\", "D:\\")
        assert paths.drive_root == "D:\\"

    def test_defaults_when_environment_is_empty(self):
        paths = SystemPaths.from_environment(FakeVolumeLister(), environ={})

        assert paths.system_drive == "C:"
        assert paths.system_root == "C:\\Windows"
        assert paths.user_profile is None
        assert paths.local_app_data is None
        assert paths.volumes == ()

    def test_volume_root_override(self, tmp_path):
        paths = SystemPaths(volume_root=str(tmp_path))
        assert paths.drive_root == str(tmp_path)

    def test_join_path(self):
        assert join_path("C:\\", "Windows", "Temp") == "C:\\Windows\\Temp"


class TestVolumeInfo:
    def test_picks_system_volume(self):
        lister = FakeVolumeLister(["C:\\", "D:\\"], total=200, free=50)

        volume = get_volume_info(SystemPaths(system_drive="D:"), lister)

        assert volume.mount_point == "D:\\"
        assert volume.total_bytes == 200
        assert volume.free_bytes == 50
        assert volume.used_bytes == 150
        assert volume.used_percent == 75.0

    def test_falls_back_to_first_volume(self):
        lister = FakeVolumeLister(["E:\\", "F:\\"])
        assert get_volume_info(SystemPaths(), lister).mount_point == "E:\\"

    def test_no_volumes(self):
        with pytest.raises(CapabilityError, match="No disks detected."):
            get_volume_info(SystemPaths(), FakeVolumeLister([]))

    def test_zero_capacity(self):
        volume = get_volume_info(SystemPaths(), FakeVolumeLister(["C:\\"], total=0, free=0))
        assert volume.used_percent == 0.0

    def test_usage_error(self):
        lister = FakeVolumeLister(["C:\\"])
        with patch.object(lister, "usage", side_effect=OSError("device not ready")):
            with pytest.raises(CapabilityError, match="device not ready"):
                get_volume_info(SystemPaths(), lister)

    def test_psutil_lister(self):
        partitions = [SimpleNamespace(mountpoint="C:\\"), SimpleNamespace(mountpoint="D:\\")]
        with patch("drivesweep.system.psutil.disk_partitions", return_value=partitions):
            assert PsutilVolumeLister().list_volumes() == ["C:\\", "D:\\"]

    def test_psutil_lister_failure_lists_nothing(self):
        with patch("drivesweep.system.psutil.disk_partitions", side_effect=OSError("boom")):
            assert PsutilVolumeLister().list_volumes() == []


class TestHibernation:
    def test_hibernation_file_location(self):
        assert hibernation_file(SystemPaths(system_drive="C:")) == "C:\\hiberfil.sys"

    def test_disabled_when_file_is_missing(self, tmp_path):
        info = get_hibernation_info(SystemPaths(), path=str(tmp_path / "hiberfil.sys"))
        assert not info.enabled
        assert info.size_bytes == 0

    def test_enabled_reports_file_size(self, tmp_path):
        hiberfil = make_file(tmp_path / "hiberfil.sys", size=6400)

        info = get_hibernation_info(SystemPaths(), path=str(hiberfil))

        assert info.enabled
        assert info.size_bytes == 6400
        assert info.path == str(hiberfil)


class TestPowercfg:
    def test_runs_powercfg(self):
        completed = subprocess.CompletedProcess(["powercfg"], 0, "", "")
        with patch("drivesweep.system.subprocess.run", return_value=completed) as run:
            PowercfgPowerConfig().set_hibernation(False)
        assert run.call_args[0][0] == ["powercfg", "/hibernate", "off"]

    def test_non_zero_exit(self):
        completed = subprocess.CompletedProcess(["powercfg"], 1, "", "Access denied")
        with patch("drivesweep.system.subprocess.run", return_value=completed):
            with pytest.raises(CapabilityError, match="Try running as administrator"):
                PowercfgPowerConfig().set_hibernation(True)

    def test_timeout(self):
        error = subprocess.TimeoutExpired(["powercfg"], 60)
        with patch("drivesweep.system.subprocess.run", side_effect=error):
            with pytest.raises(CapabilityError, match="timed out"):
                PowercfgPowerConfig().set_hibernation(True)

    def test_missing_executable(self):
        with patch("drivesweep.system.subprocess.run", side_effect=FileNotFoundError("powercfg")):
            with pytest.raises(CapabilityError):
                PowercfgPowerConfig().set_hibernation(True)
