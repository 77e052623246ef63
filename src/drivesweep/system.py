"""OS capabilities used by the engines.

Everything that talks to the operating system beyond plain file access lives
here behind small interfaces, so the engines can run against fakes.
"""

import ctypes
import logging
import os
import shutil
import subprocess
import sys
import tempfile
from pathlib import PureWindowsPath
from typing import Optional, Protocol

import psutil
from pydantic import BaseModel, ConfigDict, Field

from drivesweep.errors import CapabilityError, PlatformUnsupportedError
from drivesweep.models import HibernationInfo, VolumeInfo
from drivesweep.paths import same_path

logger = logging.getLogger(__name__)

SUPPORTED_PLATFORM = "win32"
DEFAULT_SYSTEM_DRIVE = "C:"


def ensure_supported_platform(platform: str | None = None) -> None:
    """Raise PlatformUnsupportedError unless running on Windows."""
    if (platform or sys.platform) != SUPPORTED_PLATFORM:
        raise PlatformUnsupportedError()


def join_path(base: str, *parts: str) -> str:
    """Join Windows path components without touching the filesystem."""
    return str(PureWindowsPath(base, *parts))


# =============================================================================
# Capability interfaces
# =============================================================================


class VolumeLister(Protocol):
    def list_volumes(self) -> list[str]:
        """Mount points of the attached volumes."""
        ...

    def usage(self, mount_point: str) -> tuple[int, int]:
        """(total_bytes, free_bytes) for a mount point."""
        ...


class RecycleBinService(Protocol):
    def query(self) -> tuple[int, int]:
        """(size_bytes, item_count) currently held in the trash."""
        ...

    def empty(self) -> None:
        """Empty the trash on every drive."""
        ...


class PowerConfig(Protocol):
    def set_hibernation(self, enabled: bool) -> None:
        """Turn the hibernation file on or off."""
        ...


# =============================================================================
# Implementations
# =============================================================================


class PsutilVolumeLister:
    """Volume enumeration backed by psutil."""

    def list_volumes(self) -> list[str]:
        try:
            return [part.mountpoint for part in psutil.disk_partitions(all=False)]
        except OSError as e:
            logger.warning("Volume enumeration failed: %s", e)
            return []

    def usage(self, mount_point: str) -> tuple[int, int]:
        usage = shutil.disk_usage(mount_point)
        return usage.total, usage.free


class _SHQUERYRBINFO(ctypes.Structure):
    _fields_ = [
        ("cbSize", ctypes.c_uint32),
        ("i64Size", ctypes.c_int64),
        ("i64NumItems", ctypes.c_int64),
    ]


SHERB_NOCONFIRMATION = 0x00000001
SHERB_NOPROGRESSUI = 0x00000002
SHERB_NOSOUND = 0x00000004


class WindowsRecycleBin:
    """Recycle bin access through the shell API."""

    def _shell32(self):
        return ctypes.windll.shell32  # type: ignore[attr-defined]

    def query(self) -> tuple[int, int]:
        info = _SHQUERYRBINFO()
        info.cbSize = ctypes.sizeof(_SHQUERYRBINFO)
        hr = self._shell32().SHQueryRecycleBinW(None, ctypes.byref(info))
        if hr < 0:
            raise CapabilityError(f"SHQueryRecycleBinW failed: 0x{hr & 0xFFFFFFFF:08X}")
        return max(info.i64Size, 0), max(info.i64NumItems, 0)

    def empty(self) -> None:
        flags = SHERB_NOCONFIRMATION | SHERB_NOPROGRESSUI | SHERB_NOSOUND
        hr = self._shell32().SHEmptyRecycleBinW(None, None, flags)
        if hr < 0:
            raise CapabilityError(f"SHEmptyRecycleBinW failed: 0x{hr & 0xFFFFFFFF:08X}")


class UnsupportedRecycleBin:
    """Stand-in used off Windows. Every call fails."""

    message = "Recycle bin fast clear is only supported on Windows."

    def query(self) -> tuple[int, int]:
        raise CapabilityError(self.message)

    def empty(self) -> None:
        raise CapabilityError(self.message)


class PowercfgPowerConfig:
    """Hibernation toggle through powercfg."""

    def set_hibernation(self, enabled: bool) -> None:
        command = ["powercfg", "/hibernate", "on" if enabled else "off"]
        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=60,
            )
        except subprocess.TimeoutExpired:
            raise CapabilityError("powercfg timed out") from None
        except OSError as e:
            raise CapabilityError(str(e)) from e

        if result.returncode != 0:
            logger.warning("powercfg exited with %s: %s", result.returncode, result.stderr.strip())
            raise CapabilityError(
                "Failed to update hibernation state. Try running as administrator."
            )


def default_recycle_bin(platform: str | None = None) -> RecycleBinService:
    if (platform or sys.platform) == SUPPORTED_PLATFORM:
        return WindowsRecycleBin()
    return UnsupportedRecycleBin()


# =============================================================================
# Environment-derived base locations
# =============================================================================


class SystemPaths(BaseModel):
    """Base locations the category catalog is composed from."""

    model_config = ConfigDict(frozen=True)

    system_drive: str = DEFAULT_SYSTEM_DRIVE
    system_root: str = Field(default_factory=lambda: join_path(DEFAULT_SYSTEM_DRIVE + "\\", "Windows"))
    user_profile: Optional[str] = None
    local_app_data: Optional[str] = None
    temp_dir: str = Field(default_factory=tempfile.gettempdir)
    volumes: tuple[str, ...] = ()
    volume_root: Optional[str] = None

    @property
    def drive_root(self) -> str:
        """Root of the system volume, e.g. C:\\."""
        if self.volume_root:
            return self.volume_root
        return self.system_drive.rstrip("\\/") + "\\"

    @classmethod
    def from_environment(
        cls,
        volume_lister: VolumeLister | None = None,
        environ: dict[str, str] | None = None,
    ) -> "SystemPaths":
        """
        Read base locations from the process environment.

        Args:
            volume_lister: Source of mount points (psutil by default)
            environ: Environment mapping (os.environ by default)

        Returns:
            SystemPaths for the current machine
        """
        env = os.environ if environ is None else environ
        lister = volume_lister or PsutilVolumeLister()

        system_drive = env.get("SystemDrive") or DEFAULT_SYSTEM_DRIVE
        system_root = env.get("SystemRoot") or join_path(system_drive + "\\", "Windows")

        return cls(
            system_drive=system_drive,
            system_root=system_root,
            user_profile=env.get("USERPROFILE") or None,
            local_app_data=env.get("LOCALAPPDATA") or None,
            temp_dir=tempfile.gettempdir(),
            volumes=tuple(lister.list_volumes()),
        )


# =============================================================================
# Volume and hibernation queries
# =============================================================================


def get_volume_info(system_paths: SystemPaths, volume_lister: VolumeLister) -> VolumeInfo:
    """
    Capacity of the system volume.

    Picks the listed volume matching the system drive root, or the first
    listed volume when none matches.

    Raises:
        CapabilityError: No volumes were listed or usage could not be read
    """
    volumes = volume_lister.list_volumes()
    if not volumes:
        raise CapabilityError("No disks detected.")

    mount_point = next(
        (volume for volume in volumes if same_path(volume, system_paths.drive_root)),
        volumes[0],
    )

    try:
        total, free = volume_lister.usage(mount_point)
    except OSError as e:
        raise CapabilityError(str(e)) from e

    used = max(total - free, 0)
    used_percent = (used / total) * 100 if total > 0 else 0.0

    return VolumeInfo(
        mount_point=mount_point,
        total_bytes=total,
        free_bytes=free,
        used_bytes=used,
        used_percent=used_percent,
    )


def hibernation_file(system_paths: SystemPaths) -> str:
    return join_path(system_paths.system_drive.rstrip("\\/") + "\\", "hiberfil.sys")


def get_hibernation_info(system_paths: SystemPaths, path: str | None = None) -> HibernationInfo:
    """
    Read hibernation state from the presence of hiberfil.sys.

    Raises:
        CapabilityError: The file exists but could not be read
    """
    path = path or hibernation_file(system_paths)
    try:
        size = os.stat(path).st_size
    except FileNotFoundError:
        return HibernationInfo(enabled=False, size_bytes=0, path=path)
    except OSError as e:
        raise CapabilityError(str(e)) from e
    return HibernationInfo(enabled=True, size_bytes=size, path=path)
