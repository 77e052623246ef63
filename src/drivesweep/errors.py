"""Operation-level errors for drivesweep.

Per-path delete failures are not exceptions; they are recorded in
CleanupResult.failed.
"""


class DriveSweepError(Exception):
    """Base class for operation-level failures."""


class PlatformUnsupportedError(DriveSweepError):
    """Raised before any work when the host is not a supported platform."""

    def __init__(self, message: str = "This app currently supports Windows only."):
        super().__init__(message)


class UnknownCategoryError(DriveSweepError):
    """Raised when a request names a category that is not in the catalog."""

    def __init__(self, category_id: str):
        self.category_id = category_id
        super().__init__("Unknown cleanup category.")


class CapabilityError(DriveSweepError):
    """An OS capability (recycle bin, volume list, power config) failed."""
