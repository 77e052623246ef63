"""Data models for drivesweep."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base for records that cross the service boundary (camelCase on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        """Dump using camelCase keys."""
        return self.model_dump(by_alias=True)


class CleanupStrategy(str, Enum):
    """How a category is deleted when no exclusions apply."""

    WALK = "walk"  # Per-file walk and delete
    FAST_CLEAR = "fast_clear"  # Remove each root wholesale
    RECYCLE_BIN = "recycle_bin"  # Platform trash-emptying capability


class TimeFilter(BaseModel):
    """Age filter on last-modified time. No age means everything matches."""

    model_config = ConfigDict(frozen=True)

    older_than_days: Optional[int] = Field(None, ge=0, description="Match files older than N days")

    @classmethod
    def older_than(cls, days: int) -> "TimeFilter":
        return cls(older_than_days=days)

    @property
    def is_none(self) -> bool:
        return self.older_than_days is None


class CategoryDefinition(BaseModel):
    """Definition of a cleanup category, built fresh per request."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Stable category key")
    title: str = Field(..., description="Display title")
    description: str = Field(..., description="Display description")
    roots: tuple[str, ...] = Field(default=(), description="Files or directories to search")
    time_filter: TimeFilter = Field(default_factory=TimeFilter)
    remove_empty_dirs: bool = Field(
        default=False,
        description="Remove emptied directories (and roots) after deleting files",
    )
    strategy: CleanupStrategy = Field(default=CleanupStrategy.WALK)


class CleanupItem(WireModel):
    """A single reclaimable file."""

    path: str
    size_bytes: int
    modified_ms: Optional[int] = None


class CategoryItems(WireModel):
    """Listing of a category's files, capped at a limit."""

    items: list[CleanupItem] = Field(default_factory=list)
    has_more: bool = False


class CategorySummary(WireModel):
    """Scan totals for one category."""

    id: str
    title: str
    description: str
    size_bytes: int = 0
    file_count: int = 0


class CategoryStats(WireModel):
    """Previously computed totals supplied by the caller."""

    size_bytes: int = 0
    file_count: int = 0


class CleanupError(WireModel):
    """A path that could not be deleted."""

    path: str
    message: str


class CleanupResult(WireModel):
    """Result of a cleanup operation."""

    deleted_bytes: int = Field(0, description="Bytes removed successfully")
    deleted_count: int = Field(0, description="Files removed successfully")
    failed: list[CleanupError] = Field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.failed

    def record_failure(self, path: str, message: str) -> None:
        self.failed.append(CleanupError(path=path, message=message))

    def record_deleted(self, size: int, count: int = 1) -> None:
        self.deleted_bytes += size
        self.deleted_count += count

    def merge(self, other: "CleanupResult") -> "CleanupResult":
        """Fold another result into this one and return self."""
        self.deleted_bytes += other.deleted_bytes
        self.deleted_count += other.deleted_count
        self.failed.extend(other.failed)
        return self


class LargeItem(WireModel):
    """A file or directory found by the whole-volume sweep."""

    path: str
    name: str
    size_bytes: int
    is_dir: bool = False
    suspicious: bool = False
    category_id: Optional[str] = None


class CleanRequest(WireModel):
    """What the user asked to clean."""

    ids: list[str] = Field(default_factory=list)
    excluded_paths: dict[str, list[str]] = Field(default_factory=dict)
    included_paths: dict[str, list[str]] = Field(default_factory=dict)
    category_stats: dict[str, CategoryStats] = Field(default_factory=dict)


class VolumeInfo(WireModel):
    """Capacity of the system volume."""

    mount_point: str
    total_bytes: int
    free_bytes: int
    used_bytes: int
    used_percent: float

    @property
    def total_gb(self) -> float:
        return self.total_bytes / (1000**3)

    @property
    def used_gb(self) -> float:
        return self.used_bytes / (1000**3)

    @property
    def free_gb(self) -> float:
        return self.free_bytes / (1000**3)


class HibernationInfo(WireModel):
    """State of the hibernation file."""

    enabled: bool
    size_bytes: int = 0
    path: str
