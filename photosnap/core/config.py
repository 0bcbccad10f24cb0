"""Configuration dataclasses with validation."""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Optional


class ExportCategory(Enum):
    """Parallel export variants of the same library item."""
    ORIGINALS = "originals"
    CURRENT = "current"
    DERIVED = "derived"


# Processing order within one run
CATEGORY_ORDER = (
    ExportCategory.ORIGINALS,
    ExportCategory.CURRENT,
    ExportCategory.DERIVED,
)


class ExportMode(Enum):
    """How files end up in the snapshot."""
    SNAPSHOT = "snapshot"  # Hard link where possible, copy otherwise
    COPY = "copy"          # Always full copy, no link sources


@dataclass(frozen=True, slots=True)
class SnapshotLayout:
    """Folder names below the target root."""
    target_path: Path
    in_progress_name: str = "InProgress"
    snapshot_name: str = "Snapshot"
    flat_name: str = ".flat"
    originals_name: str = "Originals"
    current_name: str = "Current"
    derived_name: str = "Derived"

    @property
    def staging_path(self) -> Path:
        return self.target_path / self.in_progress_name

    @property
    def snapshot_path(self) -> Path:
        return self.target_path / self.snapshot_name

    def category_name(self, category: ExportCategory) -> str:
        """Relative folder name of a category."""
        match category:
            case ExportCategory.ORIGINALS:
                return self.originals_name
            case ExportCategory.CURRENT:
                return self.current_name
            case ExportCategory.DERIVED:
                return self.derived_name
        raise ValueError(f"Unknown category: {category}")

    def category_relative_path(self, category: ExportCategory) -> Path:
        """Flat folder of a category relative to a snapshot root."""
        return Path(self.category_name(category)) / self.flat_name

    def flat_path(self, category: ExportCategory, root: Optional[Path] = None) -> Path:
        """Flat folder of a category below root (staging by default)."""
        base = self.staging_path if root is None else root
        return base / self.category_relative_path(category)


@dataclass(frozen=True, slots=True)
class ExportConfig:
    """Configuration for one export run.

    Immutable; passed into every component. Statistics live in a
    separate ExportStats object.
    """
    # Required
    target_path: Path

    # Categories
    export_originals: bool = True
    export_current: bool = True
    export_derived: bool = False

    # Linking
    mode: ExportMode = ExportMode.SNAPSHOT
    base_export_path: Optional[Path] = None
    link_previous: bool = False  # Use the current snapshot when no base is given

    # Layout
    layout: Optional[SnapshotLayout] = None
    build_albums: bool = False

    # Finalization
    delete_flat_folders: bool = False
    reset_stale_staging: bool = False
    delete_attempts: int = 3
    retry_delay: float = 0.0

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.layout is None:
            object.__setattr__(self, "layout", SnapshotLayout(self.target_path))
        elif self.layout.target_path != self.target_path:
            raise ValueError("Layout target path does not match target path")

        if not self.enabled_categories:
            raise ValueError("At least one export category must be enabled")

        if self.delete_attempts < 1:
            raise ValueError("Delete attempts must be at least 1")

        if self.retry_delay < 0:
            raise ValueError("Retry delay must not be negative")

        if self.delete_flat_folders and not self.build_albums:
            raise ValueError("Deleting flat folders requires album views (build_albums)")

        if self.delete_flat_folders and self.link_previous:
            raise ValueError(
                "Deleting flat folders conflicts with link_previous, "
                "the next run links against them"
            )

        if self.base_export_path is not None and self.base_export_path == self.staging_path:
            raise ValueError("Base export path must not be the staging folder")

    @property
    def enabled_categories(self) -> tuple[ExportCategory, ...]:
        """Enabled categories in processing order."""
        flags = {
            ExportCategory.ORIGINALS: self.export_originals,
            ExportCategory.CURRENT: self.export_current,
            ExportCategory.DERIVED: self.export_derived,
        }
        return tuple(c for c in CATEGORY_ORDER if flags[c])

    def is_enabled(self, category: ExportCategory) -> bool:
        return category in self.enabled_categories

    @property
    def resolved_layout(self) -> SnapshotLayout:
        assert self.layout is not None  # set in __post_init__
        return self.layout

    @property
    def staging_path(self) -> Path:
        return self.resolved_layout.staging_path

    @property
    def snapshot_path(self) -> Path:
        return self.resolved_layout.snapshot_path

    def flat_path(self, category: ExportCategory) -> Path:
        return self.resolved_layout.flat_path(category)

    @property
    def effective_base_export_path(self) -> Optional[Path]:
        """Export tree consulted for link sources, if any."""
        if self.base_export_path is not None:
            return self.base_export_path
        if self.link_previous:
            return self.snapshot_path
        return None

    def with_overrides(self, **kwargs) -> "ExportConfig":
        """Create a new config with some values overridden."""
        if "target_path" in kwargs and "layout" not in kwargs:
            kwargs["layout"] = None
        return replace(self, **kwargs)
