"""Domain models - immutable data classes."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from .config import ExportCategory


class MaterializeMethod(Enum):
    """How a target file was produced."""
    LINKED = "linked"
    COPIED = "copied"


def check_album_name(album: str) -> None:
    """Reject album paths that leave the category folder or hide in it.

    Hidden components are reserved for layout folders such as .flat.
    """
    parts = Path(album).parts
    if not album or not parts:
        raise ValueError("Album name must not be empty")
    if Path(album).is_absolute() or ".." in parts:
        raise ValueError(f"Album path must be relative: {album}")
    if any(part.startswith(".") for part in parts):
        raise ValueError(f"Album path must not contain hidden folders: {album}")


@dataclass(frozen=True, slots=True)
class ExportItem:
    """One library asset to export for a category.

    `relative_path` locates the file below a category's flat folder; the
    same relative path is looked up in every candidate folder.
    """
    relative_path: Path
    source: Path
    albums: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if self.relative_path.is_absolute():
            raise ValueError(f"Relative path must not be absolute: {self.relative_path}")
        if ".." in self.relative_path.parts:
            raise ValueError(f"Relative path must stay inside the export: {self.relative_path}")
        for album in self.albums:
            check_album_name(album)

    @property
    def name(self) -> str:
        return self.relative_path.name


@dataclass(frozen=True, slots=True)
class FlatFolderDescriptor:
    """A folder that may already hold files to link against."""
    path: Path
    category: ExportCategory

    def candidate_for(self, relative_path: Path) -> Path:
        return self.path / relative_path


@dataclass(frozen=True, slots=True)
class LinkOrCopyResult:
    """Result of materializing a single file."""
    source: Path
    target: Path
    method: MaterializeMethod
    size: int = 0

    @property
    def linked(self) -> bool:
        return self.method == MaterializeMethod.LINKED


@dataclass(slots=True)
class ExportStats:
    """Mutable statistics for an export run."""
    linked: int = 0
    copied: int = 0
    bytes_linked: int = 0
    bytes_copied: int = 0
    from_candidates: int = 0
    from_source: int = 0
    album_links: int = 0
    per_category: dict[str, int] = field(default_factory=dict)
    elapsed_seconds: float = 0.0

    @property
    def files_total(self) -> int:
        return self.linked + self.copied

    def record(self, result: LinkOrCopyResult) -> None:
        """Record a successful materialization."""
        match result.method:
            case MaterializeMethod.LINKED:
                self.linked += 1
                self.bytes_linked += result.size
            case MaterializeMethod.COPIED:
                self.copied += 1
                self.bytes_copied += result.size

    def record_item(self, category: ExportCategory, from_candidate: bool) -> None:
        """Record an exported flat-folder item."""
        if from_candidate:
            self.from_candidates += 1
        else:
            self.from_source += 1
        self.per_category[category.value] = self.per_category.get(category.value, 0) + 1

    def category_count(self, category: ExportCategory) -> int:
        return self.per_category.get(category.value, 0)

    def summary(self) -> dict[str, int]:
        return {
            "linked": self.linked,
            "copied": self.copied,
            "bytes_linked": self.bytes_linked,
            "bytes_copied": self.bytes_copied,
            "from_candidates": self.from_candidates,
            "from_source": self.from_source,
            "album_links": self.album_links,
        }


@dataclass(frozen=True, slots=True)
class ExportResult:
    """Outcome of a complete export run."""
    snapshot_path: Path
    stats: ExportStats
    flat_cleanup_failures: tuple[Path, ...] = field(default_factory=tuple)
    replaced_previous: bool = False
    base_export_path: Optional[Path] = None
