"""Protocol definitions (interfaces) for dependency injection."""
from __future__ import annotations

from abc import abstractmethod
from pathlib import Path
from typing import Iterable, Optional, Protocol

from .config import ExportCategory, SnapshotLayout
from .models import ExportItem, ExportStats, FlatFolderDescriptor, LinkOrCopyResult


class MetadataFeed(Protocol):
    """Interface for the upstream list of items to export.

    Implementations:
    - ManifestFeed: Reads a JSON manifest
    - DirectoryFeed: Walks one library folder per category
    """

    @abstractmethod
    def items(self, category: ExportCategory) -> Iterable[ExportItem]:
        """Items to export for a category, in export order."""
        ...


class Materializer(Protocol):
    """Interface for producing a target file from a source file."""

    @abstractmethod
    def materialize(self, source: Path, target: Path) -> LinkOrCopyResult:
        """Create target from source, by hard link or by copy."""
        ...

    @property
    @abstractmethod
    def stats(self) -> ExportStats:
        """Statistics updated on every successful materialization."""
        ...

    @abstractmethod
    def log_timings(self) -> None:
        """Log accumulated operation timings."""
        ...


class CandidatePolicy(Protocol):
    """Interface for building the ordered link-source list of a category."""

    def __call__(
        self,
        category: ExportCategory,
        staging_path: Path,
        base_export_path: Optional[Path],
        layout: SnapshotLayout,
        enabled: tuple[ExportCategory, ...],
    ) -> tuple[FlatFolderDescriptor, ...]:
        ...


class ProgressReporter(Protocol):
    """Interface for progress reporting."""

    @abstractmethod
    def start_phase(self, name: str, total: int) -> None:
        """Start a new processing phase."""
        ...

    @abstractmethod
    def advance_phase(self, amount: int = 1) -> None:
        """Advance the current phase by an amount."""
        ...

    @abstractmethod
    def end_phase(self) -> None:
        """Complete current phase."""
        ...

    @abstractmethod
    def info(self, message: str) -> None:
        """Log an info message."""
        ...

    @abstractmethod
    def warning(self, message: str) -> None:
        """Log a warning message."""
        ...

    @abstractmethod
    def error(self, message: str) -> None:
        """Log an error message."""
        ...
